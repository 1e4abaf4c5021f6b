from __future__ import annotations

from datetime import UTC, datetime, timedelta

from rolesync.domain.model import Identity, SyncLog


def test_record_status_updates_in_place() -> None:
    identity = Identity(user_id="user-1")
    first_at = datetime(2024, 1, 1, tzinfo=UTC)

    identity.record_status(tier_name="Gen0", role_id="role-gen0", qualified=True, at=first_at)
    identity.record_status(
        tier_name="Gen0",
        role_id="role-gen0",
        qualified=False,
        at=first_at + timedelta(minutes=1),
    )

    assert len(identity.statuses) == 1
    status = identity.status_for("Gen0")
    assert status is not None
    assert status.qualified is False
    assert status.updated_at == first_at + timedelta(minutes=1)
    assert identity.status_for("Gen1") is None


def test_never_verified_identity_is_due() -> None:
    cutoff = datetime(2024, 1, 1, tzinfo=UTC)

    assert Identity(user_id="user-1").is_due(cutoff)
    assert Identity(user_id="user-2", last_verified=cutoff).is_due(cutoff)
    assert not Identity(user_id="user-3", last_verified=cutoff + timedelta(seconds=1)).is_due(
        cutoff
    )


def test_sync_log_finish_sets_counters() -> None:
    start = datetime(2024, 1, 1, tzinfo=UTC)
    run = SyncLog(start_time=start)

    assert not run.finished
    run.finish(at=start + timedelta(seconds=3), selected=3, verified=2, skipped=1)

    assert run.finished
    assert (run.selected, run.verified, run.skipped, run.failed) == (3, 2, 1, 0)
