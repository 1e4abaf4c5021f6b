from __future__ import annotations

from collections.abc import Callable  # noqa: TC003
from datetime import UTC, datetime, timedelta

import pytest

from rolesync.adapters.sqlalchemy import (
    SqlAlchemyIdentityRepository,
    SqlAlchemyUnitOfWork,
    StartupError,
    shutdown,
)
from rolesync.domain.model import Identity, SyncLog, VerificationRequest
from rolesync.domain.ports import IdentityRepository

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


def _seed(factory: Callable[[], SqlAlchemyUnitOfWork], *identities: Identity) -> None:
    with factory() as uow:
        for identity in identities:
            uow.repositories.identities.add(identity)
        uow.commit()


def test_repository_satisfies_port(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    with sqlite_unit_of_work() as uow:
        assert isinstance(uow.repositories.identities, SqlAlchemyIdentityRepository)
        assert isinstance(uow.repositories.identities, IdentityRepository)


def test_find_due_selects_never_and_stale_identities(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    cutoff = NOW - timedelta(minutes=1)
    _seed(
        sqlite_unit_of_work,
        Identity(user_id="never"),
        Identity(user_id="stale", last_verified=cutoff - timedelta(seconds=1)),
        Identity(user_id="edge", last_verified=cutoff),
        Identity(user_id="fresh", last_verified=cutoff + timedelta(seconds=1)),
    )

    with sqlite_unit_of_work() as uow:
        due = uow.repositories.identities.find_due(cutoff)

    assert {identity.user_id for identity in due} == {"never", "stale", "edge"}


def test_saved_statuses_drive_qualified_counts(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    first = Identity(user_id="user-1", wallet_address="0x1")
    second = Identity(user_id="user-2", wallet_address="0x2")
    _seed(sqlite_unit_of_work, first, second)

    with sqlite_unit_of_work() as uow:
        loaded = uow.repositories.identities.find_due(NOW)
    by_user = {identity.user_id: identity for identity in loaded}

    by_user["user-1"].record_status(tier_name="Gen0", role_id="role-gen0", qualified=True, at=NOW)
    by_user["user-1"].record_status(tier_name="Gen1", role_id="role-gen1", qualified=False, at=NOW)
    by_user["user-2"].record_status(tier_name="Gen0", role_id="role-gen0", qualified=True, at=NOW)
    for identity in by_user.values():
        identity.last_verified = NOW
        with sqlite_unit_of_work() as uow:
            uow.repositories.identities.save(identity)
            uow.commit()

    with sqlite_unit_of_work() as uow:
        identities = uow.repositories.identities
        assert identities.count() == 2
        assert identities.count_qualified("role-gen0") == 2
        assert identities.count_qualified("role-gen1") == 0
        reloaded = identities.get(first.id)
        assert reloaded is not None
        assert reloaded.last_verified == NOW
        assert [status.tier_name for status in reloaded.statuses] == ["Gen0", "Gen1"]
        assert identities.find_due(NOW - timedelta(minutes=1)) == []


def test_flag_update_replaces_existing_status(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    identity = Identity(user_id="user-1")
    identity.record_status(tier_name="Gen0", role_id="role-gen0", qualified=True, at=NOW)
    _seed(sqlite_unit_of_work, identity)

    identity.record_status(
        tier_name="Gen0",
        role_id="role-gen0",
        qualified=False,
        at=NOW + timedelta(minutes=1),
    )
    with sqlite_unit_of_work() as uow:
        uow.repositories.identities.save(identity)
        uow.commit()

    with sqlite_unit_of_work() as uow:
        reloaded = uow.repositories.identities.get(identity.id)
        assert reloaded is not None
        assert len(reloaded.statuses) == 1
        assert reloaded.statuses[0].qualified is False
        assert uow.repositories.identities.count_qualified("role-gen0") == 0


def test_sync_log_latest_and_finalize(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    older = SyncLog(start_time=NOW - timedelta(minutes=1))
    newer = SyncLog(start_time=NOW)
    with sqlite_unit_of_work() as uow:
        uow.repositories.sync_logs.add(older)
        uow.repositories.sync_logs.add(newer)
        uow.commit()

    newer.finish(at=NOW + timedelta(seconds=2), selected=2, verified=1, skipped=1)
    with sqlite_unit_of_work() as uow:
        uow.repositories.sync_logs.save(newer)
        uow.commit()

    with sqlite_unit_of_work() as uow:
        latest = uow.repositories.sync_logs.latest()
        assert latest is not None
        assert latest.id == newer.id
        assert latest.end_time == NOW + timedelta(seconds=2)
        assert (latest.selected, latest.verified, latest.skipped) == (2, 1, 1)


def test_verification_requests_are_counted(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    with sqlite_unit_of_work() as uow:
        assert uow.repositories.verification_requests.count() == 0
        uow.repositories.verification_requests.add(
            VerificationRequest(user_id="user-1", created_at=NOW)
        )
        uow.commit()

    with sqlite_unit_of_work() as uow:
        assert uow.repositories.verification_requests.count() == 1


def test_rollback_on_error_discards_changes(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    with pytest.raises(RuntimeError), sqlite_unit_of_work() as uow:
        uow.repositories.identities.add(Identity(user_id="user-1"))
        raise RuntimeError("boom")

    with sqlite_unit_of_work() as uow:
        assert uow.repositories.identities.count() == 0


def test_unit_of_work_requires_startup() -> None:
    shutdown()

    with pytest.raises(StartupError):
        SqlAlchemyUnitOfWork()
