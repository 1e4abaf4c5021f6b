from __future__ import annotations

from collections.abc import Iterator  # noqa: TC003
from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from rolesync.domain.model import Identity, SyncLog, TierDefinition, VerificationRequest
from rolesync.ui.api import create_app
from tests.helpers.fakes import FakeUnitOfWork

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def uow() -> FakeUnitOfWork:
    uow = FakeUnitOfWork()
    holder = Identity(user_id="user-1")
    holder.record_status(tier_name="Gen0", role_id="role-gen0", qualified=True, at=NOW)
    holder.record_status(tier_name="Gen1", role_id="role-gen1", qualified=True, at=NOW)
    lapsed = Identity(user_id="user-2")
    lapsed.record_status(tier_name="Gen0", role_id="role-gen0", qualified=False, at=NOW)
    uow.identities.add(holder)
    uow.identities.add(lapsed)
    uow.identities.add(Identity(user_id="user-3"))
    uow.repositories.verification_requests.add(
        VerificationRequest(user_id="user-1", created_at=NOW)
    )
    return uow


@pytest.fixture
def client(uow: FakeUnitOfWork, tiers: tuple[TierDefinition, ...]) -> Iterator[TestClient]:
    with TestClient(create_app(unit_of_work_factory=uow, tiers=tiers)) as test_client:
        yield test_client


def test_total_counts_every_identity(client: TestClient) -> None:
    response = client.get("/stats/total")

    assert response.status_code == 200
    assert response.json() == {"count": 3}


def test_generation_counts(client: TestClient) -> None:
    assert client.get("/stats/gen0").json() == {"count": 1}
    assert client.get("/stats/gen1").json() == {"count": 1}


def test_tier_lookup_is_case_insensitive(client: TestClient) -> None:
    assert client.get("/stats/tiers/gen0").json() == {"count": 1}


def test_unknown_tier_is_404(client: TestClient) -> None:
    response = client.get("/stats/tiers/platinum")

    assert response.status_code == 404
    assert "platinum" in response.json()["detail"]


def test_verification_requests_count(client: TestClient) -> None:
    assert client.get("/stats/verifications").json() == {"count": 1}


def test_latest_sync_404_until_a_run_exists(client: TestClient, uow: FakeUnitOfWork) -> None:
    assert client.get("/stats/sync/latest").status_code == 404

    run = SyncLog(start_time=NOW)
    run.finish(at=NOW + timedelta(seconds=5), selected=3, verified=2, skipped=1)
    uow.sync_logs.add(run)

    body = client.get("/stats/sync/latest").json()
    assert body["id"] == str(run.id)
    assert body["selected"] == 3
    assert body["verified"] == 2
    assert body["skipped"] == 1
    assert body["failed"] == 0
    assert body["end_time"] is not None
