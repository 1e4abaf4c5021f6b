from __future__ import annotations

import pytest

from rolesync.domain.model import EMPTY_SNAPSHOT, HoldingsResult, HoldingsSnapshot
from rolesync.domain.reconciliation import (
    fail_open_to_ineligible,
    get_policy,
    retain_prior_state,
)


def test_successful_result_passes_through_both_policies() -> None:
    snapshot = HoldingsSnapshot(owned=(1,), staked=(2,))
    result = HoldingsResult.success(snapshot)

    assert fail_open_to_ineligible(result) is snapshot
    assert retain_prior_state(result) is snapshot


def test_fail_open_treats_failure_as_empty_wallet(caplog: pytest.LogCaptureFixture) -> None:
    result = HoldingsResult.failure("Bad Gateway", status_code=502)

    with caplog.at_level("WARNING"):
        snapshot = fail_open_to_ineligible(result)

    assert snapshot is EMPTY_SNAPSHOT
    assert "HTTP 502" in caplog.text


def test_retain_skips_on_failure() -> None:
    assert retain_prior_state(HoldingsResult.failure("timeout")) is None


def test_get_policy_by_name() -> None:
    assert get_policy("fail-open") is fail_open_to_ineligible
    assert get_policy("retain") is retain_prior_state
    with pytest.raises(ValueError, match="Unknown holdings failure policy"):
        get_policy("ignore")


def test_holdings_result_requires_exactly_one_side() -> None:
    with pytest.raises(ValueError, match="exactly one"):
        HoldingsResult()
