"""What to do with an identity when its holdings could not be fetched.

A policy maps a ``HoldingsResult`` to the snapshot to classify, or to ``None``
to leave the identity's roles and stored flags untouched for this run.
"""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from rolesync.domain.model import EMPTY_SNAPSHOT

if TYPE_CHECKING:
    from rolesync.domain.model import HoldingsResult, HoldingsSnapshot

log = getLogger(__name__)

HoldingsFailurePolicy = Callable[["HoldingsResult"], "HoldingsSnapshot | None"]


def fail_open_to_ineligible(result: HoldingsResult) -> HoldingsSnapshot | None:
    """Treat a failed query as "holds nothing": tier roles are revoked.

    A data-source outage therefore removes access until the next successful run.
    """

    if result.snapshot is not None:
        return result.snapshot
    log.warning("Holdings unavailable (%s); treating wallet as empty", _describe(result))
    return EMPTY_SNAPSHOT


def retain_prior_state(result: HoldingsResult) -> HoldingsSnapshot | None:
    """Skip reconciliation when the query failed so current roles are kept."""

    if result.snapshot is not None:
        return result.snapshot
    log.warning("Holdings unavailable (%s); keeping current roles", _describe(result))
    return None


POLICIES: dict[str, HoldingsFailurePolicy] = {
    "fail-open": fail_open_to_ineligible,
    "retain": retain_prior_state,
}


def get_policy(name: str) -> HoldingsFailurePolicy:
    try:
        return POLICIES[name]
    except KeyError:
        raise ValueError(f"Unknown holdings failure policy: {name}") from None


def _describe(result: HoldingsResult) -> str:
    error = result.error
    if error is None:
        return "no error"
    if error.status_code is not None:
        return f"HTTP {error.status_code}: {error.message}"
    return error.message
