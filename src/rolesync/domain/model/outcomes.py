"""Per-tier reconciliation inputs and results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class RoleAction(StrEnum):
    ADD = "add"
    REMOVE = "remove"
    NONE = "none"
    SKIPPED = "skipped"


@dataclass(frozen=True, slots=True)
class ReconciliationOutcome:
    """Desired state of one tier for one identity."""

    tier_name: str
    role_id: str
    qualified: bool
    asset_ids: tuple[int, ...] = ()


@dataclass(frozen=True, slots=True)
class AppliedResult:
    """What the reconciler did for one tier.

    Equality ignores ``action``: a repeat pass over unchanged state reports the
    same outcome even though its action is ``NONE`` where the first was a mutation.
    """

    tier_name: str
    role_id: str
    qualified: bool
    action: RoleAction = field(compare=False)
    success: bool
    error: str | None = None
