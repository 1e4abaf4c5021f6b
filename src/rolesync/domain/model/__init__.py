"""Domain model for identity re-verification."""

from __future__ import annotations

from .holdings import EMPTY_SNAPSHOT, FetchError, HoldingsResult, HoldingsSnapshot
from .identity import Identity, TierStatus
from .outcomes import AppliedResult, ReconciliationOutcome, RoleAction
from .sync_log import SyncLog, VerificationRequest
from .tiers import TierDefinition

__all__ = [
    "EMPTY_SNAPSHOT",
    "AppliedResult",
    "FetchError",
    "HoldingsResult",
    "HoldingsSnapshot",
    "Identity",
    "ReconciliationOutcome",
    "RoleAction",
    "SyncLog",
    "TierDefinition",
    "TierStatus",
    "VerificationRequest",
]
