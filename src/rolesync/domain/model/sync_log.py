"""Run bookkeeping records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime  # noqa: TC003
from uuid import UUID, uuid4


@dataclass(eq=False, kw_only=True)
class SyncLog:
    """One record per scheduler tick, finalized once every identity is done."""

    id: UUID = field(default_factory=uuid4)
    start_time: datetime
    end_time: datetime | None = None
    selected: int = 0
    verified: int = 0
    skipped: int = 0
    failed: int = 0

    @property
    def finished(self) -> bool:
        return self.end_time is not None

    def finish(
        self,
        *,
        at: datetime,
        selected: int = 0,
        verified: int = 0,
        skipped: int = 0,
        failed: int = 0,
    ) -> None:
        self.end_time = at
        self.selected = selected
        self.verified = verified
        self.skipped = skipped
        self.failed = failed


@dataclass(eq=False, kw_only=True)
class VerificationRequest:
    """A user-initiated verification request (written by the registration flow)."""

    id: UUID = field(default_factory=uuid4)
    user_id: str
    created_at: datetime
