"""Registered identities and their persisted tier qualification flags."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime  # noqa: TC003
from uuid import UUID, uuid4


def new_id() -> UUID:
    return uuid4()


@dataclass(eq=False, kw_only=True)
class TierStatus:
    """Last known qualification of an identity for one tier."""

    id: UUID = field(default_factory=new_id)
    tier_name: str
    role_id: str
    qualified: bool = False
    updated_at: datetime | None = None


@dataclass(eq=False, kw_only=True)
class Identity:
    """A registered chat user with an (optional) external wallet."""

    id: UUID = field(default_factory=new_id)
    user_id: str
    wallet_address: str | None = None
    last_verified: datetime | None = None
    statuses: list[TierStatus] = field(default_factory=list["TierStatus"])

    def status_for(self, tier_name: str) -> TierStatus | None:
        for status in self.statuses:
            if status.tier_name == tier_name:
                return status
        return None

    def record_status(
        self,
        *,
        tier_name: str,
        role_id: str,
        qualified: bool,
        at: datetime | None = None,
    ) -> TierStatus:
        """Update the flag for a tier in place, adding it on first sight."""

        status = self.status_for(tier_name)
        if status is None:
            status = TierStatus(tier_name=tier_name, role_id=role_id)
            self.statuses.append(status)
        status.role_id = role_id
        status.qualified = qualified
        status.updated_at = at
        return status

    def is_due(self, cutoff: datetime) -> bool:
        return self.last_verified is None or self.last_verified <= cutoff
