"""Tier definitions: a named asset-id range granting one external role."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class TierDefinition:
    """Half-open ``[min_id, max_id)`` partition of asset ids mapped to a role.

    ``id < T`` is ``TierDefinition(max_id=T)`` and ``id >= T`` is
    ``TierDefinition(min_id=T)``; either bound may be left open.
    """

    name: str
    role_id: str
    min_id: int | None = None
    max_id: int | None = None

    def matches(self, asset_id: int) -> bool:
        if self.min_id is not None and asset_id < self.min_id:
            return False
        return not (self.max_id is not None and asset_id >= self.max_id)
