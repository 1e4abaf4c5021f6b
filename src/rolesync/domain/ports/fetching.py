"""Ports for fetching holdings from the external ledger."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from rolesync.domain.model import HoldingsResult


@runtime_checkable
class HoldingsFetcher(Protocol):
    """Return the owned and staked asset ids of a wallet.

    Implementations never raise for data-source failures: they report them as a
    failed ``HoldingsResult`` and leave the decision to the caller's policy.
    """

    async def fetch(self, wallet_address: str | None) -> HoldingsResult: ...


__all__ = ["HoldingsFetcher"]
