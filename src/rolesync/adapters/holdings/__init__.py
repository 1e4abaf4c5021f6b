"""Public interface for the GraphQL holdings adapter."""

from __future__ import annotations

from .client import GraphHoldingsFetcher, snapshot_from_payload
from .schema import HoldingsResponse, build_holdings_query

__all__ = [
    "GraphHoldingsFetcher",
    "HoldingsResponse",
    "build_holdings_query",
    "snapshot_from_payload",
]
