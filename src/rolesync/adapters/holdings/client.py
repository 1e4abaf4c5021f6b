"""HTTP client for the GraphQL holdings endpoint."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from rolesync.adapters.http_resilience import ResilienceConfig, ResilientClient
from rolesync.domain.classification import normalize_asset_ids
from rolesync.domain.model import EMPTY_SNAPSHOT, HoldingsResult, HoldingsSnapshot

from .schema import CurrentUserPayload, HoldingsResponse, build_holdings_query

if TYPE_CHECKING:
    from types import TracebackType

    from rolesync.config import HoldingsConfig

log = getLogger(__name__)


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


def snapshot_from_payload(current_user: CurrentUserPayload | None) -> HoldingsSnapshot:
    if current_user is None:
        return EMPTY_SNAPSHOT
    owned = [token.id for token in current_user.owned_tokens if token is not None]
    staked = [token.id for token in current_user.staked_tokens if token is not None]
    return HoldingsSnapshot(owned=normalize_asset_ids(owned), staked=normalize_asset_ids(staked))


@dataclass(slots=True)
class GraphHoldingsFetcher:
    """Single-attempt holdings lookup; failures come back as ``FetchError``."""

    config: HoldingsConfig
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )
    _client: ResilientClient | None = field(default=None, init=False, repr=False)

    async def __aenter__(self) -> GraphHoldingsFetcher:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> ResilientClient:
        if self._client is None:
            self._client = self.client_factory(self.config.resilience)
        return self._client

    async def fetch(self, wallet_address: str | None) -> HoldingsResult:
        endpoint = self.config.endpoint
        if not wallet_address or not wallet_address.strip():
            log.info(
                "Wallet address is null/empty. Skipping holdings query against %s", endpoint
            )
            return HoldingsResult.success(EMPTY_SNAPSHOT)

        query = build_holdings_query(wallet_address.strip())
        try:
            response = await self.client.post(endpoint, json={"query": query})
        except httpx.HTTPError as exc:
            log.error("There was an error querying the endpoint %s: %s", endpoint, exc)
            return HoldingsResult.failure(str(exc) or type(exc).__name__)

        if response.status_code != httpx.codes.OK:
            log.error(
                "There was an error querying the endpoint %s using data %s: %s %s",
                endpoint,
                query,
                response.status_code,
                response.reason_phrase,
            )
            return HoldingsResult.failure(
                response.reason_phrase or "unexpected status", status_code=response.status_code
            )

        try:
            payload = HoldingsResponse.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            log.error("Unexpected holdings payload from %s: %s", endpoint, exc)
            return HoldingsResult.failure("malformed holdings payload", status_code=200)

        if payload.errors and payload.data is None:
            messages = "; ".join(error.message for error in payload.errors)
            log.error("Holdings query against %s returned errors: %s", endpoint, messages)
            return HoldingsResult.failure(messages, status_code=200)

        current_user = payload.data.current_user if payload.data else None
        snapshot = snapshot_from_payload(current_user)
        log.info(
            "Holdings for %s: owned=%s, staked=%s",
            wallet_address,
            list(snapshot.owned),
            list(snapshot.staked),
        )
        return HoldingsResult.success(snapshot)
