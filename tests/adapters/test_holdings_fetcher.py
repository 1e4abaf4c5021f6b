from __future__ import annotations

import asyncio
import json
from collections.abc import Callable  # noqa: TC003

import httpx
import pytest

from rolesync.adapters.holdings import GraphHoldingsFetcher, build_holdings_query
from rolesync.config import NO_RETRY, FailurePolicyName, HoldingsConfig, ResilienceConfig
from rolesync.domain.model import EMPTY_SNAPSHOT, HoldingsResult
from tests.helpers.http import make_client_factory

ENDPOINT = "https://graph.example/subgraphs/holdings"


def _config() -> HoldingsConfig:
    return HoldingsConfig(
        endpoint=ENDPOINT,
        failure_policy=FailurePolicyName.FAIL_OPEN,
        resilience=ResilienceConfig(name="holdings-test", retry=NO_RETRY),
    )


def _fetch(
    handler: Callable[[httpx.Request], httpx.Response],
    wallet: str | None,
) -> HoldingsResult:
    async def run() -> HoldingsResult:
        async with GraphHoldingsFetcher(
            config=_config(),
            client_factory=make_client_factory(handler),
        ) as fetcher:
            return await fetcher.fetch(wallet)

    return asyncio.run(run())


def test_query_lower_cases_wallet() -> None:
    query = build_holdings_query("0xABCdef")

    assert 'user(id: "0xabcdef")' in query
    assert "ownedTokens" in query
    assert "stakedTokens" in query


def test_fetch_parses_owned_and_staked_ids() -> None:
    seen: list[dict[str, object]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "POST"
        assert str(request.url) == ENDPOINT
        seen.append(json.loads(request.content))
        return httpx.Response(
            200,
            json={
                "data": {
                    "currentUser": {
                        "ownedTokens": [{"id": "5"}, {"id": "0"}, None],
                        "stakedTokens": [{"id": "10001"}, {"id": "not-a-number"}],
                    }
                }
            },
        )

    result = _fetch(handler, "0xABC")

    assert result.ok
    assert result.snapshot is not None
    assert result.snapshot.owned == (5, 0)
    assert result.snapshot.staked == (10001,)
    assert len(seen) == 1
    query = seen[0]["query"]
    assert isinstance(query, str)
    assert '"0xabc"' in query


def test_unknown_wallet_is_empty_snapshot() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"data": {"currentUser": None}})

    result = _fetch(handler, "0xabc")

    assert result.snapshot is EMPTY_SNAPSHOT


@pytest.mark.parametrize("wallet", [None, "", "   "])
def test_empty_wallet_makes_no_request(wallet: str | None) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError(f"unexpected request to {request.url}")

    result = _fetch(handler, wallet)

    assert result.snapshot is EMPTY_SNAPSHOT


def test_non_200_is_reported_as_failure() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(502)

    result = _fetch(handler, "0xabc")

    assert not result.ok
    assert result.error is not None
    assert result.error.status_code == 502
    assert len(calls) == 1


def test_graphql_errors_without_data_are_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"errors": [{"message": "indexer behind"}]})

    result = _fetch(handler, "0xabc")

    assert result.error is not None
    assert result.error.message == "indexer behind"


def test_malformed_payload_is_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"<html>oops</html>")

    result = _fetch(handler, "0xabc")

    assert not result.ok


def test_transport_error_is_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    result = _fetch(handler, "0xabc")

    assert result.error is not None
    assert "connection refused" in result.error.message
