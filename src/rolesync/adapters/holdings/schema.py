"""Pydantic models describing the holdings GraphQL payloads."""

from __future__ import annotations

import json

from pydantic import BaseModel, ConfigDict, Field


class GraphBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class TokenPayload(GraphBaseModel):
    id: str | int | None = None


class CurrentUserPayload(GraphBaseModel):
    owned_tokens: list[TokenPayload | None] = Field(default_factory=list, alias="ownedTokens")
    staked_tokens: list[TokenPayload | None] = Field(default_factory=list, alias="stakedTokens")


class HoldingsData(GraphBaseModel):
    current_user: CurrentUserPayload | None = Field(default=None, alias="currentUser")


class GraphError(GraphBaseModel):
    message: str


class HoldingsResponse(GraphBaseModel):
    data: HoldingsData | None = None
    errors: list[GraphError] | None = None


def build_holdings_query(wallet_address: str) -> str:
    """GraphQL query for the tokens owned and staked by a wallet."""

    return (
        "{\n"
        f"  currentUser: user(id: {json.dumps(wallet_address.lower())}) {{\n"
        "    ownedTokens {\n"
        "      id\n"
        "    }\n"
        "    stakedTokens {\n"
        "      id\n"
        "    }\n"
        "  }\n"
        "}"
    )
