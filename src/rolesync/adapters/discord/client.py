"""Discord guild adapter implementing the chat-group ports over REST."""

from __future__ import annotations

from collections.abc import Callable
from contextlib import suppress
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import TypeAdapter, ValidationError

from rolesync.adapters.http_resilience import ResilienceConfig, ResilientClient

from .schema import ErrorPayload, MemberPayload, RolePayload

if TYPE_CHECKING:
    from types import TracebackType

    from rolesync.config import DiscordConfig
    from rolesync.domain.ports import Role

log = getLogger(__name__)

_ROLE_LIST = TypeAdapter(list[RolePayload])


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


class DiscordAPIError(RuntimeError):
    """Raised when Discord answers with an unexpected status or payload."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _raise_for_response(response: httpx.Response, action: str) -> None:
    if response.is_success:
        return
    detail = response.reason_phrase
    # pydantic ValidationError is a ValueError
    with suppress(ValueError):
        detail = ErrorPayload.model_validate(response.json()).message or detail
    raise DiscordAPIError(
        f"Discord {action} failed with {response.status_code}: {detail}",
        status_code=response.status_code,
    )


@dataclass(frozen=True, slots=True)
class DiscordRole:
    id: str
    name: str


@dataclass(slots=True)
class DiscordMember:
    """Guild member; ``role_ids`` is kept in step with the mutations we make."""

    guild: DiscordGuild = field(repr=False)
    user_id: str
    display_name: str
    role_ids: set[str] = field(default_factory=set[str])

    def has_role(self, role_id: str) -> bool:
        return role_id in self.role_ids

    async def add_role(self, role: Role) -> None:
        await self.guild.add_member_role(self.user_id, role.id)
        self.role_ids.add(role.id)

    async def remove_role(self, role: Role) -> None:
        await self.guild.remove_member_role(self.user_id, role.id)
        self.role_ids.discard(role.id)


@dataclass(slots=True)
class DiscordGuild:
    """One guild, addressed through the bot token in ``config``."""

    config: DiscordConfig
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )
    _client: ResilientClient | None = field(default=None, init=False, repr=False)
    _roles: dict[str, DiscordRole] | None = field(default=None, init=False, repr=False)

    async def __aenter__(self) -> DiscordGuild:
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

    @property
    def _base_path(self) -> str:
        return f"/guilds/{self.config.guild_id}"

    async def fetch_roles(self) -> list[Role]:
        response = await self.client.get(f"{self._base_path}/roles")
        _raise_for_response(response, "role lookup")
        try:
            payloads = _ROLE_LIST.validate_python(response.json())
        except (ValueError, ValidationError) as exc:
            raise DiscordAPIError(f"Unexpected role payload: {exc}") from exc
        self._roles = {
            payload.id: DiscordRole(id=payload.id, name=payload.name) for payload in payloads
        }
        return list(self._roles.values())

    async def fetch_role(self, role_id: str, *, force: bool = False) -> Role | None:
        if force or self._roles is None:
            await self.fetch_roles()
        return (self._roles or {}).get(role_id)

    async def fetch_member(self, user_id: str) -> DiscordMember | None:
        response = await self.client.get(f"{self._base_path}/members/{user_id}")
        if response.status_code == httpx.codes.NOT_FOUND:
            return None
        _raise_for_response(response, "member lookup")
        try:
            payload = MemberPayload.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise DiscordAPIError(f"Unexpected member payload: {exc}") from exc
        return DiscordMember(
            guild=self,
            user_id=payload.user.id,
            display_name=payload.display_name,
            role_ids=set(payload.roles),
        )

    async def add_member_role(self, user_id: str, role_id: str) -> None:
        response = await self.client.put(f"{self._base_path}/members/{user_id}/roles/{role_id}")
        _raise_for_response(response, "role assignment")

    async def remove_member_role(self, user_id: str, role_id: str) -> None:
        response = await self.client.delete(
            f"{self._base_path}/members/{user_id}/roles/{role_id}"
        )
        _raise_for_response(response, "role removal")
