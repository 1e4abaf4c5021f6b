"""Ports for the chat platform that owns the group roles."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Role(Protocol):
    @property
    def id(self) -> str: ...

    @property
    def name(self) -> str: ...


@runtime_checkable
class GroupMember(Protocol):
    """A member of the group whose roles are reconciled."""

    @property
    def user_id(self) -> str: ...

    @property
    def display_name(self) -> str: ...

    def has_role(self, role_id: str) -> bool: ...

    async def add_role(self, role: Role) -> None: ...

    async def remove_role(self, role: Role) -> None: ...


@runtime_checkable
class ChatGroup(Protocol):
    """The group (guild) holding the tier roles."""

    async def fetch_role(self, role_id: str, *, force: bool = False) -> Role | None: ...

    async def fetch_roles(self) -> list[Role]: ...

    async def fetch_member(self, user_id: str) -> GroupMember | None: ...
