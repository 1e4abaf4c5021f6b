"""Public interface for the Discord adapter."""

from __future__ import annotations

from .client import DiscordAPIError, DiscordGuild, DiscordMember, DiscordRole
from .schema import MemberPayload, RolePayload

__all__ = [
    "DiscordAPIError",
    "DiscordGuild",
    "DiscordMember",
    "DiscordRole",
    "MemberPayload",
    "RolePayload",
]
