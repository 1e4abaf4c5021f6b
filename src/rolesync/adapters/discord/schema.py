"""Pydantic models for the subset of the Discord REST API we use."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class DiscordBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class RolePayload(DiscordBaseModel):
    id: str
    name: str
    position: int = 0


class UserPayload(DiscordBaseModel):
    id: str
    username: str
    global_name: str | None = None


class MemberPayload(DiscordBaseModel):
    user: UserPayload
    nick: str | None = None
    roles: list[str] = Field(default_factory=list)

    @property
    def display_name(self) -> str:
        return self.nick or self.user.global_name or self.user.username


class ErrorPayload(DiscordBaseModel):
    code: int = 0
    message: str = ""
