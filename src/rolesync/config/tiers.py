"""Tier definitions loaded once per process."""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, model_validator

from rolesync.domain.model import TierDefinition

from .env import env_int, optional_env_var, require_env_vars
from .errors import ConfigurationError

DEFAULT_GEN1_MIN_TOKEN_ID = 10000


class TierSettings(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str = Field(min_length=1)
    role_id: str = Field(min_length=1)
    min_id: int | None = Field(default=None, ge=0)
    max_id: int | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _check_bounds(self) -> TierSettings:
        if self.min_id is not None and self.max_id is not None and self.min_id >= self.max_id:
            raise ValueError(f"tier {self.name!r}: min_id must be below max_id")
        return self

    def to_definition(self) -> TierDefinition:
        return TierDefinition(
            name=self.name,
            role_id=self.role_id,
            min_id=self.min_id,
            max_id=self.max_id,
        )


_TIER_LIST = TypeAdapter(list[TierSettings])


def parse_tier_definitions(payload: object) -> tuple[TierDefinition, ...]:
    """Validate raw tier settings and enforce unique names and role ids."""

    try:
        settings = _TIER_LIST.validate_python(payload)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid tier configuration: {exc}") from exc

    if not settings:
        raise ConfigurationError("At least one tier must be configured")

    names = [tier.name for tier in settings]
    role_ids = [tier.role_id for tier in settings]
    duplicated_names = sorted({name for name in names if names.count(name) > 1})
    if duplicated_names:
        raise ConfigurationError(f"Duplicate tier names: {', '.join(duplicated_names)}")
    duplicated_roles = sorted({role for role in role_ids if role_ids.count(role) > 1})
    if duplicated_roles:
        raise ConfigurationError(
            f"Role ids mapped to more than one tier: {', '.join(duplicated_roles)}"
        )

    return tuple(tier.to_definition() for tier in settings)


def load_tier_file(path: Path) -> tuple[TierDefinition, ...]:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ConfigurationError(f"Tier configuration file not found: {path}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Tier configuration file {path} is not valid JSON") from exc
    return parse_tier_definitions(payload)


def get_tier_definitions() -> tuple[TierDefinition, ...]:
    """Load tiers from ``ROLESYNC_TIERS_FILE`` or the Gen0/Gen1 role variables."""

    tiers_file = optional_env_var("ROLESYNC_TIERS_FILE")
    if tiers_file is not None:
        return load_tier_file(Path(tiers_file).expanduser())

    values = require_env_vars(("GEN0_ROLE_ID", "GEN1_ROLE_ID"))
    threshold = env_int("GEN1_MIN_TOKEN_ID", DEFAULT_GEN1_MIN_TOKEN_ID)
    return parse_tier_definitions(
        [
            {"name": "Gen0", "role_id": values["GEN0_ROLE_ID"], "max_id": threshold},
            {"name": "Gen1", "role_id": values["GEN1_ROLE_ID"], "min_id": threshold},
        ]
    )
