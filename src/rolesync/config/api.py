"""Stats API server settings."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_int, optional_env_var


@dataclass(frozen=True, slots=True)
class ApiConfig:
    host: str = "127.0.0.1"
    port: int = 8000


def get_api_config() -> ApiConfig:
    defaults = ApiConfig()
    return ApiConfig(
        host=optional_env_var("STATS_HOST") or defaults.host,
        port=env_int("STATS_PORT", defaults.port),
    )
