"""Application configuration helpers."""

from __future__ import annotations

from .api import ApiConfig, get_api_config
from .discord import DiscordConfig, get_discord_config
from .env import require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .holdings import FailurePolicyName, HoldingsConfig, get_holdings_config
from .http_resilience import NO_RETRY, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config
from .sync import SyncConfig, get_sync_config
from .tiers import get_tier_definitions, load_tier_file, parse_tier_definitions

__all__ = [
    "NO_RETRY",
    "ApiConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "DiscordConfig",
    "FailurePolicyName",
    "HoldingsConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "SyncConfig",
    "configure_logging",
    "get_api_config",
    "get_database_config",
    "get_discord_config",
    "get_holdings_config",
    "get_storage_config",
    "get_sync_config",
    "get_tier_definitions",
    "load_tier_file",
    "parse_tier_definitions",
    "require_env_var",
    "require_env_vars",
]
