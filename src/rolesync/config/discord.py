"""Discord bot configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import require_env_vars
from .http_resilience import RateLimit, ResilienceConfig

DISCORD_API_BASE_URL = "https://discord.com/api/v10"
DISCORD_TIMEOUT_SECONDS = 15.0


@dataclass(frozen=True)
class DiscordConfig:
    """Holds the bot token and guild the roles are managed in."""

    bot_token: str
    guild_id: str
    resilience: ResilienceConfig


def get_discord_config(*, resilience: ResilienceConfig | None = None) -> DiscordConfig:
    values = require_env_vars(("DISCORD_BOT_TOKEN", "DISCORD_GUILD_ID"))
    token = values["DISCORD_BOT_TOKEN"]
    return DiscordConfig(
        bot_token=token,
        guild_id=values["DISCORD_GUILD_ID"],
        resilience=resilience
        or ResilienceConfig(
            name="discord",
            base_url=DISCORD_API_BASE_URL,
            timeout_seconds=DISCORD_TIMEOUT_SECONDS,
            ratelimit=RateLimit(max_calls=40, per_seconds=1.0),
            default_headers={"Authorization": f"Bot {token}"},
        ),
    )
