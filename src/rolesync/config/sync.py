"""Synchronization defaults for the re-verification scheduler."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta

from .env import env_int, optional_env_var

log = logging.getLogger(__name__)

DEFAULT_INTERVAL_MINUTES = 1
DEFAULT_MAX_CONCURRENCY = 8


@dataclass(frozen=True, slots=True)
class SyncConfig:
    number_of_minutes: int = DEFAULT_INTERVAL_MINUTES
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY

    @property
    def interval(self) -> timedelta:
        return timedelta(minutes=self.number_of_minutes)


def parse_interval_minutes(raw: str | None) -> int:
    """Parse the configured interval, falling back to one minute.

    Missing, non-numeric and non-positive values all fall back to the default.
    """

    if raw is None:
        return DEFAULT_INTERVAL_MINUTES
    try:
        minutes = int(raw.strip())
    except ValueError:
        minutes = 0
    if minutes < 1:
        log.warning(
            "Ignoring invalid sync interval %r, using %s minute(s)",
            raw,
            DEFAULT_INTERVAL_MINUTES,
        )
        return DEFAULT_INTERVAL_MINUTES
    return minutes


def get_sync_config() -> SyncConfig:
    minutes = parse_interval_minutes(optional_env_var("SYNC_INTERVAL_IN_MINUTES"))
    concurrency = max(1, env_int("SYNC_MAX_CONCURRENCY", DEFAULT_MAX_CONCURRENCY))
    return SyncConfig(number_of_minutes=minutes, max_concurrency=concurrency)
