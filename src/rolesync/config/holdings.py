"""Holdings data-source configuration values."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from .env import env_float, optional_env_var, require_env_var
from .errors import ConfigurationError
from .http_resilience import NO_RETRY, RateLimit, ResilienceConfig

HOLDINGS_TIMEOUT_SECONDS = 30.0


class FailurePolicyName(StrEnum):
    FAIL_OPEN = "fail-open"
    RETAIN = "retain"


@dataclass(frozen=True)
class HoldingsConfig:
    """Holds the GraphQL holdings endpoint configuration."""

    endpoint: str
    failure_policy: FailurePolicyName
    resilience: ResilienceConfig


def get_holdings_config(*, resilience: ResilienceConfig | None = None) -> HoldingsConfig:
    endpoint = require_env_var("HOLDINGS_ENDPOINT")
    raw_policy = optional_env_var("HOLDINGS_FAILURE_POLICY") or FailurePolicyName.FAIL_OPEN
    try:
        policy = FailurePolicyName(raw_policy.lower())
    except ValueError as exc:
        choices = ", ".join(p.value for p in FailurePolicyName)
        raise ConfigurationError(
            f"HOLDINGS_FAILURE_POLICY must be one of {choices}, got {raw_policy!r}"
        ) from exc

    return HoldingsConfig(
        endpoint=endpoint,
        failure_policy=policy,
        resilience=resilience
        or ResilienceConfig(
            name="holdings",
            timeout_seconds=env_float("HOLDINGS_TIMEOUT_SECONDS", HOLDINGS_TIMEOUT_SECONDS),
            # a failed query is handled by the failure policy, never retried
            retry=NO_RETRY,
            ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
        ),
    )
