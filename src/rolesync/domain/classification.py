"""Eligibility classification of held assets into tiers.

Pure functions: no I/O and no exceptions. Anything that is not a non-negative
integer (or an integer-like string, which is how GraphQL serialises ids) is
dropped before partitioning.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from rolesync.domain.model import TierDefinition


def normalize_asset_id(value: object) -> int | None:
    """Return ``value`` as a non-negative int, or ``None`` when it is not one."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped.isdecimal():
            return None
        return int(stripped)
    return None


def normalize_asset_ids(values: Iterable[object] | None) -> tuple[int, ...]:
    if values is None:
        return ()
    try:
        candidates = list(values)
    except TypeError:
        return ()
    normalized: list[int] = []
    for value in candidates:
        asset_id = normalize_asset_id(value)
        if asset_id is not None:
            normalized.append(asset_id)
    return tuple(normalized)


def classify(
    owned: Iterable[object] | None,
    staked: Iterable[object] | None,
    tiers: Sequence[TierDefinition],
) -> dict[str, list[int]]:
    """Partition owned-then-staked asset ids by tier, in configuration order.

    Every tier name appears in the result. Overlapping predicates are not
    detected: an id matching two tiers is listed under both.
    """

    candidates = normalize_asset_ids(owned) + normalize_asset_ids(staked)
    return {
        tier.name: [asset_id for asset_id in candidates if tier.matches(asset_id)]
        for tier in tiers
    }
