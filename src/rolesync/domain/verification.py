"""Check-and-apply verification of one identity against its holdings."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from rolesync.domain.classification import classify
from rolesync.domain.model import ReconciliationOutcome
from rolesync.domain.reconciliation import (
    HoldingsFailurePolicy,
    RoleReconciler,
    fail_open_to_ineligible,
)

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from rolesync.domain.model import AppliedResult, Identity, TierDefinition
    from rolesync.domain.ports import ChatGroup, GroupMember, HoldingsFetcher

log = getLogger(__name__)

Classification = dict[str, list[int]]


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class RuleConfig:
    tiers: tuple[TierDefinition, ...]
    failure_policy: HoldingsFailurePolicy = fail_open_to_ineligible


def build_outcomes(
    classification: Mapping[str, Sequence[int]],
    tiers: Sequence[TierDefinition],
) -> list[ReconciliationOutcome]:
    """One outcome per configured tier; qualified iff its asset list is non-empty."""

    outcomes: list[ReconciliationOutcome] = []
    for tier in tiers:
        asset_ids = tuple(classification.get(tier.name, ()))
        outcomes.append(
            ReconciliationOutcome(
                tier_name=tier.name,
                role_id=tier.role_id,
                qualified=bool(asset_ids),
                asset_ids=asset_ids,
            )
        )
    return outcomes


@dataclass(slots=True)
class VerificationRule:
    """Fetch once, classify, reconcile and record the tier flags for an identity."""

    config: RuleConfig
    fetcher: HoldingsFetcher
    group: ChatGroup
    clock: Callable[[], datetime] = field(default=_utcnow)

    async def check(self, identity: Identity) -> Classification | None:
        """Classify the identity's holdings, or ``None`` if the policy skips it."""

        result = await self.fetcher.fetch(identity.wallet_address)
        snapshot = self.config.failure_policy(result)
        if snapshot is None:
            return None
        return classify(snapshot.owned, snapshot.staked, self.config.tiers)

    async def execute(
        self,
        member: GroupMember,
        classification: Mapping[str, Sequence[int]],
    ) -> list[AppliedResult]:
        outcomes = build_outcomes(classification, self.config.tiers)
        return await RoleReconciler(self.group).reconcile(member, outcomes)

    async def verify(self, identity: Identity, member: GroupMember) -> list[AppliedResult]:
        classification = await self.check(identity)
        if classification is None:
            log.info("Skipping role reconciliation for %s this run", identity.user_id)
            return []

        results = await self.execute(member, classification)

        now = self.clock()
        for result in results:
            if result.success:
                identity.record_status(
                    tier_name=result.tier_name,
                    role_id=result.role_id,
                    qualified=result.qualified,
                    at=now,
                )
        return results
