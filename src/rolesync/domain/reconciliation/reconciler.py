"""Apply desired tier membership to a group member, one tier at a time."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from rolesync.domain.model import AppliedResult, RoleAction

from .plan import plan_role_action

if TYPE_CHECKING:
    from collections.abc import Iterable

    from rolesync.domain.model import ReconciliationOutcome
    from rolesync.domain.ports import ChatGroup, GroupMember

log = getLogger(__name__)


class RoleReconciler:
    """Computes and applies the minimal add/remove per tier.

    Tiers are independent: a role that cannot be resolved, or an add/remove
    call that fails, is reported as an unsuccessful result for that tier and
    the remaining tiers still run.
    """

    def __init__(self, group: ChatGroup) -> None:
        self.group = group

    async def reconcile(
        self,
        member: GroupMember,
        outcomes: Iterable[ReconciliationOutcome],
    ) -> list[AppliedResult]:
        results: list[AppliedResult] = []
        for outcome in outcomes:
            try:
                result = await self._apply(member, outcome)
            except Exception as exc:
                log.exception(
                    "Failed to reconcile tier %s (role %s) for %s",
                    outcome.tier_name,
                    outcome.role_id,
                    member.user_id,
                )
                result = AppliedResult(
                    tier_name=outcome.tier_name,
                    role_id=outcome.role_id,
                    qualified=outcome.qualified,
                    action=RoleAction.SKIPPED,
                    success=False,
                    error=str(exc) or type(exc).__name__,
                )
            results.append(result)
        return results

    async def _apply(self, member: GroupMember, outcome: ReconciliationOutcome) -> AppliedResult:
        # cached role state may be stale
        role = await self.group.fetch_role(outcome.role_id, force=True)
        if role is None:
            log.error(
                "Could not find the role id %s configured for %s. "
                "Please confirm your configuration.",
                outcome.role_id,
                outcome.tier_name,
            )
            return AppliedResult(
                tier_name=outcome.tier_name,
                role_id=outcome.role_id,
                qualified=outcome.qualified,
                action=RoleAction.SKIPPED,
                success=False,
                error="role not found",
            )

        action = plan_role_action(
            qualifies=outcome.qualified,
            has_role=member.has_role(role.id),
        )
        if action is RoleAction.ADD:
            log.info("Assigning role %s to %s", role.name, member.display_name)
            await member.add_role(role)
        elif action is RoleAction.REMOVE:
            log.info("Removing role %s from %s", role.name, member.display_name)
            await member.remove_role(role)

        return AppliedResult(
            tier_name=outcome.tier_name,
            role_id=role.id,
            qualified=outcome.qualified,
            action=action,
            success=True,
        )
