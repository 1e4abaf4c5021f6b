"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from rolesync.adapters.discord import DiscordGuild
from rolesync.adapters.holdings import GraphHoldingsFetcher
from rolesync.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, is_started, startup
from rolesync.config import (
    get_discord_config,
    get_holdings_config,
    get_sync_config,
    get_tier_definitions,
)
from rolesync.domain.model import Identity, VerificationRequest
from rolesync.domain.reconciliation import get_policy
from rolesync.domain.verification import RuleConfig, VerificationRule
from rolesync.synchronizer import Synchronizer

if TYPE_CHECKING:
    from rolesync.config import SyncConfig
    from rolesync.domain.model import TierDefinition
    from rolesync.domain.ports import ChatGroup, HoldingsFetcher, SyncUnitOfWork
    from rolesync.synchronizer import SyncRunSummary

UnitOfWorkFactory = Callable[[], "SyncUnitOfWork"]

log = getLogger(__name__)


def _ensure_storage() -> None:
    if not is_started():
        startup()


def build_synchronizer(
    *,
    tiers: tuple[TierDefinition, ...],
    fetcher: HoldingsFetcher,
    group: ChatGroup,
    unit_of_work_factory: UnitOfWorkFactory,
    sync_config: SyncConfig,
    failure_policy: str = "fail-open",
) -> Synchronizer:
    rule = VerificationRule(
        config=RuleConfig(tiers=tiers, failure_policy=get_policy(failure_policy)),
        fetcher=fetcher,
        group=group,
    )
    return Synchronizer(
        rule=rule,
        group=group,
        unit_of_work_factory=unit_of_work_factory,
        config=sync_config,
    )


@asynccontextmanager
async def open_synchronizer(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> AsyncIterator[Synchronizer]:
    """Build a synchronizer from the environment and close its clients on exit."""

    if unit_of_work_factory is None:
        _ensure_storage()
        unit_of_work_factory = SqlAlchemyUnitOfWork

    tiers = get_tier_definitions()
    holdings_config = get_holdings_config()
    sync_config = get_sync_config()
    log.info(
        "Loaded %s tier(s): %s",
        len(tiers),
        ", ".join(f"{tier.name}->{tier.role_id}" for tier in tiers),
    )

    async with (
        GraphHoldingsFetcher(config=holdings_config) as fetcher,
        DiscordGuild(config=get_discord_config()) as guild,
    ):
        synchronizer = build_synchronizer(
            tiers=tiers,
            fetcher=fetcher,
            group=guild,
            unit_of_work_factory=unit_of_work_factory,
            sync_config=sync_config,
            failure_policy=holdings_config.failure_policy.value,
        )
        try:
            yield synchronizer
        finally:
            synchronizer.stop()
            await synchronizer.wait_idle()


async def run_synchronizer(stop_event: asyncio.Event) -> None:
    """Run the scheduler until ``stop_event`` is set."""

    async with open_synchronizer() as synchronizer:
        synchronizer.start()
        await stop_event.wait()


async def run_single_tick() -> SyncRunSummary:
    """Run one reverification pass immediately."""

    async with open_synchronizer() as synchronizer:
        return await synchronizer.run_tick()


def register_identity(
    *,
    user_id: str,
    wallet_address: str | None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Identity:
    """Create or re-link an identity; the scheduler picks it up on its next tick.

    Re-registering a known user replaces the wallet and clears ``last_verified``.
    """

    if unit_of_work_factory is None:
        _ensure_storage()
        unit_of_work_factory = SqlAlchemyUnitOfWork

    with unit_of_work_factory() as uow:
        identities = uow.repositories.identities
        identity = identities.get_by_user_id(user_id)
        if identity is None:
            identity = Identity(user_id=user_id, wallet_address=wallet_address)
            identities.add(identity)
        else:
            identity.wallet_address = wallet_address
            identity.last_verified = None
        uow.repositories.verification_requests.add(
            VerificationRequest(user_id=user_id, created_at=datetime.now(UTC))
        )
        uow.commit()
    log.info("Registered identity %s for user %s", identity.id, user_id)
    return identity
