"""Fixed-period re-verification of identities whose last check is stale.

The scheduler is an explicit two-state machine (``Idle`` / ``Scheduled``) owned
by one ``Synchronizer``. Each period a tick task is spawned without awaiting
the previous one, so ticks may overlap when a tick outruns the period. Inside a
tick, identities are verified concurrently (bounded by ``max_concurrency``) and
the run record is finalized only once all of them have finished.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from rolesync.domain.model import SyncLog

if TYPE_CHECKING:
    from uuid import UUID

    from rolesync.config import SyncConfig
    from rolesync.domain.model import AppliedResult, Identity
    from rolesync.domain.ports import ChatGroup, SyncUnitOfWork
    from rolesync.domain.verification import VerificationRule

UnitOfWorkFactory = Callable[[], "SyncUnitOfWork"]

log = getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _format(value: datetime) -> str:
    return value.astimezone().strftime("%Y-%m-%d %H:%M:%S")


class SchedulerStateError(RuntimeError):
    """Raised for a transition the current scheduler state does not allow."""


@dataclass(frozen=True, slots=True)
class Idle:
    """No timer armed."""


@dataclass(frozen=True, slots=True)
class Scheduled:
    """A repeating timer is armed."""

    timer: asyncio.Task[None]
    first_run_at: datetime


type SchedulerState = Idle | Scheduled


class IdentityStatus(StrEnum):
    VERIFIED = "verified"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(slots=True)
class SyncRunSummary:
    """Outcome of one tick."""

    run_id: UUID
    start_time: datetime
    cutoff: datetime
    end_time: datetime | None = None
    selected: int = 0
    verified: int = 0
    skipped: int = 0
    failed: int = 0
    results: dict[str, list[AppliedResult]] = field(
        default_factory=dict[str, list["AppliedResult"]]
    )


class Synchronizer:
    """Re-verifies stale identities every ``config.interval``."""

    def __init__(
        self,
        *,
        rule: VerificationRule,
        group: ChatGroup,
        unit_of_work_factory: UnitOfWorkFactory,
        config: SyncConfig,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.rule = rule
        self.group = group
        self.unit_of_work_factory = unit_of_work_factory
        self.config = config
        self.clock = clock
        self._state: SchedulerState = Idle()
        self._ticks: set[asyncio.Task[SyncRunSummary | None]] = set()

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def period(self) -> timedelta:
        return self.config.interval

    @property
    def running(self) -> bool:
        return isinstance(self._state, Scheduled)

    def start(self) -> None:
        """Arm the repeating timer. Must be called from a running event loop."""

        if isinstance(self._state, Scheduled):
            raise SchedulerStateError("Synchronizer is already scheduled")

        log.info("Starting Synchronizer...")
        first_run_at = self.clock() + self.period
        timer = asyncio.get_running_loop().create_task(
            self._run_schedule(), name="rolesync-synchronizer"
        )
        self._state = Scheduled(timer=timer, first_run_at=first_run_at)
        log.info(
            "Synchronizer will run every %s minute(s). First execution will start at %s",
            self.config.number_of_minutes,
            _format(first_run_at),
        )

    def stop(self) -> None:
        """Cancel the timer; ticks already running are left to finish."""

        state = self._state
        if isinstance(state, Idle):
            return
        state.timer.cancel()
        self._state = Idle()
        log.info("Synchronizer stopped")

    async def wait_idle(self) -> None:
        """Wait for every in-flight tick to complete."""

        while self._ticks:
            await asyncio.gather(*list(self._ticks), return_exceptions=True)

    async def _run_schedule(self) -> None:
        interval = self.period.total_seconds()
        while True:
            await asyncio.sleep(interval)
            self._spawn_tick()

    def _spawn_tick(self) -> None:
        task = asyncio.create_task(self._guarded_tick())
        self._ticks.add(task)
        task.add_done_callback(self._ticks.discard)

    async def _guarded_tick(self) -> SyncRunSummary | None:
        try:
            return await self.run_tick()
        except Exception:
            log.exception("Synchronizer iteration failed")
            return None

    async def run_tick(self, now: datetime | None = None) -> SyncRunSummary:
        """Verify every identity due at ``now`` and finalize the run record."""

        start = now or self.clock()
        cutoff = start - self.period
        log.info("Synchronizer iteration starting: %s", _format(start))
        log.info("Searching for users who have not reverified since %s", _format(cutoff))

        run, identities = await asyncio.to_thread(self._open_run, start, cutoff)

        summary = SyncRunSummary(
            run_id=run.id,
            start_time=start,
            cutoff=cutoff,
            selected=len(identities),
        )

        if not identities:
            log.info("There are no users who need reverification since %s", _format(cutoff))
        else:
            semaphore = asyncio.Semaphore(self.config.max_concurrency)
            statuses = await asyncio.gather(
                *(self._verify_bounded(identity, semaphore, summary) for identity in identities)
            )
            summary.verified = statuses.count(IdentityStatus.VERIFIED)
            summary.skipped = statuses.count(IdentityStatus.SKIPPED)
            summary.failed = statuses.count(IdentityStatus.FAILED)

        summary.end_time = self.clock()
        run.finish(
            at=summary.end_time,
            selected=summary.selected,
            verified=summary.verified,
            skipped=summary.skipped,
            failed=summary.failed,
        )
        await asyncio.to_thread(self._save_run, run)

        log.info(
            "Synchronizer iteration finished: selected=%s, verified=%s, skipped=%s, failed=%s",
            summary.selected,
            summary.verified,
            summary.skipped,
            summary.failed,
        )
        return summary

    async def _verify_bounded(
        self,
        identity: Identity,
        semaphore: asyncio.Semaphore,
        summary: SyncRunSummary,
    ) -> IdentityStatus:
        async with semaphore:
            try:
                return await self._verify_identity(identity, summary)
            except Exception:
                log.exception("Failed to reverify user %s", identity.user_id)
                return IdentityStatus.FAILED

    async def _verify_identity(self, identity: Identity, summary: SyncRunSummary) -> IdentityStatus:
        member = await self.group.fetch_member(identity.user_id)
        if member is None:
            log.warning(
                "User %s is not a member of the group; skipping reverification",
                identity.user_id,
            )
            return IdentityStatus.SKIPPED

        log.info(
            "Reverifying user: %s using wallet %s",
            member.display_name,
            identity.wallet_address,
        )
        results = await self.rule.verify(identity, member)
        summary.results[identity.user_id] = results

        recorded = await asyncio.to_thread(
            self._record_verification, identity, results, self.clock()
        )
        return IdentityStatus.VERIFIED if recorded else IdentityStatus.SKIPPED

    def _open_run(self, start: datetime, cutoff: datetime) -> tuple[SyncLog, list[Identity]]:
        with self.unit_of_work_factory() as uow:
            run = SyncLog(start_time=start)
            uow.repositories.sync_logs.add(run)
            identities = uow.repositories.identities.find_due(cutoff)
            uow.commit()
        return run, identities

    def _save_run(self, run: SyncLog) -> None:
        with self.unit_of_work_factory() as uow:
            uow.repositories.sync_logs.save(run)
            uow.commit()

    def _record_verification(
        self,
        verified: Identity,
        results: list[AppliedResult],
        at: datetime,
    ) -> bool:
        """Write ``last_verified`` and the applied tier flags onto the stored identity.

        Only those fields are written. When the wallet was re-linked while the
        holdings were being checked, nothing is written and the identity stays
        due for the next tick.
        """

        with self.unit_of_work_factory() as uow:
            identities = uow.repositories.identities
            stored = identities.get(verified.id)
            if stored is None:
                log.warning("User %s was removed during reverification", verified.user_id)
                return False
            if stored.wallet_address != verified.wallet_address:
                log.info(
                    "Wallet for user %s changed during reverification; "
                    "leaving it for the next iteration",
                    verified.user_id,
                )
                return False

            for result in results:
                status = verified.status_for(result.tier_name)
                if result.success and status is not None:
                    stored.record_status(
                        tier_name=status.tier_name,
                        role_id=status.role_id,
                        qualified=status.qualified,
                        at=status.updated_at,
                    )
            stored.last_verified = at
            identities.save(stored)
            uow.commit()
        return True
