"""Read-only statistics endpoints."""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from datetime import datetime  # noqa: TC003
from logging import getLogger
from typing import Annotated

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from pydantic import BaseModel

from rolesync import __version__
from rolesync.domain.model import TierDefinition
from rolesync.domain.ports import SyncUnitOfWork

UnitOfWorkFactory = Callable[[], SyncUnitOfWork]

log = getLogger(__name__)

router = APIRouter(prefix="/stats", tags=["Stats"])


class CountResponse(BaseModel):
    count: int


class SyncLogResponse(BaseModel):
    id: str
    start_time: datetime
    end_time: datetime | None
    selected: int
    verified: int
    skipped: int
    failed: int


def get_unit_of_work_factory(request: Request) -> UnitOfWorkFactory:
    return request.app.state.unit_of_work_factory


def get_tiers(request: Request) -> tuple[TierDefinition, ...]:
    return request.app.state.tiers


UowFactoryDep = Annotated[UnitOfWorkFactory, Depends(get_unit_of_work_factory)]
TiersDep = Annotated[tuple[TierDefinition, ...], Depends(get_tiers)]


def _count_tier(name: str, tiers: tuple[TierDefinition, ...], factory: UnitOfWorkFactory) -> int:
    tier = next((tier for tier in tiers if tier.name.lower() == name.lower()), None)
    if tier is None:
        raise HTTPException(status_code=404, detail=f"Unknown tier: {name}")
    with factory() as uow:
        return uow.repositories.identities.count_qualified(tier.role_id)


@router.get("/total")
def get_total(factory: UowFactoryDep) -> CountResponse:
    with factory() as uow:
        return CountResponse(count=uow.repositories.identities.count())


@router.get("/gen0")
def get_gen0(factory: UowFactoryDep, tiers: TiersDep) -> CountResponse:
    return CountResponse(count=_count_tier("Gen0", tiers, factory))


@router.get("/gen1")
def get_gen1(factory: UowFactoryDep, tiers: TiersDep) -> CountResponse:
    return CountResponse(count=_count_tier("Gen1", tiers, factory))


@router.get("/tiers/{name}")
def get_tier(name: str, factory: UowFactoryDep, tiers: TiersDep) -> CountResponse:
    return CountResponse(count=_count_tier(name, tiers, factory))


@router.get("/verifications")
def get_verifications(factory: UowFactoryDep) -> CountResponse:
    with factory() as uow:
        return CountResponse(count=uow.repositories.verification_requests.count())


@router.get("/sync/latest")
def get_latest_sync(factory: UowFactoryDep) -> SyncLogResponse:
    with factory() as uow:
        run = uow.repositories.sync_logs.latest()
        if run is None:
            raise HTTPException(status_code=404, detail="No synchronizer runs recorded")
        return SyncLogResponse(
            id=str(run.id),
            start_time=run.start_time,
            end_time=run.end_time,
            selected=run.selected,
            verified=run.verified,
            skipped=run.skipped,
            failed=run.failed,
        )


def create_app(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    tiers: tuple[TierDefinition, ...] | None = None,
) -> FastAPI:
    """Create the stats application; defaults are resolved from the environment."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if unit_of_work_factory is None:
            from rolesync.adapters.sqlalchemy.unit_of_work import (  # noqa: PLC0415
                SqlAlchemyUnitOfWork,
                is_started,
                startup,
            )

            if not is_started():
                startup()
            app.state.unit_of_work_factory = SqlAlchemyUnitOfWork
        else:
            app.state.unit_of_work_factory = unit_of_work_factory

        if tiers is None:
            from rolesync.config import get_tier_definitions  # noqa: PLC0415

            app.state.tiers = get_tier_definitions()
        else:
            app.state.tiers = tiers

        log.info("Stats API starting")
        yield
        log.info("Stats API stopping")

    app = FastAPI(title="rolesync stats", version=__version__, lifespan=lifespan)
    app.include_router(router)
    return app
