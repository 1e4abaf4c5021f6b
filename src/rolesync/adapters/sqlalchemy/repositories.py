"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import func, or_, select

from rolesync.adapters.sqlalchemy.mappings import (
    identity_table,
    sync_log_table,
    tier_status_table,
    verification_request_table,
)
from rolesync.domain.model import Identity, SyncLog, VerificationRequest

if TYPE_CHECKING:
    import uuid
    from datetime import datetime

    from sqlalchemy.orm import Session


class SqlAlchemyIdentityRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Identity) -> None:
        self.session.add(entity)

    def get(self, identity_id: uuid.UUID) -> Identity | None:
        return self.session.get(Identity, identity_id)

    def get_by_user_id(self, user_id: str) -> Identity | None:
        stmt = select(Identity).where(identity_table.c.user_id == user_id)
        return self.session.execute(stmt).scalar_one_or_none()

    def find_due(self, cutoff: datetime) -> list[Identity]:
        stmt = (
            select(Identity)
            .where(
                or_(
                    identity_table.c.last_verified.is_(None),
                    identity_table.c.last_verified <= cutoff,
                )
            )
            .order_by(identity_table.c.last_verified)
        )
        return list(self.session.execute(stmt).scalars().all())

    def count(self) -> int:
        stmt = select(func.count()).select_from(identity_table)
        return int(self.session.execute(stmt).scalar_one())

    def count_qualified(self, role_id: str) -> int:
        stmt = (
            select(func.count(func.distinct(tier_status_table.c.identity_id)))
            .where(tier_status_table.c.role_id == role_id)
            .where(tier_status_table.c.qualified.is_(True))
        )
        return int(self.session.execute(stmt).scalar_one())

    def save(self, entity: Identity) -> Identity:
        # identities travel between sessions detached
        return self.session.merge(entity)


class SqlAlchemySyncLogRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: SyncLog) -> None:
        self.session.add(entity)

    def save(self, entity: SyncLog) -> SyncLog:
        return self.session.merge(entity)

    def latest(self) -> SyncLog | None:
        stmt = select(SyncLog).order_by(sync_log_table.c.start_time.desc()).limit(1)
        return self.session.execute(stmt).scalar_one_or_none()


class SqlAlchemyVerificationRequestRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: VerificationRequest) -> None:
        self.session.add(entity)

    def count(self) -> int:
        stmt = select(func.count()).select_from(verification_request_table)
        return int(self.session.execute(stmt).scalar_one())
