"""SQLAlchemy mapping metadata for the rolesync domain model."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Dialect,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
)
from sqlalchemy.orm import configure_mappers, relationship

from rolesync.domain.model import Identity, SyncLog, TierStatus, VerificationRequest

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

identity_table = Table(
    "identity",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("user_id", String, nullable=False, unique=True),
    Column("wallet_address", String, nullable=True),
    Column("last_verified", UTCDateTime(), nullable=True),
    Index("ix_identity_last_verified", "last_verified"),
)

tier_status_table = Table(
    "identity_tier_status",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "identity_id",
        UUIDColumnType,
        ForeignKey("identity.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("tier_name", String, nullable=False),
    Column("role_id", String, nullable=False),
    Column("qualified", Boolean, nullable=False, default=False),
    Column("updated_at", UTCDateTime(), nullable=True),
    UniqueConstraint("identity_id", "tier_name"),
    Index("ix_identity_tier_status_role_qualified", "role_id", "qualified"),
)

sync_log_table = Table(
    "sync_log",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("start_time", UTCDateTime(), nullable=False),
    Column("end_time", UTCDateTime(), nullable=True),
    Column("selected", Integer, nullable=False, default=0),
    Column("verified", Integer, nullable=False, default=0),
    Column("skipped", Integer, nullable=False, default=0),
    Column("failed", Integer, nullable=False, default=0),
)

verification_request_table = Table(
    "verification_request",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("user_id", String, nullable=False),
    Column("created_at", UTCDateTime(), nullable=False),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(TierStatus, tier_status_table)

    mapper_registry.map_imperatively(
        Identity,
        identity_table,
        properties={
            "statuses": relationship(
                TierStatus,
                cascade="all, delete-orphan",
                lazy="selectin",
                order_by=tier_status_table.c.tier_name,
            ),
        },
    )

    mapper_registry.map_imperatively(SyncLog, sync_log_table)

    mapper_registry.map_imperatively(VerificationRequest, verification_request_table)

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
