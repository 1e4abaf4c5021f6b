"""SQLAlchemy adapter package for rolesync."""

from __future__ import annotations

from .mappings import create_all_tables, mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyIdentityRepository,
    SqlAlchemySyncLogRepository,
    SqlAlchemyVerificationRequestRepository,
)
from .unit_of_work import SqlAlchemyUnitOfWork, StartupError, shutdown, startup

__all__ = [
    "SqlAlchemyIdentityRepository",
    "SqlAlchemySyncLogRepository",
    "SqlAlchemyUnitOfWork",
    "SqlAlchemyVerificationRequestRepository",
    "StartupError",
    "create_all_tables",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
