"""Ports for persisting identities and run records."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from rolesync.domain.model import Identity, SyncLog, VerificationRequest

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class IdentityRepository(Repository[Identity], Protocol):
    """Persistence contract for registered identities."""

    def get(self, identity_id: UUID) -> Identity | None: ...

    def get_by_user_id(self, user_id: str) -> Identity | None: ...

    def find_due(self, cutoff: datetime) -> list[Identity]: ...

    def count(self) -> int: ...

    def count_qualified(self, role_id: str) -> int: ...

    def save(self, entity: Identity) -> Identity: ...


@runtime_checkable
class SyncLogRepository(Repository[SyncLog], Protocol):
    """Persistence contract for scheduler run records."""

    def save(self, entity: SyncLog) -> SyncLog: ...

    def latest(self) -> SyncLog | None: ...


@runtime_checkable
class VerificationRequestRepository(Repository[VerificationRequest], Protocol):
    """Persistence contract for verification requests."""

    def count(self) -> int: ...
