"""Domain port definitions for adapters."""

from __future__ import annotations

from .chat import ChatGroup, GroupMember, Role
from .fetching import HoldingsFetcher
from .persistence import (
    IdentityRepository,
    Repository,
    SyncLogRepository,
    VerificationRequestRepository,
)
from .unit_of_work import RepositoryCollection, SyncRepositories, SyncUnitOfWork, UnitOfWork

__all__ = [
    "ChatGroup",
    "GroupMember",
    "HoldingsFetcher",
    "IdentityRepository",
    "Repository",
    "RepositoryCollection",
    "Role",
    "SyncLogRepository",
    "SyncRepositories",
    "SyncUnitOfWork",
    "UnitOfWork",
    "VerificationRequestRepository",
]
