"""Where the SQLite database lives when ``DATABASE_URI`` is not set."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_DB_FILENAME = "rolesync.db"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path
    database_filename: str = DEFAULT_DB_FILENAME

    def resolve_data_dir(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def database_uri(self) -> str:
        data_dir = self.resolve_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return f"sqlite+pysqlite:///{data_dir / self.database_filename}"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def get_storage_config() -> StorageConfig:
    """``ROLESYNC_DATA_DIR``, else ``$XDG_DATA_HOME/rolesync`` (``~/.local/share/rolesync``)."""

    configured = os.getenv("ROLESYNC_DATA_DIR")
    if configured:
        return StorageConfig(data_dir=Path(configured))
    xdg_home = os.getenv("XDG_DATA_HOME")
    base = Path(xdg_home) if xdg_home else Path.home() / ".local" / "share"
    return StorageConfig(data_dir=base / "rolesync")


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    uri = os.getenv("DATABASE_URI")
    if uri:
        return DatabaseConfig(uri=uri)
    return DatabaseConfig(uri=(storage or get_storage_config()).database_uri())
