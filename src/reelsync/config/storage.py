"""Location of the catalog database."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

DEFAULT_DB_FILENAME: Final[str] = "reelsync.db"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Directory holding the SQLite catalog when no ``DATABASE_URI`` is set."""

    data_dir: Path

    @property
    def database_path(self) -> Path:
        return self.data_dir / DEFAULT_DB_FILENAME

    def database_uri(self) -> str:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        return f"sqlite+pysqlite:///{self.database_path}"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def get_storage_config() -> StorageConfig:
    """Use ``REELSYNC_DATA_DIR``, falling back to ``$XDG_DATA_HOME/reelsync``."""

    env_dir = os.getenv("REELSYNC_DATA_DIR")
    if env_dir:
        data_dir = Path(env_dir)
    else:
        xdg_data_home = os.getenv("XDG_DATA_HOME")
        base = Path(xdg_data_home) if xdg_data_home else Path.home() / ".local" / "share"
        data_dir = base / "reelsync"
    return StorageConfig(data_dir=data_dir.expanduser().resolve())


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    env_uri = os.getenv("DATABASE_URI")
    if env_uri:
        return DatabaseConfig(uri=env_uri)
    storage_config = storage or get_storage_config()
    return DatabaseConfig(uri=storage_config.database_uri())
