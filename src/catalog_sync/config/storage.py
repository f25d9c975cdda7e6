"""Where the catalog database lives."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import flag_env_var, optional_env_var

APP_DIR_NAME: Final[str] = "catalog-sync"
DEFAULT_DB_FILENAME: Final[str] = "catalog.db"


def user_data_dir() -> Path:
    """Platform data directory for the application (XDG on POSIX, LOCALAPPDATA on Windows)."""

    if os.name == "nt":
        root = optional_env_var("LOCALAPPDATA")
        base = Path(root) if root else Path.home() / "AppData" / "Local"
    else:
        root = optional_env_var("XDG_DATA_HOME")
        base = Path(root) if root else Path.home() / ".local" / "share"
    return base / APP_DIR_NAME


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path
    database_filename: str = DEFAULT_DB_FILENAME

    @property
    def database_path(self) -> Path:
        return self.data_dir.expanduser().resolve() / self.database_filename

    def sqlite_uri(self) -> str:
        """SQLite URI for the catalog file; creates its directory on first use."""

        path = self.database_path
        path.parent.mkdir(parents=True, exist_ok=True)
        return f"sqlite+pysqlite:///{path}"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str
    echo: bool = False


def get_storage_config() -> StorageConfig:
    override = optional_env_var("CATALOG_SYNC_DATA_DIR")
    return StorageConfig(data_dir=Path(override) if override else user_data_dir())


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    """``DATABASE_URI`` wins; otherwise a SQLite file in the data directory."""

    uri = optional_env_var("DATABASE_URI")
    if uri is None:
        uri = (storage or get_storage_config()).sqlite_uri()
    return DatabaseConfig(uri=uri, echo=flag_env_var("CATALOG_SYNC_SQL_ECHO"))
