"""Where sbomgraph keeps files between runs (the HTTP response cache)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import env_value

APP_DIR_NAME: Final[str] = "sbomgraph"
HTTP_CACHE_FILENAME: Final[str] = "http_cache.db"


def default_data_dir() -> Path:
    """``%LOCALAPPDATA%/sbomgraph`` on Windows, ``$XDG_DATA_HOME/sbomgraph`` elsewhere."""

    if os.name == "nt":
        root = env_value("LOCALAPPDATA")
        base = Path(root) if root else Path.home() / "AppData" / "Local"
    else:
        root = env_value("XDG_DATA_HOME")
        base = Path(root) if root else Path.home() / ".local" / "share"
    return (base / APP_DIR_NAME).expanduser().resolve()


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path
    http_cache_filename: str = HTTP_CACHE_FILENAME

    @property
    def http_cache_file(self) -> Path:
        return self.data_dir.expanduser().resolve() / self.http_cache_filename

    def prepare(self) -> Path:
        """Create the data directory; return the cache file path inside it."""

        cache_file = self.http_cache_file
        cache_file.parent.mkdir(parents=True, exist_ok=True)
        return cache_file


def get_storage_config() -> StorageConfig:
    override = env_value("SBOMGRAPH_DATA_DIR")
    return StorageConfig(data_dir=Path(override) if override else default_data_dir())


def get_http_cache_path() -> Path:
    return get_storage_config().prepare()
