"""Snapshot storage configuration helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import env_int, env_str

APP_DIR_NAME: Final[str] = "hybridledger"
DEFAULT_LATEST_FILENAME: Final[str] = "latest-snapshot.json"
DEFAULT_HISTORY_SIZE: Final[int] = 10


@dataclass(frozen=True, slots=True)
class SnapshotConfig:
    root_path: Path
    latest_filename: str = DEFAULT_LATEST_FILENAME
    history_size: int = DEFAULT_HISTORY_SIZE

    def resolve_root(self) -> Path:
        return self.root_path.expanduser().resolve()

    def ensure_root(self) -> Path:
        root = self.resolve_root()
        root.mkdir(parents=True, exist_ok=True)
        return root

    def latest_path(self, *, ensure: bool = True) -> Path:
        base = self.ensure_root() if ensure else self.resolve_root()
        return base / self.latest_filename


def _default_data_dir() -> Path:
    if os.name == "nt":
        base = os.getenv("LOCALAPPDATA")
        base_path = Path(base) if base else (Path.home() / "AppData" / "Local")
    else:
        base = os.getenv("XDG_DATA_HOME")
        base_path = Path(base) if base else (Path.home() / ".local" / "share")
    return (base_path / APP_DIR_NAME).expanduser().resolve()


def get_snapshot_config() -> SnapshotConfig:
    env_dir = os.getenv("SNAPSHOT_ROOT_PATH")
    root = Path(env_dir) if env_dir else _default_data_dir()
    return SnapshotConfig(
        root_path=root,
        latest_filename=env_str("SNAPSHOT_LATEST_FILENAME", DEFAULT_LATEST_FILENAME),
        history_size=env_int("SNAPSHOT_HISTORY_SIZE", DEFAULT_HISTORY_SIZE),
    )
