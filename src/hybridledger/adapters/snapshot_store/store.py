"""File-backed snapshot store: one ``latest`` document plus a bounded history."""

from __future__ import annotations

import shutil
import threading
from datetime import UTC
from logging import getLogger
from typing import TYPE_CHECKING
from uuid import uuid4

from pydantic import ValidationError

from hybridledger.domain.errors import PersistenceError

from .schema import SnapshotDocument

if TYPE_CHECKING:
    from pathlib import Path

    from hybridledger.config.storage import SnapshotConfig
    from hybridledger.domain.model import Snapshot

log = getLogger(__name__)

HISTORY_PREFIX = "snapshot-"
HISTORY_TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"


def _created_at(path: Path) -> float:
    stat = path.stat()
    return getattr(stat, "st_birthtime", stat.st_ctime)


class FileSnapshotStore:
    """Persist snapshots as indented camelCase JSON under ``config.root_path``.

    ``save`` writes a temporary file first and only then copies it over the
    latest document and into a new history entry, so readers never observe a
    partially written latest file. A single lock serialises saves and loads
    within the process.
    """

    def __init__(self, config: SnapshotConfig) -> None:
        self._config = config
        self._lock = threading.Lock()

    def save(self, snapshot: Snapshot) -> None:
        with self._lock:
            try:
                root = self._config.ensure_root()
            except OSError as exc:
                raise PersistenceError(f"Cannot create snapshot directory: {exc}") from exc

            payload = SnapshotDocument.from_domain(snapshot).model_dump_json(
                indent=2, by_alias=True
            )
            temp_path = root / f"tmp-{uuid4().hex}.json"
            latest_path = root / self._config.latest_filename
            stamp = snapshot.captured_at.astimezone(UTC).strftime(HISTORY_TIMESTAMP_FORMAT)
            history_path = root / f"{HISTORY_PREFIX}{stamp}.json"
            try:
                temp_path.write_text(payload, encoding="utf-8")
                shutil.copyfile(temp_path, latest_path)
                with temp_path.open("rb") as source, history_path.open("xb") as target:
                    shutil.copyfileobj(source, target)
            except FileExistsError as exc:
                raise PersistenceError(
                    f"History snapshot {history_path.name} already exists"
                ) from exc
            except OSError as exc:
                raise PersistenceError(f"Failed to write snapshot: {exc}") from exc
            finally:
                temp_path.unlink(missing_ok=True)

            log.debug("Saved snapshot to %s and %s", latest_path, history_path.name)
            self._prune(root)

    def get_latest(self) -> Snapshot | None:
        with self._lock:
            path = self._config.latest_path(ensure=False)
            try:
                raw = path.read_text(encoding="utf-8")
            except FileNotFoundError:
                return None
            except OSError as exc:
                raise PersistenceError(f"Failed to read {path}: {exc}") from exc
            try:
                return SnapshotDocument.model_validate_json(raw).to_domain()
            except ValidationError as exc:
                raise PersistenceError(f"Invalid snapshot document {path}: {exc}") from exc

    def list_history(self) -> list[Path]:
        """History files, newest first."""

        root = self._config.resolve_root()
        if not root.is_dir():
            return []
        return sorted(self._history_files(root), key=lambda p: p.name, reverse=True)

    def _history_files(self, root: Path) -> list[Path]:
        return [p for p in root.glob(f"{HISTORY_PREFIX}*.json") if p.is_file()]

    def _prune(self, root: Path) -> None:
        keep = self._config.history_size
        if keep <= 0:
            return
        files = sorted(self._history_files(root), key=lambda p: (_created_at(p), p.name))
        for stale in files[: max(len(files) - keep, 0)]:
            try:
                stale.unlink()
            except OSError:
                log.warning("Failed to prune snapshot history file %s", stale, exc_info=True)
