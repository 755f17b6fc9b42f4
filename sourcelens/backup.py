"""Content-hashed, timestamped file backups with retention.

Backups live under ``<workspace>/<backup_directory>``, mirroring each file's
path relative to the workspace, one ``<name>.<epoch-ms>.backup`` copy per
version. A ``manifest.json`` beside them records the per-file history so it
survives process restarts.
"""

from __future__ import annotations

import hashlib
import json
import logging
import time
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from .config import ModificationConfig
from .errors import BackupDisabled, BackupWriteFailure, RollbackNotFound
from .models import BackupInfo

logger = logging.getLogger(__name__)

MANIFEST_NAME = "manifest.json"
HASH_LENGTH = 16
MS_PER_DAY = 24 * 60 * 60 * 1000

PathLike = Union[str, Path]


def content_hash(content: Union[bytes, str]) -> str:
    """SHA-256 of *content*, truncated to 16 hex characters."""
    if isinstance(content, str):
        content = content.encode("utf-8")
    return hashlib.sha256(content).hexdigest()[:HASH_LENGTH]


class BackupManager:
    """Per-file backup history for one workspace."""

    def __init__(
        self,
        workspace_root: PathLike,
        config: Optional[ModificationConfig] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.workspace_root = Path(workspace_root).resolve()
        self.config = config or ModificationConfig()
        self.backup_dir = self.workspace_root / self.config.backup_directory
        self.manifest_path = self.backup_dir / MANIFEST_NAME
        self._clock = clock
        self.available = self._ensure_backup_directory()
        self._backups: Dict[str, List[BackupInfo]] = self._load_manifest()

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    @staticmethod
    def _key(file_path: PathLike) -> str:
        return str(Path(file_path).resolve())

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _backup_path_for(self, file_path: Path, timestamp: int) -> Path:
        try:
            relative = file_path.relative_to(self.workspace_root)
        except ValueError:
            relative = Path("_external", *file_path.parts[1:])
        return self.backup_dir / relative.parent / f"{file_path.name}.{timestamp}.backup"

    def _ensure_backup_directory(self) -> bool:
        try:
            self.backup_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.warning("Failed to create backup directory %s: %s", self.backup_dir, exc)
            return False
        return True

    # ------------------------------------------------------------------
    # Manifest
    # ------------------------------------------------------------------

    def _load_manifest(self) -> Dict[str, List[BackupInfo]]:
        if not self.manifest_path.exists():
            return {}
        try:
            payload = json.loads(self.manifest_path.read_text(encoding="utf-8"))
            return {
                key: [BackupInfo.from_dict(entry) for entry in entries]
                for key, entries in payload.get("files", {}).items()
            }
        except (OSError, ValueError, KeyError, TypeError) as exc:
            logger.warning("Ignoring unreadable backup manifest %s: %s", self.manifest_path, exc)
            return {}

    def _save_manifest(self) -> None:
        payload = {
            "version": 1,
            "files": {
                key: [info.to_dict() for info in history]
                for key, history in self._backups.items()
            },
        }
        try:
            self.manifest_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as exc:
            logger.warning("Could not write backup manifest %s: %s", self.manifest_path, exc)

    # ------------------------------------------------------------------
    # Backup / restore
    # ------------------------------------------------------------------

    def create_backup(self, file_path: PathLike, reason: str = "Style modification") -> BackupInfo:
        """Copy the current content of *file_path* into the backup store.

        Raises:
            BackupDisabled: Backups are turned off in the configuration.
            BackupWriteFailure: The file could not be read or the copy
                could not be written.
        """
        if not self.config.enable_backups:
            raise BackupDisabled("Backups are disabled")
        if not self.available:
            raise BackupWriteFailure(
                f"Backup directory {self.backup_dir} is not writable; mutation unavailable"
            )

        path = Path(file_path).resolve()
        key = str(path)
        history = self._backups.setdefault(key, [])
        timestamp = self._now_ms()
        if history and timestamp <= history[-1].timestamp:
            timestamp = history[-1].timestamp + 1

        try:
            data = path.read_bytes()
            backup_path = self._backup_path_for(path, timestamp)
            backup_path.parent.mkdir(parents=True, exist_ok=True)
            backup_path.write_bytes(data)
        except OSError as exc:
            if not history:
                del self._backups[key]
            raise BackupWriteFailure(f"Failed to create backup for {path}: {exc}") from exc

        info = BackupInfo(
            original_path=key,
            backup_path=str(backup_path),
            timestamp=timestamp,
            hash=content_hash(data),
            reason=reason,
        )
        history.append(info)
        self._cleanup_old_backups(key)
        self._save_manifest()
        logger.debug("Backed up %s -> %s", key, backup_path)
        return info

    def find_backup(self, file_path: PathLike, timestamp: Optional[int] = None) -> BackupInfo:
        """Backup at *timestamp*, or the most recent one.

        Raises:
            RollbackNotFound: No matching backup exists.
        """
        history = self._backups.get(self._key(file_path))
        if not history:
            raise RollbackNotFound(f"No backups found for {file_path}")
        if timestamp is None:
            return history[-1]
        for info in history:
            if info.timestamp == int(timestamp):
                return info
        raise RollbackNotFound(f"Backup not found for timestamp {timestamp}")

    def restore_from_backup(self, file_path: PathLike, timestamp: Optional[int] = None) -> bool:
        """Overwrite *file_path* with a backed-up version.

        Returns:
            True if the file was restored, False otherwise
        """
        try:
            info = self.find_backup(file_path, timestamp)
            data = Path(info.backup_path).read_bytes()
            Path(file_path).write_bytes(data)
        except RollbackNotFound as exc:
            logger.error("Failed to restore %s: %s", file_path, exc)
            return False
        except OSError as exc:
            logger.error("Failed to restore backup for %s: %s", file_path, exc)
            return False
        return True

    def record_write(self, file_path: PathLike, content: Union[bytes, str]) -> None:
        """Remember the hash of content this service wrote after the latest backup."""
        latest = self.get_latest_backup(file_path)
        if latest is None:
            return
        latest.written_hash = content_hash(content)
        self._save_manifest()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_backup_history(self, file_path: PathLike) -> List[BackupInfo]:
        return list(self._backups.get(self._key(file_path), []))

    def has_backup(self, file_path: PathLike) -> bool:
        return bool(self._backups.get(self._key(file_path)))

    def get_latest_backup(self, file_path: PathLike) -> Optional[BackupInfo]:
        history = self._backups.get(self._key(file_path))
        return history[-1] if history else None

    def get_all_backups(self) -> Dict[str, List[BackupInfo]]:
        return {key: list(history) for key, history in self._backups.items()}

    def clear_backup_references(self) -> None:
        """Forget all history; backup files stay on disk."""
        self._backups.clear()
        self._save_manifest()

    def get_backup_stats(self) -> dict:
        timestamps = [info.timestamp for history in self._backups.values() for info in history]
        return {
            "total_files": len(self._backups),
            "total_backups": len(timestamps),
            "oldest_backup": min(timestamps) if timestamps else None,
            "newest_backup": max(timestamps) if timestamps else None,
        }

    # ------------------------------------------------------------------
    # Retention
    # ------------------------------------------------------------------

    def _cleanup_old_backups(self, key: str) -> None:
        history = self._backups.get(key, [])

        excess = len(history) - max(self.config.max_backups, 1)
        if excess > 0:
            for info in history[:excess]:
                self._delete_backup_file(info)
            history = history[excess:]

        cutoff = self._now_ms() - int(self.config.auto_cleanup_days * MS_PER_DAY)
        remaining = []
        for info in history:
            if info.timestamp < cutoff:
                self._delete_backup_file(info)
            else:
                remaining.append(info)

        self._backups[key] = remaining

    @staticmethod
    def _delete_backup_file(info: BackupInfo) -> None:
        try:
            Path(info.backup_path).unlink()
        except OSError as exc:
            logger.warning("Failed to delete backup file %s: %s", info.backup_path, exc)
