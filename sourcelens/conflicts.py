"""Out-of-band edit detection against the backup index."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

from .backup import BackupManager, content_hash
from .models import Conflict, ConflictDetection

logger = logging.getLogger(__name__)

FILE_CHANGED_SUGGESTIONS = [
    "Review the changes made outside the editor",
    "Reload the file before applying new styles",
    "Roll back to the last backup if the edit was unintended",
]


class ConflictDetector:
    """Compare a file's live hash with the last state this tool knows about.

    That state is the hash of the content last written through the mutation
    service when one was recorded, otherwise the hash captured at backup
    time. Files without backups never conflict.

    Reverting a file by hand to its pre-edit content therefore counts as a
    change: the live hash matches the backup but not the recorded write.
    """

    def __init__(self, backup_manager: BackupManager) -> None:
        self.backup_manager = backup_manager

    def detect(self, file_path: Union[str, Path]) -> ConflictDetection:
        latest = self.backup_manager.get_latest_backup(file_path)
        if latest is None:
            return ConflictDetection(has_conflicts=False)

        try:
            current = content_hash(Path(file_path).read_bytes())
        except OSError as exc:
            logger.warning("Could not read %s for conflict detection: %s", file_path, exc)
            return ConflictDetection(
                has_conflicts=True,
                conflicts=[
                    Conflict(
                        type="file-changed",
                        file_path=str(file_path),
                        description="Could not read file to check for changes",
                    )
                ],
            )

        expected = latest.written_hash or latest.hash
        if current == expected:
            return ConflictDetection(has_conflicts=False)

        logger.info("%s changed since its last backup", file_path)
        return ConflictDetection(
            has_conflicts=True,
            conflicts=[
                Conflict(
                    type="file-changed",
                    file_path=str(file_path),
                    description="File has been modified since last backup",
                    suggestions=list(FILE_CHANGED_SUGGESTIONS),
                )
            ],
        )
