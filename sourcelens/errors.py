"""Error taxonomy for source resolution and style mutation.

Internals raise these; the public services catch them and turn them into
typed results, so callers never see an exception from this package.
"""

from __future__ import annotations


class SourceLensError(Exception):
    """Base class. ``code`` is a stable identifier surfaced in results."""

    code = "unknown-error"

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.code)
        self.message = message or self.code


class DetectionFailure(SourceLensError):
    code = "detection-failure"


class NoSourceMatch(SourceLensError):
    code = "no-source-match"


class OutOfRangeLine(SourceLensError):
    code = "out-of-range-line"


class ElementNotFound(SourceLensError):
    code = "element-not-found"


class UnsupportedFramework(SourceLensError):
    code = "unsupported-framework"


class BackupDisabled(SourceLensError):
    code = "backup-disabled"


class BackupWriteFailure(SourceLensError):
    code = "backup-write-failure"


class ConflictDetected(SourceLensError):
    code = "conflict-detected"


class RollbackNotFound(SourceLensError):
    code = "rollback-not-found"
