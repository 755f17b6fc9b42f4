"""Configuration paths and typed settings for sourcelens."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

logger = logging.getLogger(__name__)

BASE_DIR = Path(os.environ.get("SOURCELENS_HOME", str(Path.home() / ".sourcelens"))).expanduser()
WORKSPACE_CONFIG_NAME = ".sourcelens.toml"

DEFAULT_EXCLUDES = ["node_modules", ".git", "dist", "build"]

SearchMode = Literal["first-match", "best-match"]
UpdateMethod = Literal["inline-style", "css-class", "auto"]
ConflictPolicy = Literal["ask-user", "auto-merge", "cancel"]


@dataclass
class ResolutionConfig:
    cache_results: bool = True
    cache_ttl: float = 300.0  # seconds
    max_cache_size: int = 100
    search_mode: SearchMode = "first-match"
    exclude_patterns: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDES))
    max_depth: int = 10
    debug_mode: bool = False


@dataclass
class ModificationConfig:
    enable_backups: bool = True
    backup_directory: str = ".sourcelens-backups"
    max_backups: int = 10
    auto_cleanup_days: float = 7.0
    preferred_update_method: UpdateMethod = "auto"
    enable_live_reload: bool = True
    conflict_resolution: ConflictPolicy = "ask-user"
    class_stylesheet: Optional[str] = None


def field_names(config_cls) -> List[str]:
    return [f.name for f in fields(config_cls)]


_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")


def snake_case(key: str) -> str:
    return _CAMEL_BOUNDARY.sub(r"_\1", key).lower()


def known_settings(config_cls, values: Dict[str, Any], source: str) -> Dict[str, Any]:
    """Keep the entries of *values* that name a field of *config_cls*.

    camelCase keys are mapped to their snake_case field names; anything
    else is logged and dropped.
    """
    known = set(field_names(config_cls))
    accepted: Dict[str, Any] = {}
    for key, value in values.items():
        name = snake_case(key)
        if name not in known:
            logger.warning("Unknown setting '%s' in %s", key, source)
            continue
        accepted[name] = value
    return accepted


def to_section(config: Any) -> Dict[str, Any]:
    """Serialise a config dataclass for TOML (``None`` values are dropped)."""
    return {
        name: getattr(config, name)
        for name in field_names(type(config))
        if getattr(config, name) is not None
    }

