"""Configuration manager for sourcelens using TOML files.

Settings are layered: dataclass defaults, then the global
``~/.sourcelens/config.toml``, then the workspace's ``.sourcelens.toml``,
then explicit overrides passed by the caller.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import toml

from .config import (
    BASE_DIR,
    WORKSPACE_CONFIG_NAME,
    ModificationConfig,
    ResolutionConfig,
    known_settings,
    to_section,
)

logger = logging.getLogger(__name__)

CONFIG_FILE = BASE_DIR / "config.toml"

SECTIONS = {
    "resolution": ResolutionConfig,
    "modification": ModificationConfig,
}

# Allowed values for the enumerated settings
CHOICES = {
    "search_mode": ("first-match", "best-match"),
    "preferred_update_method": ("inline-style", "css-class", "auto"),
    "conflict_resolution": ("ask-user", "auto-merge", "cancel"),
}


def _read_toml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            return toml.load(f)
    except (toml.TomlDecodeError, OSError) as exc:
        logger.warning("Ignoring unreadable config file %s: %s", path, exc)
        return {}


def load_full_config() -> Dict[str, Any]:
    """Load the entire global TOML config (all sections)."""
    return _read_toml(CONFIG_FILE)


def _save_full_config(config: Dict[str, Any]) -> bool:
    """Write entire config dict to TOML file, preserving all sections."""
    CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
    try:
        with open(CONFIG_FILE, "w", encoding="utf-8") as f:
            toml.dump(config, f)
        return True
    except OSError as exc:
        logger.error("Could not write config file %s: %s", CONFIG_FILE, exc)
        return False


def apply_settings(base: Any, values: Dict[str, Any], source: str) -> Any:
    """Return a copy of ``base`` with known, valid keys from ``values`` applied."""
    accepted: Dict[str, Any] = {}
    for key, value in known_settings(type(base), values, source).items():
        allowed = CHOICES.get(key)
        if allowed and value not in allowed:
            logger.warning(
                "Invalid value %r for '%s' in %s (expected one of %s)",
                value, key, source, ", ".join(allowed),
            )
            continue
        accepted[key] = value
    return replace(base, **accepted) if accepted else base


def load_config(
    workspace_root: Optional[Path] = None,
    overrides: Optional[Dict[str, Dict[str, Any]]] = None,
) -> Tuple[ResolutionConfig, ModificationConfig]:
    """Resolve the effective configuration for a workspace.

    Args:
        workspace_root: Workspace whose ``.sourcelens.toml`` should be merged.
        overrides: Optional ``{"resolution": {...}, "modification": {...}}``.

    Returns:
        Tuple of (ResolutionConfig, ModificationConfig).
    """
    layers = [(load_full_config(), str(CONFIG_FILE))]
    if workspace_root is not None:
        workspace_file = Path(workspace_root) / WORKSPACE_CONFIG_NAME
        layers.append((_read_toml(workspace_file), str(workspace_file)))
    if overrides:
        layers.append((overrides, "overrides"))

    resolution = ResolutionConfig()
    modification = ModificationConfig()
    for payload, source in layers:
        resolution = apply_settings(resolution, payload.get("resolution", {}), source)
        modification = apply_settings(modification, payload.get("modification", {}), source)
    return resolution, modification


def save_config(section: str, values: Dict[str, Any]) -> bool:
    """Persist one section to the global config, preserving the others.

    Args:
        section: ``"resolution"`` or ``"modification"``
        values: Settings to merge into the section

    Returns:
        True if saved successfully, False otherwise
    """
    if section not in SECTIONS:
        raise ValueError(f"Unknown config section: {section}")
    config = load_full_config()
    current = apply_settings(SECTIONS[section](), config.get(section, {}), str(CONFIG_FILE))
    updated = apply_settings(current, values, "save_config")
    config[section] = to_section(updated)
    return _save_full_config(config)
