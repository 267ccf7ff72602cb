"""TOML configuration loading for context-analyzer."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Set

import toml

from . import config

logger = logging.getLogger(__name__)


@dataclass
class AnalyzerSettings:
    """Resolved settings for a single analysis run."""

    extensions: Set[str] = field(default_factory=lambda: set(config.SUPPORTED_EXTENSIONS))
    exclude_dirs: Set[str] = field(default_factory=lambda: set(config.SKIP_DIRS))
    ignored_methods: FrozenSet[str] = config.IGNORED_METHODS
    call_keywords: FrozenSet[str] = config.CALL_KEYWORDS


def load_full_config(path: Path) -> Dict[str, Any]:
    """Load an entire TOML file, returning an empty dict when unusable."""
    if not path.is_file():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            return toml.load(f)
    except (OSError, toml.TomlDecodeError) as exc:
        logger.warning("Ignoring config file %s: %s", path, exc)
        return {}


def find_config_file(project_root: Path, explicit: Optional[Path] = None) -> Optional[Path]:
    """Pick the config file to use: explicit path, project-local, then user-level."""
    if explicit is not None:
        return explicit
    local = project_root / config.PROJECT_CONFIG_NAME
    if local.is_file():
        return local
    if config.USER_CONFIG_FILE.is_file():
        return config.USER_CONFIG_FILE
    return None


def _normalise_extensions(values: Iterable[str]) -> Set[str]:
    result = set()
    for ext in values:
        ext = ext.strip().lower()
        if not ext:
            continue
        if not ext.startswith("."):
            ext = "." + ext
        result.add(ext)
    return result


def _string_list(section: Dict[str, Any], key: str, path: Path) -> Optional[List[str]]:
    """Read ``key`` as a list of strings; a bare string counts as one item."""
    value = section.get(key)
    if value is None:
        return None
    if isinstance(value, str):
        return [value]
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return value
    logger.warning("Ignoring '%s' in %s: expected a list of strings, got %r", key, path, value)
    return None


def load_settings(
    project_root: Path,
    config_path: Optional[Path] = None,
    extensions: Optional[Iterable[str]] = None,
    exclude_dirs: Optional[Iterable[str]] = None,
) -> AnalyzerSettings:
    """Build :class:`AnalyzerSettings` from defaults, the TOML file and CLI overrides.

    The ``[analyzer]`` table may define ``extensions``, ``exclude_dirs`` and
    ``ignored_methods``. Explicit arguments take precedence over the file;
    extra exclude directories are added to the defaults rather than replacing
    them. Values of the wrong type are logged and ignored.
    """
    settings = AnalyzerSettings()

    if config_path is not None and not config_path.is_file():
        logger.warning("Config file %s not found, using defaults", config_path)

    path = find_config_file(project_root, config_path)
    if path is not None:
        section = load_full_config(path).get("analyzer", {})
        if not isinstance(section, dict):
            logger.warning("Ignoring 'analyzer' in %s: expected a table", path)
            section = {}
        logger.debug("Loaded settings from %s: %s", path, section)

        file_exts = _string_list(section, "extensions", path)
        if file_exts:
            settings.extensions = _normalise_extensions(file_exts)
        file_excludes = _string_list(section, "exclude_dirs", path)
        if file_excludes:
            settings.exclude_dirs |= set(file_excludes)
        file_methods = _string_list(section, "ignored_methods", path)
        if file_methods is not None:
            settings.ignored_methods = frozenset(file_methods)

    if extensions:
        settings.extensions = _normalise_extensions(extensions)
    if exclude_dirs:
        settings.exclude_dirs |= set(exclude_dirs)

    return settings
