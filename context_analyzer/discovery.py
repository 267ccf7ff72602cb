"""Source file discovery and loading."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Iterator, List, Optional

from . import config
from .models import SourceFile

logger = logging.getLogger(__name__)


def iter_source_files(
    root: Path,
    extensions: Optional[Iterable[str]] = None,
    exclude_dirs: Optional[Iterable[str]] = None,
) -> Iterator[Path]:
    """Yield source files under *root* in sorted order, skipping excluded directories."""
    exts = {e.lower() for e in (extensions or config.SUPPORTED_EXTENSIONS)}
    skip = set(exclude_dirs) if exclude_dirs is not None else config.SKIP_DIRS

    for file_path in sorted(root.rglob("*")):
        if not file_path.is_file() or file_path.suffix.lower() not in exts:
            continue
        rel_parts = file_path.relative_to(root).parts[:-1]
        if any(part in skip for part in rel_parts):
            continue
        yield file_path


def relative_path(file_path: Path, root: Path) -> str:
    try:
        return file_path.relative_to(root).as_posix()
    except ValueError:
        return file_path.as_posix()


def load_sources(root: Path, paths: Iterable[Path]) -> List[SourceFile]:
    """Read each file as UTF-8; unreadable files are logged and skipped."""
    sources: List[SourceFile] = []
    for path in paths:
        try:
            text = path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            logger.warning("Could not read %s: %s", path, exc)
            continue
        sources.append(SourceFile(path=path, rel_path=relative_path(path, root), text=text))
    return sources
