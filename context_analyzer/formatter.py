"""Render a traversal result as a file-grouped context bundle."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List

from . import config
from .models import FunctionDefinition, TraversalResult


def group_by_file(result: TraversalResult) -> Dict[str, List[FunctionDefinition]]:
    """Group visited definitions by file.

    Files keep the order in which traversal first reached them; definitions
    within a file are sorted by their position in the source.
    """
    groups: Dict[str, List[FunctionDefinition]] = {}
    seen = set()
    for definition in result.visited:
        if definition.symbol in seen:
            continue
        seen.add(definition.symbol)
        groups.setdefault(definition.file_path, []).append(definition)
    for definitions in groups.values():
        definitions.sort(key=lambda d: d.start)
    return groups


def render(result: TraversalResult, header_template: str = config.HEADER_TEMPLATE) -> str:
    blocks: List[str] = []
    for file_path, definitions in group_by_file(result).items():
        lines = [header_template.format(path=file_path)]
        lines.extend(d.text for d in definitions)
        blocks.append("\n\n".join(lines))
    if not blocks:
        return ""
    return "\n\n".join(blocks) + "\n"


def write_output(text: str, output_file: Path) -> None:
    output_file.parent.mkdir(parents=True, exist_ok=True)
    output_file.write_text(text, encoding="utf-8")
