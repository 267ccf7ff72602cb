"""Orchestrates extraction, indexing, graph building and traversal."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from .callgraph import CallGraphBuilder
from .config_manager import AnalyzerSettings
from .discovery import iter_source_files, load_sources
from .errors import DuplicateDefinitionError, ParseError, PathError
from .extractor import extract_functions
from .formatter import render
from .index import NameIndex
from .models import CallGraph, FunctionDefinition, SourceFile, TraversalResult
from .traversal import traverse

logger = logging.getLogger(__name__)


def extract_project(
    sources: Sequence[SourceFile],
) -> Tuple[List[FunctionDefinition], List[ParseError]]:
    """Extract definitions from every file; a file that fails to parse is skipped."""
    definitions: List[FunctionDefinition] = []
    errors: List[ParseError] = []
    for source in sources:
        try:
            definitions.extend(extract_functions(source))
        except ParseError as exc:
            logger.warning("Skipping %s: %s", source.rel_path, exc)
            errors.append(exc)
    return definitions, errors


class ContextAnalyzer:
    """Builds the call graph of a project and extracts bundles from it.

    Extraction runs per file and is merged into a single :class:`NameIndex`
    before any call is resolved, so cross-file calls resolve the same way
    regardless of file order.
    """

    def __init__(self, project_root: Path, settings: Optional[AnalyzerSettings] = None) -> None:
        root = Path(project_root).expanduser()
        if not root.is_dir():
            raise PathError(root)
        if not os.access(root, os.R_OK | os.X_OK):
            raise PathError(root, "is not readable")
        self.project_root = root.resolve()
        self.settings = settings or AnalyzerSettings()
        self.sources: List[SourceFile] = []
        self.parse_errors: List[ParseError] = []
        self.index = NameIndex()
        self.graph = CallGraph()
        self._loaded = False

    @property
    def duplicates(self) -> List[DuplicateDefinitionError]:
        return self.index.duplicates

    def load(self) -> Dict[str, int]:
        """Discover, extract and index every source file, then build the call graph."""
        paths = list(iter_source_files(
            self.project_root,
            extensions=self.settings.extensions,
            exclude_dirs=self.settings.exclude_dirs,
        ))
        logger.debug("Found %d source files in project", len(paths))
        self.sources = load_sources(self.project_root, paths)

        definitions, self.parse_errors = extract_project(self.sources)
        self.index = NameIndex(definitions)
        self.graph = CallGraphBuilder(
            self.index,
            keywords=self.settings.call_keywords,
            ignored_methods=self.settings.ignored_methods,
        ).build()
        self._loaded = True

        return {
            "files": len(self.sources),
            "functions": len(self.index),
            "parse_errors": len(self.parse_errors),
            "duplicates": len(self.index.duplicates),
        }

    def traverse(self, entry_name: str, preferred_module: Optional[str] = None) -> TraversalResult:
        if not self._loaded:
            self.load()
        return traverse(self.graph, self.index, entry_name, preferred_module)

    def bundle(self, entry_name: str, preferred_module: Optional[str] = None) -> str:
        """Render the reachable subgraph of *entry_name* grouped by file."""
        return render(self.traverse(entry_name, preferred_module))
