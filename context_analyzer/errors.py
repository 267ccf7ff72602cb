"""Exceptions raised while building and querying a call graph."""

from __future__ import annotations

from pathlib import Path
from typing import List, Sequence


class ContextAnalyzerError(Exception):
    """Base class for all context-analyzer errors."""


class PathError(ContextAnalyzerError):
    """Raised when the project root is missing or unreadable."""

    def __init__(self, path: Path, reason: str = "is not a readable directory"):
        self.path = path
        self.reason = reason
        super().__init__(f"'{path}' {reason}")


class ParseError(ContextAnalyzerError):
    """Raised when a file's delimiters cannot be balanced."""

    def __init__(self, path: str, offset: int, line: int, message: str):
        self.path = path
        self.offset = offset
        self.line = line
        super().__init__(f"{path}:{line}: {message}")


class DuplicateDefinitionError(ContextAnalyzerError):
    """Two definitions produced the same qualified symbol."""

    def __init__(self, symbol: str, kept: str, ignored: str):
        self.symbol = symbol
        self.kept = kept
        self.ignored = ignored
        super().__init__(
            f"Duplicate definition of '{symbol}': keeping {kept}, ignoring {ignored}"
        )


class NotFoundError(ContextAnalyzerError):
    """The entry function has no definition in the project."""

    def __init__(self, name: str, suggestions: Sequence[str] = ()):
        self.name = name
        self.suggestions: List[str] = list(suggestions)
        super().__init__(f"Function '{name}' not found in project")


class AmbiguousEntryError(ContextAnalyzerError):
    """The entry function name matches several definitions."""

    def __init__(self, name: str, candidates: Sequence[str], module_paths: Sequence[str]):
        self.name = name
        self.candidates: List[str] = list(candidates)
        self.module_paths: List[str] = list(module_paths)
        super().__init__(
            f"Multiple implementations of '{name}' found: {', '.join(self.candidates)}"
        )
