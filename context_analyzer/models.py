"""Core data models shared by extraction, resolution and traversal."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple, Union

PATH_SEPARATOR = "::"


@dataclass(frozen=True)
class SourceFile:
    path: Path
    rel_path: str
    text: str


@dataclass(frozen=True)
class FunctionDefinition:
    symbol: str
    name: str
    module_path: Tuple[str, ...]
    owner: Optional[str]
    text: str
    file_path: str
    start: int
    end: int
    body_start: int
    start_line: int

    @property
    def module(self) -> str:
        return PATH_SEPARATOR.join(self.module_path)

    @property
    def scope(self) -> Tuple[str, ...]:
        """Module path plus the ``impl``/``trait`` owner, if any."""
        if self.owner:
            return self.module_path + (self.owner,)
        return self.module_path


def make_symbol(module_path: Tuple[str, ...], owner: Optional[str], name: str) -> str:
    parts = list(module_path)
    if owner:
        parts.append(owner)
    parts.append(name)
    return PATH_SEPARATOR.join(parts)


# ---------------------------------------------------------------------------
# Resolution outcomes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Resolved:
    symbol: str


@dataclass(frozen=True)
class Ambiguous:
    candidates: Tuple[str, ...]


@dataclass(frozen=True)
class Unresolved:
    pass


Resolution = Union[Resolved, Ambiguous, Unresolved]


# ---------------------------------------------------------------------------
# Call graph
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CallSite:
    """A call expression found in a function body."""

    text: str
    name: str
    qualifier: Tuple[str, ...] = ()
    receiver: Optional[str] = None
    offset: int = 0


@dataclass(frozen=True)
class CallEdge:
    caller: str
    callee_text: str
    resolution: Resolution


@dataclass
class CallGraph:
    nodes: Dict[str, FunctionDefinition] = field(default_factory=dict)
    edges: Dict[str, List[CallEdge]] = field(default_factory=dict)

    def outgoing(self, symbol: str) -> List[CallEdge]:
        return self.edges.get(symbol, [])

    def targets(self, symbol: str) -> List[str]:
        """Resolved callee symbols in call-site order (duplicates kept)."""
        return [
            edge.resolution.symbol
            for edge in self.outgoing(symbol)
            if isinstance(edge.resolution, Resolved)
        ]


@dataclass
class TraversalResult:
    entry: str
    visited: List[FunctionDefinition] = field(default_factory=list)
    seen: Set[str] = field(default_factory=set)

    def __len__(self) -> int:
        return len(self.visited)

    @property
    def symbols(self) -> List[str]:
        return [d.symbol for d in self.visited]
