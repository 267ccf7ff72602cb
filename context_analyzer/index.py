"""Project-wide name index and call-target resolution."""

from __future__ import annotations

import logging
import re
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .errors import DuplicateDefinitionError
from .models import (
    PATH_SEPARATOR,
    Ambiguous,
    FunctionDefinition,
    Resolution,
    Resolved,
    Unresolved,
)

logger = logging.getLogger(__name__)

_HINT_SPLIT_RE = re.compile(r"::|[./\\]")


def split_module_hint(hint: Optional[str]) -> Tuple[str, ...]:
    """Split a user-supplied module hint such as ``net::client`` into segments."""
    if not hint:
        return ()
    return tuple(part for part in _HINT_SPLIT_RE.split(hint.strip()) if part)


def _ends_with(path: Sequence[str], suffix: Sequence[str]) -> bool:
    if not suffix or len(suffix) > len(path):
        return False
    return tuple(path[len(path) - len(suffix):]) == tuple(suffix)


def strip_synthetic(path: Sequence[str]) -> Tuple[str, ...]:
    """Drop the ``<fn>`` segments that nested definitions add to a module path."""
    return tuple(seg for seg in path if not seg.startswith("<"))


class NameIndex:
    """Read-only lookup of function definitions by simple name and symbol.

    Build it once with every definition in the project; duplicate qualified
    symbols keep the first definition and are reported in :attr:`duplicates`.
    """

    def __init__(self, definitions: Iterable[FunctionDefinition] = ()) -> None:
        self._by_name: Dict[str, List[FunctionDefinition]] = {}
        self._by_symbol: Dict[str, FunctionDefinition] = {}
        self.duplicates: List[DuplicateDefinitionError] = []
        for definition in definitions:
            self._add(definition)

    def _add(self, definition: FunctionDefinition) -> None:
        existing = self._by_symbol.get(definition.symbol)
        if existing is not None:
            error = DuplicateDefinitionError(
                definition.symbol,
                kept=f"{existing.file_path}:{existing.start_line}",
                ignored=f"{definition.file_path}:{definition.start_line}",
            )
            logger.warning("%s", error)
            self.duplicates.append(error)
            return
        self._by_symbol[definition.symbol] = definition
        self._by_name.setdefault(definition.name, []).append(definition)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._by_symbol)

    def __contains__(self, symbol: str) -> bool:
        return symbol in self._by_symbol

    def __iter__(self):
        return iter(self._by_symbol.values())

    def get(self, symbol: str) -> Optional[FunctionDefinition]:
        return self._by_symbol.get(symbol)

    def candidates(self, name: str) -> List[FunctionDefinition]:
        return list(self._by_name.get(name, []))

    def suggest(self, name: str, limit: int = 10) -> List[str]:
        """Qualified symbols whose simple name contains *name*, for diagnostics."""
        needle = name.lower()
        matches = sorted(
            d.symbol
            for defs in self._by_name.values()
            for d in defs
            if needle in d.name.lower()
        )
        return matches[:limit]

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve(
        self,
        name: str,
        caller_module_path: Optional[Sequence[str]] = None,
        preferred_module: Optional[Sequence[str] | str] = None,
    ) -> Resolution:
        """Resolve a simple name to a single definition.

        Precedence, first match wins:

        1. a unique project-wide candidate;
        2. no candidate at all is ``Unresolved``;
        3. the only candidate whose module path (or module path plus owner)
           equals or ends with *preferred_module*;
        4. the only candidate defined in *caller_module_path*, or failing that
           in the module enclosing a nested caller;
        5. otherwise ``Ambiguous`` with every candidate.

        Pass ``caller_module_path=None`` when there is no calling context
        (entry-point lookup) to skip step 4.
        """
        candidates = self._by_name.get(name, [])
        if len(candidates) == 1:
            return Resolved(candidates[0].symbol)
        if not candidates:
            return Unresolved()

        hint = (
            split_module_hint(preferred_module)
            if isinstance(preferred_module, str) or preferred_module is None
            else tuple(preferred_module)
        )
        if hint:
            preferred = [
                d for d in candidates
                if _ends_with(d.module_path, hint) or _ends_with(d.scope, hint)
            ]
            if len(preferred) == 1:
                return Resolved(preferred[0].symbol)

        if caller_module_path is not None:
            caller = tuple(caller_module_path)
            enclosing = strip_synthetic(caller)
            scopes = [caller] if enclosing == caller else [caller, enclosing]
            for scope in scopes:
                local = [d for d in candidates if d.module_path == scope]
                if len(local) == 1:
                    return Resolved(local[0].symbol)

        return Ambiguous(tuple(d.symbol for d in candidates))

    def module_of(self, symbol: str) -> str:
        definition = self._by_symbol.get(symbol)
        if definition is None:
            return symbol.rsplit(PATH_SEPARATOR, 1)[0]
        return definition.module
