"""Reachability search over the resolved call graph."""

from __future__ import annotations

import logging
from typing import List, Optional

from .callgraph import describe_edge
from .errors import AmbiguousEntryError, NotFoundError
from .index import NameIndex
from .models import Ambiguous, CallGraph, Resolved, TraversalResult

logger = logging.getLogger(__name__)


def resolve_entry(index: NameIndex, name: str, preferred_module: Optional[str] = None) -> str:
    """Resolve the entry function without any calling context.

    Raises:
        NotFoundError: no definition is named *name*.
        AmbiguousEntryError: several definitions remain after applying
            *preferred_module*.
    """
    resolution = index.resolve(name, caller_module_path=None, preferred_module=preferred_module)
    if isinstance(resolution, Resolved):
        return resolution.symbol
    if isinstance(resolution, Ambiguous):
        modules = [index.module_of(symbol) for symbol in resolution.candidates]
        raise AmbiguousEntryError(name, resolution.candidates, modules)
    raise NotFoundError(name, index.suggest(name))


def traverse(
    graph: CallGraph,
    index: NameIndex,
    entry_name: str,
    preferred_module: Optional[str] = None,
) -> TraversalResult:
    """Collect every function reachable from *entry_name*.

    Depth-first preorder: a function is recorded the first time it is
    reached, and its callees are followed in the order their call sites
    appear in its body. Unresolved and ambiguous calls are skipped.
    """
    entry = resolve_entry(index, entry_name, preferred_module)
    logger.debug("Resolved entry %s to %s", entry_name, entry)

    result = TraversalResult(entry=entry)
    stack: List[str] = [entry]
    while stack:
        symbol = stack.pop()
        if symbol in result.seen:
            continue
        definition = graph.nodes.get(symbol)
        if definition is None:
            continue
        result.seen.add(symbol)
        result.visited.append(definition)

        for edge in graph.outgoing(symbol):
            if not isinstance(edge.resolution, Resolved):
                logger.debug("Skipping %s", describe_edge(edge))

        # Reversed so the first call site is popped first.
        targets = [t for t in graph.targets(symbol) if t not in result.seen]
        stack.extend(reversed(targets))

    return result
