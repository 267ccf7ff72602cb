"""Call-site detection and call graph construction."""

from __future__ import annotations

import logging
import re
from collections import defaultdict
from itertools import islice
from typing import Dict, FrozenSet, List, Optional, Sequence, Tuple

from . import config
from .index import NameIndex, strip_synthetic
from .models import (
    Ambiguous,
    CallEdge,
    CallGraph,
    CallSite,
    FunctionDefinition,
    Resolved,
)
from .scanner import Scanner

logger = logging.getLogger(__name__)

_CALL_RE = re.compile(
    r"(?P<dot>\.\s*)?"
    r"(?P<path>(?:[A-Za-z_]\w*\s*::\s*)*)"
    r"(?P<name>[A-Za-z_]\w*)"
    r"\s*(?:::\s*<[^;{}()]*?>\s*)?\("
)
_RECEIVER_RE = re.compile(r"(?<![\w.])([A-Za-z_]\w*)\s*$")


def find_call_sites(
    definition: FunctionDefinition,
    nested: Sequence[FunctionDefinition] = (),
    keywords: FrozenSet[str] = config.CALL_KEYWORDS,
    ignored_methods: FrozenSet[str] = config.IGNORED_METHODS,
) -> List[CallSite]:
    """Return the call sites in *definition*'s body, in source order.

    Only the body is scanned, and the spans of *nested* definitions are
    blanked out first so their calls are attributed to them alone. Macro
    invocations (``name!(``) are never call sites.
    """
    masked = list(Scanner(definition.text, definition.file_path).masked)
    body_offset = definition.body_start - definition.start
    for child in nested:
        lo = child.start - definition.start
        hi = child.end - definition.start
        for i in range(max(lo, 0), min(hi, len(masked))):
            if masked[i] != "\n":
                masked[i] = " "
    body = "".join(masked)

    sites: List[CallSite] = []
    for m in _CALL_RE.finditer(body, body_offset):
        name = m.group("name")
        if name in keywords:
            continue
        qualifier = tuple(
            seg.strip() for seg in m.group("path").split("::") if seg.strip()
        )
        receiver: Optional[str] = None
        text = definition.text[m.start("path") if qualifier else m.start("name"):m.end() - 1].strip()
        if m.group("dot"):
            if name in ignored_methods:
                continue
            before = _RECEIVER_RE.search(body, max(m.start() - 128, 0), m.start())
            receiver = before.group(1) if before else None
            text = "." + text
        sites.append(CallSite(
            text=text,
            name=name,
            qualifier=qualifier,
            receiver=receiver,
            offset=m.start("name"),
        ))
    return sites


def qualifier_hint(site: CallSite, caller: FunctionDefinition) -> Tuple[str, ...]:
    """Turn a call site's path qualifier into a module hint for resolution.

    ``crate::`` is dropped, ``self::``/``super::`` are made relative to the
    caller's module, and ``Self::`` or a ``self.`` receiver names the
    caller's owning type.
    """
    if not site.qualifier:
        if site.receiver == "self" and caller.owner:
            return (caller.owner,)
        return ()

    module = list(strip_synthetic(caller.module_path))
    parts = list(site.qualifier)
    if parts[0] == "crate":
        parts = parts[1:]
    elif parts[0] == "self":
        parts = module + parts[1:]
    elif parts[0] == "super":
        depth = 0
        while parts and parts[0] == "super":
            parts.pop(0)
            depth += 1
        parts = module[: max(len(module) - depth, 0)] + parts
    if parts and parts[0] == "Self":
        parts = ([caller.owner] if caller.owner else []) + parts[1:]
    return tuple(parts)


class CallGraphBuilder:
    """Resolves every call site of every indexed definition into a :class:`CallGraph`.

    Needs the complete :class:`NameIndex`: a call in one file may target a
    definition in any other.
    """

    def __init__(
        self,
        index: NameIndex,
        keywords: FrozenSet[str] = config.CALL_KEYWORDS,
        ignored_methods: FrozenSet[str] = config.IGNORED_METHODS,
    ) -> None:
        self.index = index
        self.keywords = keywords
        self.ignored_methods = ignored_methods

    def build(self) -> CallGraph:
        graph = CallGraph()
        by_file: Dict[str, List[FunctionDefinition]] = defaultdict(list)
        for definition in self.index:
            graph.nodes[definition.symbol] = definition
            by_file[definition.file_path].append(definition)

        counts = {"resolved": 0, "ambiguous": 0, "unresolved": 0}
        for definitions in by_file.values():
            definitions.sort(key=lambda d: d.start)
            for i, definition in enumerate(definitions):
                nested: List[FunctionDefinition] = []
                for other in islice(definitions, i + 1, None):
                    if other.start >= definition.end:
                        break
                    nested.append(other)
                edges = self._edges_for(definition, nested, counts)
                graph.edges[definition.symbol] = edges

        logger.debug(
            "Call graph: %d nodes, %d resolved / %d ambiguous / %d unresolved call sites",
            len(graph.nodes), counts["resolved"], counts["ambiguous"], counts["unresolved"],
        )
        return graph

    def _edges_for(
        self,
        definition: FunctionDefinition,
        nested: Sequence[FunctionDefinition],
        counts: Dict[str, int],
    ) -> List[CallEdge]:
        edges: List[CallEdge] = []
        sites = find_call_sites(definition, nested, self.keywords, self.ignored_methods)
        for site in sites:
            resolution = self.index.resolve(
                site.name,
                caller_module_path=definition.module_path,
                preferred_module=qualifier_hint(site, definition),
            )
            if isinstance(resolution, Resolved):
                counts["resolved"] += 1
            elif isinstance(resolution, Ambiguous):
                counts["ambiguous"] += 1
                logger.debug(
                    "%s: call '%s' is ambiguous between %s",
                    definition.symbol, site.text, ", ".join(resolution.candidates),
                )
            else:
                counts["unresolved"] += 1
            edges.append(CallEdge(definition.symbol, site.text, resolution))
        return edges


def build_call_graph(index: NameIndex, **kwargs) -> CallGraph:
    return CallGraphBuilder(index, **kwargs).build()


def describe_edge(edge: CallEdge) -> str:
    if isinstance(edge.resolution, Resolved):
        return f"{edge.caller} -> {edge.resolution.symbol}"
    if isinstance(edge.resolution, Ambiguous):
        return f"{edge.caller} -> {edge.callee_text} (ambiguous: {', '.join(edge.resolution.candidates)})"
    return f"{edge.caller} -> {edge.callee_text} (unresolved)"
