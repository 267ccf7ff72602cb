"""Function extraction from Rust source text.

Locates ``fn`` items with a body, captures their verbatim text and tags each
one with the module path active at the point of declaration. Module paths
come from the file's location in the project plus any inline ``mod`` blocks;
``impl`` and ``trait`` blocks record the owning type of their methods.
"""

from __future__ import annotations

import logging
import re
from pathlib import PurePosixPath
from typing import List, Optional, Tuple

from .models import FunctionDefinition, SourceFile, make_symbol
from .scanner import Scanner, ScopeStack

logger = logging.getLogger(__name__)

_VIS = r"(?:pub\s*(?:\([^()]*\)\s*)?)?"

_ITEM_RE = re.compile(
    r"(?<![\w$])(?:"
    r"(?P<fn>" + _VIS + r"(?:(?:const|async|unsafe|default)\s+)*"
    r'(?:extern\s*(?:"[^"\n]*"\s*)?)?fn\s+(?P<fn_name>[A-Za-z_]\w*))'
    r"|(?P<mod>" + _VIS + r"mod\s+(?P<mod_name>[A-Za-z_]\w*)\s*\{)"
    r"|(?P<block>(?:impl|trait)\b)"
    r")"
)

_IDENT_RE = re.compile(r"[A-Za-z_]\w*")
_OWNER_NOISE = {"dyn", "mut", "impl", "unsafe", "const", "auto"}


def module_path_for(rel_path: str) -> Tuple[str, ...]:
    """Derive the module path of a file from its path relative to the project root.

    ``src/net/client.rs`` becomes ``("src", "net", "client")``; a trailing
    ``mod`` or ``lib`` segment is dropped when other segments remain, so
    ``src/net/mod.rs`` and ``src/net.rs`` share the path ``src::net``.
    """
    pure = PurePosixPath(rel_path.replace("\\", "/"))
    parts = list(pure.parent.parts) + [pure.stem]
    parts = [p for p in parts if p not in ("", ".")]
    if len(parts) > 1 and parts[-1] in ("mod", "lib"):
        parts.pop()
    return tuple(parts)


class FunctionExtractor:
    """Extracts :class:`FunctionDefinition` objects from one source file."""

    def __init__(self, source: SourceFile) -> None:
        self.source = source
        self.scanner = Scanner(source.text, source.rel_path)
        self.scopes = ScopeStack(module_path_for(source.rel_path))

    def extract(self) -> List[FunctionDefinition]:
        masked = self.scanner.masked
        definitions: List[FunctionDefinition] = []
        skip_until = 0

        for match in _ITEM_RE.finditer(masked):
            start = match.start()
            if start < skip_until:
                continue
            self.scopes.pop_finished(start)

            if match.group("fn"):
                definition, resume = self._extract_function(match)
                if definition is not None:
                    definitions.append(definition)
                skip_until = resume
            elif match.group("mod"):
                brace = match.end() - 1
                self.scopes.push("mod", match.group("mod_name"), self.scanner.match(brace))
                skip_until = brace + 1
            else:
                skip_until = self._enter_block(match)

        logger.debug("Extracted %d functions from %s", len(definitions), self.source.rel_path)
        return definitions

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    def _extract_function(self, match: "re.Match[str]") -> Tuple[Optional[FunctionDefinition], int]:
        masked = self.scanner.masked
        name = match.group("fn_name")
        i = self._skip_space(match.end("fn_name"))
        if i < len(masked) and masked[i] == "<":
            i = self._skip_space(self._skip_angles(i))
        if i >= len(masked) or masked[i] != "(":
            return None, match.end()

        body_open = self._find_item_terminator(self.scanner.match(i) + 1)
        if body_open == -1 or masked[body_open] == ";":
            # Declaration without a body (trait method, extern block item).
            return None, (body_open + 1 if body_open != -1 else match.end())

        body_close = self.scanner.match(body_open)
        start = match.start()
        end = body_close + 1
        module_path = self.scopes.module_path()
        owner = self.scopes.owner()

        definition = FunctionDefinition(
            symbol=make_symbol(module_path, owner, name),
            name=name,
            module_path=module_path,
            owner=owner,
            text=self.source.text[start:end],
            file_path=self.source.rel_path,
            start=start,
            end=end,
            body_start=body_open,
            start_line=self.scanner.line_of(start),
        )
        local = f"{owner}::{name}" if owner else name
        self.scopes.push("fn", local, body_close)
        return definition, body_open + 1

    def _enter_block(self, match: "re.Match[str]") -> int:
        """Push an ``impl``/``trait`` scope; return the offset to resume from."""
        terminator = self._find_item_terminator(match.end())
        if terminator == -1 or self.scanner.masked[terminator] == ";":
            return match.end()
        header = self.scanner.masked[match.end():terminator]
        owner = _owner_from_header(header, match.group("block").startswith("trait"))
        self.scopes.push("impl", owner, self.scanner.match(terminator))
        return terminator + 1

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _find_item_terminator(self, start: int) -> int:
        """Next ``{`` or ``;`` at bracket depth zero, skipping ``(..)`` and ``[..]``."""
        i = start
        while True:
            i = self.scanner.find_next("([{;)]}", i)
            if i == -1:
                return -1
            ch = self.scanner.text[i]
            if ch in "([":
                i = self.scanner.match(i) + 1
                continue
            return i if ch in "{;" else -1

    def _skip_space(self, i: int) -> int:
        masked = self.scanner.masked
        while i < len(masked) and masked[i].isspace():
            i += 1
        return i

    def _skip_angles(self, i: int) -> int:
        return _skip_angles(self.scanner.masked, i)


def _skip_angles(text: str, i: int) -> int:
    """Offset just past the ``<...>`` group starting at *i* (``->`` is not a closer)."""
    depth = 0
    while i < len(text):
        ch = text[i]
        if ch == "<":
            depth += 1
        elif ch == ">" and text[i - 1] != "-":
            depth -= 1
            if depth == 0:
                return i + 1
        elif ch in "{;":
            return i
        i += 1
    return i


def _strip_angles(text: str) -> str:
    out = []
    i = 0
    while i < len(text):
        if text[i] == "<":
            i = _skip_angles(text, i)
            out.append(" ")
            continue
        out.append(text[i])
        i += 1
    return "".join(out)


def _owner_from_header(header: str, is_trait: bool) -> str:
    """Name of the type an ``impl``/``trait`` header is about.

    ``impl<T> Display for Wrapper<T> where T: Debug`` gives ``Wrapper``;
    ``trait Shape: Debug`` gives ``Shape``.
    """
    head = re.split(r"\bwhere\b", _strip_angles(header))[0]
    if not is_trait:
        head = re.split(r"\bfor\b", head)[-1]
    idents = [t for t in _IDENT_RE.findall(head) if t not in _OWNER_NOISE]
    if not idents:
        return "_"
    return idents[0] if is_trait else idents[-1]


def extract_functions(source: SourceFile) -> List[FunctionDefinition]:
    """Extract every function with a body from *source*, in source order.

    Raises:
        ParseError: if the file's delimiters are unbalanced.
    """
    return FunctionExtractor(source).extract()
