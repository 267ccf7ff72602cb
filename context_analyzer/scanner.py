"""Quote- and comment-aware structural scanner for Rust source text.

The scanner makes a single pass over a file and produces:

- a *masked* copy of the text, the same length as the original, in which
  comment text and the interior of string/char literals are replaced with
  spaces (newlines are kept so line numbers still line up);
- a table pairing every ``{``, ``(`` and ``[`` in code with its closing
  delimiter.

Everything downstream (signature matching, body boundaries, call-site
detection) runs against the masked text, so a brace inside ``"{"`` or a
``fn`` inside a comment can never be mistaken for structure.

It also provides :class:`ScopeStack`, the explicit module-path state that the
extractor pushes and pops as ``mod``/``impl``/``fn`` blocks open and close.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .errors import ParseError

logger = logging.getLogger(__name__)

OPENERS = {"{": "}", "(": ")", "[": "]"}
CLOSERS = {v: k for k, v in OPENERS.items()}

_RAW_STRING_RE = re.compile(r'(?:b|c)?r(#*)"')


def _is_ident_char(ch: str) -> bool:
    return ch.isalnum() or ch == "_"


class Scanner:
    """Structural view over one file's text."""

    def __init__(self, text: str, path: str = "<string>") -> None:
        self.text = text
        self.path = path
        self._code = bytearray(len(text))
        self._pairs: Dict[int, int] = {}
        self.masked = self._scan()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def is_code(self, offset: int) -> bool:
        """True when *offset* lies outside every comment and literal."""
        return 0 <= offset < len(self.text) and bool(self._code[offset])

    def find_next(self, chars: str, start: int, end: Optional[int] = None) -> int:
        """Offset of the next code character in *chars*, or -1."""
        stop = len(self.text) if end is None else min(end, len(self.text))
        for i in range(max(start, 0), stop):
            if self.text[i] in chars and self.is_code(i):
                return i
        return -1

    def match(self, offset: int) -> int:
        """Offset of the delimiter closing the opener at *offset*."""
        try:
            return self._pairs[offset]
        except KeyError:
            raise ValueError(f"No structural opener at offset {offset} in {self.path}") from None

    def line_of(self, offset: int) -> int:
        return self.text.count("\n", 0, offset) + 1

    # ------------------------------------------------------------------
    # Lexing
    # ------------------------------------------------------------------

    def _scan(self) -> str:
        text = self.text
        n = len(text)
        out = list(text)
        stack: List[Tuple[str, int]] = []
        i = 0

        while i < n:
            ch = text[i]
            nxt = text[i + 1] if i + 1 < n else ""

            if ch == "/" and nxt == "/":
                end = text.find("\n", i)
                end = n if end == -1 else end
                self._blank(out, i, end)
                i = end
                continue

            if ch == "/" and nxt == "*":
                end = self._block_comment_end(i)
                self._blank(out, i, end)
                i = end
                continue

            if ch in "rbc" and (i == 0 or not _is_ident_char(text[i - 1])):
                raw = _RAW_STRING_RE.match(text, i)
                if raw:
                    end = self._raw_string_end(i, raw)
                    self._blank(out, i + 1, end - 1)
                    i = end
                    continue

            if ch == '"':
                end = self._string_end(i)
                self._blank(out, i + 1, end - 1)
                i = end
                continue

            if ch == "'":
                end = self._char_literal_end(i)
                if end is not None:
                    self._blank(out, i + 1, end - 1)
                    i = end
                    continue

            self._code[i] = 1
            if ch in OPENERS:
                stack.append((ch, i))
            elif ch in CLOSERS:
                if not stack:
                    raise self._error(i, f"unexpected '{ch}'")
                opener, start = stack.pop()
                if OPENERS[opener] != ch:
                    raise self._error(
                        i, f"'{ch}' closes '{opener}' opened on line {self.line_of(start)}"
                    )
                self._pairs[start] = i
            i += 1

        if stack:
            opener, start = stack[-1]
            raise self._error(start, f"unclosed '{opener}'")
        return "".join(out)

    def _block_comment_end(self, start: int) -> int:
        # Rust block comments nest.
        text = self.text
        depth = 0
        i = start
        while i < len(text) - 1:
            pair = text[i:i + 2]
            if pair == "/*":
                depth += 1
                i += 2
            elif pair == "*/":
                depth -= 1
                i += 2
                if depth == 0:
                    return i
            else:
                i += 1
        raise self._error(start, "unterminated block comment")

    def _string_end(self, start: int) -> int:
        text = self.text
        i = start + 1
        while i < len(text):
            ch = text[i]
            if ch == "\\":
                i += 2
                continue
            if ch == '"':
                return i + 1
            i += 1
        raise self._error(start, "unterminated string literal")

    def _raw_string_end(self, start: int, match: "re.Match[str]") -> int:
        terminator = '"' + match.group(1)
        end = self.text.find(terminator, match.end())
        if end == -1:
            raise self._error(start, "unterminated raw string literal")
        return end + len(terminator)

    def _char_literal_end(self, start: int) -> Optional[int]:
        """End offset of a char literal at *start*, or None for a lifetime."""
        text = self.text
        if start + 1 >= len(text):
            return None
        if text[start + 1] == "\\":
            end = text.find("'", start + 3)
            if end == -1 or "\n" in text[start:end]:
                return None
            return end + 1
        if start + 2 < len(text) and text[start + 2] == "'" and text[start + 1] != "\n":
            return start + 3
        return None

    @staticmethod
    def _blank(out: List[str], start: int, end: int) -> None:
        for j in range(start, end):
            if out[j] != "\n":
                out[j] = " "

    def _error(self, offset: int, message: str) -> ParseError:
        return ParseError(self.path, offset, self.line_of(offset), message)


# ---------------------------------------------------------------------------
# Scope tracking
# ---------------------------------------------------------------------------

@dataclass
class Scope:
    kind: str  # "mod", "impl" or "fn"
    name: str
    end: int   # offset of the closing delimiter


class ScopeStack:
    """Module-path state threaded through extraction of a single file.

    ``mod`` scopes add their name to the module path, ``fn`` scopes add a
    synthetic ``<name>`` segment so nested functions get distinct symbols,
    and ``impl``/``trait`` scopes only set the owner of directly contained
    methods.
    """

    def __init__(self, base: Tuple[str, ...] = ()) -> None:
        self.base = tuple(base)
        self._scopes: List[Scope] = []

    def push(self, kind: str, name: str, end: int) -> None:
        self._scopes.append(Scope(kind, name, end))

    def pop_finished(self, offset: int) -> None:
        """Drop every scope whose closing delimiter lies before *offset*."""
        while self._scopes and self._scopes[-1].end < offset:
            self._scopes.pop()

    def module_path(self) -> Tuple[str, ...]:
        segments = list(self.base)
        for scope in self._scopes:
            if scope.kind == "mod":
                segments.append(scope.name)
            elif scope.kind == "fn":
                segments.append(f"<{scope.name}>")
        return tuple(segments)

    def owner(self) -> Optional[str]:
        if self._scopes and self._scopes[-1].kind == "impl":
            return self._scopes[-1].name
        return None

    def __len__(self) -> int:
        return len(self._scopes)
