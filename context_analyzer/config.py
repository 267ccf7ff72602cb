"""Default settings for context-analyzer."""

from __future__ import annotations

import os
from pathlib import Path
from typing import FrozenSet, Set

BASE_DIR = Path(
    os.environ.get("CONTEXT_ANALYZER_HOME", str(Path.home() / ".context_analyzer"))
).expanduser()
USER_CONFIG_FILE = BASE_DIR / "config.toml"
PROJECT_CONFIG_NAME = ".context-analyzer.toml"

SUPPORTED_EXTENSIONS: Set[str] = {".rs"}

SKIP_DIRS: Set[str] = {
    ".git", ".hg", ".svn", "target", "node_modules", "vendor",
    ".idea", ".vscode", "build", "dist", "__pycache__",
}

# Keywords that look like `name(` but never invoke a function.
CALL_KEYWORDS: FrozenSet[str] = frozenset({
    "if", "else", "for", "while", "loop", "match", "return", "let", "fn",
    "mod", "impl", "trait", "struct", "enum", "type", "use", "pub", "where",
    "as", "in", "move", "async", "await", "unsafe", "const", "static", "mut",
    "ref", "dyn", "break", "continue", "extern", "crate", "super", "self",
    "Self", "yield", "box",
})

# Standard-library method names skipped when seen as `.name(` so that a
# project function that happens to share the name does not pick up
# spurious edges from every iterator chain.
IGNORED_METHODS: FrozenSet[str] = frozenset({
    "is_empty", "len", "clone", "unwrap", "unwrap_or", "unwrap_or_else",
    "unwrap_or_default", "expect", "map", "map_err", "and_then", "or_else",
    "filter", "filter_map", "collect", "iter", "iter_mut", "into_iter",
    "to_string", "to_str", "to_owned", "parse", "as_str", "as_ref",
    "as_mut", "display", "send", "lock", "get", "get_mut", "push", "pop",
    "clear", "insert", "remove", "contains", "contains_key", "ok", "err",
    "ok_or", "ok_or_else", "borrow", "borrow_mut", "into", "from",
})

HEADER_TEMPLATE = "=== {path} ==="
