from __future__ import annotations

import re

FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*|\s*```$")

MUTATING_KEYWORDS = [
    "insert", "update", "delete", "drop", "alter", "create", "truncate",
    "grant", "revoke", "attach", "detach", "copy", "export", "import",
    "install", "load", "pragma", "set", "call",
]


class UnsafeSQLError(ValueError):
    """Statement rejected by the SELECT-only guard."""


def strip_sql_fences(text: str) -> str:
    """Remove surrounding whitespace and a Markdown code fence from LLM output."""
    return FENCE_RE.sub("", (text or "").strip()).strip()


def safe_select_only(sql: str) -> str:
    """Ensure SQL is SELECT/WITH only (no mutations)."""
    low = (sql or "").lower().strip()
    if not (low.startswith("select") or low.startswith("with")):
        raise UnsafeSQLError("only SELECT queries are allowed")
    # Drop string literals so "WHERE bike_type = 'docked'" style values don't trip the check
    bare = re.sub(r"'(?:[^']|'')*'", "''", low)
    for kw in MUTATING_KEYWORDS:
        if re.search(rf"\b{kw}\b", bare):
            raise UnsafeSQLError(f"unsafe SQL detected: {kw.upper()}")
    return sql
