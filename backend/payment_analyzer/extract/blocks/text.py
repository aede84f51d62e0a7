from __future__ import annotations

import re
from typing import Iterable, List

# spaces, tabs and NBSP collapse to one space inside a line
_INLINE_WS_RE = re.compile(r"[ \t\u00A0]+")


def tokenize(text: str) -> List[str]:
    """Whitespace tokens; newlines and runs of spaces are all separators."""
    return (text or "").split()


def window(tokens: List[str], start: int, size: int) -> str:
    """tokens[start:start+size] joined by single spaces."""
    return " ".join(tokens[start:start + size])


def normalize_lines(lines: Iterable[str]) -> List[str]:
    """Collapse inline whitespace and drop blank lines (used for debug dumps)."""
    out: List[str] = []
    for ln in lines:
        ln = _INLINE_WS_RE.sub(" ", ln.replace("\r", "")).strip()
        if ln:
            out.append(ln)
    return out
