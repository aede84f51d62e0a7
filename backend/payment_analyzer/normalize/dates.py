from __future__ import annotations

import re
from datetime import date
from typing import List, Optional

# Filename dates: DD-MM-YYYY, YYYY-MM-DD, DD-MM-YY (separators "-" or "/")
_FILENAME_DATE_PATTERNS = (
    re.compile(r"(?<!\d)(\d{1,2})[/\-](\d{1,2})[/\-](\d{4})"),
    re.compile(r"(\d{4})[/\-](\d{1,2})[/\-](\d{1,2})"),
    re.compile(r"(?<!\d)(\d{1,2})[/\-](\d{1,2})[/\-](\d{2})(?!\d)"),
)

_ISO_IN_NAME_RE = re.compile(r"(\d{4}[-/]\d{2}[-/]\d{2})")


def safe_date(year: int, month: int, day: int) -> Optional[date]:
    """date(...) that returns None instead of raising for impossible dates."""
    try:
        return date(year, month, day)
    except ValueError:
        return None


def expand_year(year: int, *, pivot: int = 50) -> int:
    """
    Two-digit year -> four digits: below pivot is 20xx, otherwise 19xx.
    """
    if year >= 100:
        return year
    return year + (2000 if year < pivot else 1900)


def parse_dmy(token: str, *, pivot: int = 50) -> Optional[date]:
    """
    "01/07/2025", "1-7-25" -> date. Year-first tokens ("2025-07-01") are
    detected by the length of the first component.
    """
    parts = re.split(r"[-/]", (token or "").strip())
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        return None

    if len(parts[0]) == 4:
        y, m, d = int(parts[0]), int(parts[1]), int(parts[2])
    else:
        d, m, y = int(parts[0]), int(parts[1]), expand_year(int(parts[2]), pivot=pivot)
    return safe_date(y, m, d)


def iso_date_in_filename(filename: Optional[str]) -> Optional[date]:
    """
    Date embedded in a filename such as "runsheetDV_2025-07-01.pdf".
    """
    if not filename:
        return None
    m = _ISO_IN_NAME_RE.search(filename)
    if not m:
        return None
    y, mo, d = m.group(1).replace("/", "-").split("-")
    return safe_date(int(y), int(mo), int(d))


def dates_in_filename(filename: str) -> List[date]:
    """
    All plausible dates in a filename. Two-digit years: 00..30 -> 20xx,
    31..99 -> 19xx.
    """
    found: List[date] = []
    for idx, pat in enumerate(_FILENAME_DATE_PATTERNS):
        for m in pat.finditer(filename or ""):
            a, b, c = m.groups()
            if idx == 0:
                dt = safe_date(int(c), int(b), int(a))
            elif idx == 1:
                dt = safe_date(int(a), int(b), int(c))
            else:
                dt = safe_date(expand_year(int(c), pivot=31), int(b), int(a))
            if dt is not None:
                found.append(dt)
    return found
