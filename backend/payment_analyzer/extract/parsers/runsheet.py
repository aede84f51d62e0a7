from __future__ import annotations

import logging
import re
from datetime import date
from typing import Callable, Dict, List, Optional

from ...contracts.records import RunsheetDay, RunsheetRecord
from ...normalize.dates import iso_date_in_filename, parse_dmy
from ..blocks.text import tokenize, window
from ..types import ParsedPdf
from .base import DataCheck, PdfParserBase

logger = logging.getLogger(__name__)

# "Date: 01/07/2025" is the canonical runsheet header
_DATE_LABEL_RE = re.compile(r"Date:\s*(\d{2}[-/]\d{2}[-/]\d{4})")

# Looser alternatives, tried in this order
_ALT_DATE_RES = (
    re.compile(r"(\d{2}[-/]\d{2}[-/]\d{4})"),
    re.compile(r"(\d{4}[-/]\d{2}[-/]\d{2})"),
    re.compile(r"Date[\s:]*(\d{1,2}[-/]\d{1,2}[-/]\d{2,4})", re.IGNORECASE),
)

_BARE_INT_RE = re.compile(r"^\d+$")
_CONSIGNMENT_ID_RE = re.compile(r"^(?:\d{7}|AH\d+)$")
_STOP_WINDOW = 10
_STOP_MARKERS = ("Delivery", "Collection")


def extract_page_date(text: str) -> Optional[date]:
    """First resolvable date on a runsheet page, or None."""
    m = _DATE_LABEL_RE.search(text)
    if m:
        d = parse_dmy(m.group(1))
        if d is not None:
            return d

    for pat in _ALT_DATE_RES:
        m = pat.search(text)
        if not m:
            continue
        d = parse_dmy(m.group(1), pivot=50)
        if d is not None:
            return d
    return None


def extract_page_consignments(text: str) -> List[str]:
    """
    Consignment IDs on a page.

    A stop line reads "<seq> <id> ... Delivery|Collection": a bare integer,
    then a 7-digit or AH-prefixed id, with the marker somewhere in the
    10-token window starting at the integer.
    """
    tokens = tokenize(text)
    ids: List[str] = []
    for i in range(len(tokens) - 1):
        if not _BARE_INT_RE.match(tokens[i]):
            continue
        nxt = tokens[i + 1]
        if not _CONSIGNMENT_ID_RE.match(nxt):
            continue
        nearby = window(tokens, i, _STOP_WINDOW)
        if any(marker in nearby for marker in _STOP_MARKERS):
            ids.append(nxt)
    return ids


class RunsheetParser(PdfParserBase[RunsheetRecord]):
    kind = "runsheet"
    file_type_identifiers = ("runsheet", "dv_")
    content_indicators = ("runsheet", "delivery", "collection", "consignment", "dv_")

    def __init__(
        self,
        *,
        max_daily_consignments: int = 200,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.max_daily_consignments = max_daily_consignments
        self._today = today

    def _resolve_date(self, page_date: Optional[date], filename: str, notes: List[str]) -> date:
        if page_date is not None:
            return page_date

        from_name = iso_date_in_filename(filename)
        if from_name is not None:
            notes.append(f"No date found on page; using date from filename ({from_name.isoformat()})")
            return from_name

        today = self._today()
        notes.append(f"No date found on page or in filename; using today's date ({today.isoformat()})")
        return today

    def extract_data(self, raw: ParsedPdf, filename: str, notes: List[str]) -> RunsheetRecord:
        per_date: Dict[date, List[str]] = {}

        for page in raw.pages:
            ids = extract_page_consignments(page.text)
            if not ids:
                continue
            day = self._resolve_date(extract_page_date(page.text), filename, notes)
            # pages sharing a date accumulate
            per_date.setdefault(day, []).extend(ids)

        days = sorted(per_date)
        by_date = {d.isoformat(): len(per_date[d]) for d in days}
        total = sum(by_date.values())

        logger.debug("runsheet %r: %d day(s), %d consignment(s)", filename, len(days), total)

        return RunsheetRecord(
            dates=days,
            consignments_by_date=by_date,
            total_consignments=total,
            details=[
                RunsheetDay(date=d, consignments=len(per_date[d]), consignment_ids=per_date[d])
                for d in days
            ],
        )

    def validate_data(self, data: RunsheetRecord) -> DataCheck:
        if not data.dates:
            return DataCheck(is_valid=False, error="No dates found in runsheet")
        if data.total_consignments == 0:
            return DataCheck(is_valid=False, error="No consignments found in runsheet")

        warnings: List[str] = []
        for day_iso, count in data.consignments_by_date.items():
            if count > self.max_daily_consignments:
                warnings.append(f"Very high consignment count ({count}) on {day_iso}")

        if any(d.weekday() == 6 for d in data.dates):
            warnings.append("Sunday deliveries detected")

        return DataCheck(is_valid=True, warnings=warnings)
