from __future__ import annotations

import logging
import re
from decimal import Decimal
from typing import List, Optional

from ...contracts.records import InvoiceEntry, InvoiceRecord
from ...normalize.dates import safe_date
from ...normalize.numbers import parse_money_token, quantize_money
from ..blocks.text import tokenize
from ..types import ParsedPdf
from .base import DataCheck, PdfParserBase

logger = logging.getLogger(__name__)

_AMOUNT = r"(\d+(?:,\d{3})*\.?\d{0,2})"

# Declared document total, tried in order
_DOCUMENT_TOTAL_RES = (
    re.compile(r"docket\s+total:\s*£" + _AMOUNT, re.IGNORECASE),
    re.compile(r"total:\s*gbp\s*£" + _AMOUNT, re.IGNORECASE),
    re.compile(r"gbp\s*£" + _AMOUNT + r"\s*total:", re.IGNORECASE),
)

_ENTRY_DATE_RE = re.compile(r"^(\d{2})/(\d{2})/(\d{2})$")  # DD/MM/YY
_ENTRY_TIME_RE = re.compile(r"^\d{2}:\d{2}$")  # HH:MM
_DECIMAL_TOKEN_RE = re.compile(r"^\d+\.\d+")
_AMOUNT_TOKEN_RE = re.compile(r"^(\d+\.\d{2})")

_PICKUP_MARKER = "-PickUp"
_AMOUNT_WINDOW = 30

PICKUP_SERVICE = "Pickup Service"
STANDARD_SERVICE = "Standard"


def extract_document_total(text: str) -> Optional[Decimal]:
    for pat in _DOCUMENT_TOTAL_RES:
        m = pat.search(text)
        if m:
            return parse_money_token(m.group(1))
    return None


def _is_stop_marker(tokens: List[str], i: int) -> bool:
    return tokens[i] == "Docket" and i + 1 < len(tokens) and tokens[i + 1] == "Total:"


class InvoiceParser(PdfParserBase[InvoiceRecord]):
    kind = "invoice"
    file_type_identifiers = ("self", "invoice", "bill")
    content_indicators = ("invoice", "docket total", "gbp", "total:", "£")

    def __init__(
        self,
        *,
        min_amount: Decimal = Decimal("3.00"),
        max_amount: Decimal = Decimal("500.00"),
        total_tolerance: Decimal = Decimal("0.01"),
    ) -> None:
        self.min_amount = Decimal(min_amount)
        self.max_amount = Decimal(max_amount)
        self.total_tolerance = Decimal(total_tolerance)

    # -----------------------------
    # Entry scan
    # -----------------------------
    def extract_entries(self, text: str) -> List[InvoiceEntry]:
        """
        Line items open on "DD/MM/YY HH:MM". The first decimal token within
        the 30-token window starting at the date is the amount; it is kept
        only inside [min_amount, max_amount] and ends the search either way.
        "Docket Total:" ends the scan for good.
        """
        tokens = tokenize(text)
        n = len(tokens)
        entries: List[InvoiceEntry] = []

        for i in range(n):
            if _is_stop_marker(tokens, i):
                break

            dm = _ENTRY_DATE_RE.match(tokens[i])
            if not dm or i + 1 >= n or not _ENTRY_TIME_RE.match(tokens[i + 1]):
                continue

            day, month, yy = dm.groups()
            entry_date = safe_date(2000 + int(yy), int(month), int(day))
            if entry_date is None:
                continue

            time_token = tokens[i + 1]
            is_pickup = i + 2 < n and tokens[i + 2] == _PICKUP_MARKER

            for j in range(i + 2, min(i + _AMOUNT_WINDOW, n)):
                tok = tokens[j]
                if not _DECIMAL_TOKEN_RE.match(tok):
                    continue
                am = _AMOUNT_TOKEN_RE.match(tok)
                if not am:
                    continue
                amount = quantize_money(Decimal(am.group(1)))
                if self.min_amount <= amount <= self.max_amount:
                    entries.append(
                        InvoiceEntry(
                            date=entry_date,
                            time=time_token,
                            amount=amount,
                            service_type=PICKUP_SERVICE if is_pickup else STANDARD_SERVICE,
                        )
                    )
                break

        return entries

    # -----------------------------
    # Totals
    # -----------------------------
    def totals_match(self, calculated: Decimal, declared: Optional[Decimal]) -> bool:
        if declared is None:
            return True
        return abs(calculated - declared) <= self.total_tolerance

    def validation_message(self, calculated: Decimal, declared: Optional[Decimal]) -> str:
        if declared is None:
            return "Could not find document total for validation"
        diff = calculated - declared
        if abs(diff) <= self.total_tolerance:
            return "Totals match - validation successful"
        return (
            f"Total mismatch: calculated £{calculated:.2f}, document shows £{declared:.2f} "
            f"(difference: £{diff:.2f})"
        )

    # -----------------------------
    # PdfParserBase
    # -----------------------------
    def extract_data(self, raw: ParsedPdf, filename: str, notes: List[str]) -> InvoiceRecord:
        full_text = raw.text
        declared = extract_document_total(full_text)
        found = self.extract_entries(full_text)

        standard: List[InvoiceEntry] = []
        pickups: List[InvoiceEntry] = []
        extra_drops: List[InvoiceEntry] = []
        for e in found:
            if "pickup" in e.service_type.lower():
                pickups.append(e)
            # the token scan sets no description; only entries built with one land here
            elif "extra drop" in (e.description or "").lower():
                extra_drops.append(e)
            else:
                standard.append(e)

        calculated = quantize_money(sum((e.amount for e in found), Decimal("0")))

        logger.debug(
            "invoice %r: %d entries, calculated=%s declared=%s",
            filename, len(found), calculated, declared,
        )

        return InvoiceRecord(
            entries=sorted(standard, key=lambda e: e.date),
            pickup_services=pickups,
            extra_drops=extra_drops,
            total_amount=calculated,
            document_total=declared,
            is_valid=self.totals_match(calculated, declared),
            dates=sorted({e.date for e in found}),
            validation_message=self.validation_message(calculated, declared),
        )

    def validate_data(self, data: InvoiceRecord) -> DataCheck:
        every = data.all_entries()
        if not every:
            return DataCheck(is_valid=False, error="No payment entries found in invoice")

        warnings: List[str] = []
        if data.document_total is None or not data.is_valid:
            # missing declared total means "cannot validate", not a failure
            warnings.append(data.validation_message or "Invoice total could not be validated")

        high = [e for e in every if e.amount > self.max_amount]
        if high:
            warnings.append(f"{len(high)} entries with amounts over £{self.max_amount:.0f} detected")

        zero = [e for e in every if e.amount == 0]
        if zero:
            warnings.append(f"{len(zero)} entries with zero amounts detected")

        return DataCheck(is_valid=True, warnings=warnings)
