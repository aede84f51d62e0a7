from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from ..contracts.records import RawPage, RawText


@dataclass(frozen=True)
class PageText:
    page_index: int
    text: str
    lines: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ParsedPdf:
    """Pages of one document; every page text ends with a newline."""

    pages: List[PageText]

    @property
    def text(self) -> str:
        return "".join(p.text for p in self.pages)

    @property
    def first_page_text(self) -> str:
        return self.pages[0].text if self.pages else ""

    def to_raw(self) -> RawText:
        return RawText(
            text=self.text,
            pages=[RawPage(page_number=p.page_index + 1, text=p.text) for p in self.pages],
        )
