from __future__ import annotations

import sys
from pathlib import Path

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from payment_analyzer.extract.pdf_reader import read_pdf_file
from payment_analyzer.extract.blocks.text import tokenize
from payment_analyzer.pipeline.processor import PdfProcessor


def main() -> None:
    if len(sys.argv) < 2:
        print("Usage: python debug_dump_text.py <pdf_path> [--lines N] [--tokens]")
        sys.exit(1)

    pdf_path = sys.argv[1]
    n = 250
    if "--lines" in sys.argv:
        i = sys.argv.index("--lines")
        if i + 1 < len(sys.argv):
            n = int(sys.argv[i + 1])
    show_tokens = "--tokens" in sys.argv

    parsed = read_pdf_file(pdf_path)
    processor = PdfProcessor()
    kind = processor.classify(Path(pdf_path).name, parsed.first_page_text[: processor.preview_chars])

    all_lines = []
    for p in parsed.pages:
        all_lines.extend(p.lines)

    print(f"[INFO] pages={len(parsed.pages)} lines={len(all_lines)} classified_as={kind}")
    if show_tokens:
        print("----- FIRST TOKENS -----")
        for i, tok in enumerate(tokenize(parsed.text)[:n]):
            print(f"{i:5d} {tok}")
        return

    print("----- FIRST LINES -----")
    for ln in all_lines[:n]:
        print(ln)


if __name__ == "__main__":
    main()
