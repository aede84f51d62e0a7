from __future__ import annotations

import json
import sys
from pathlib import Path

# backend/ must be importable even when started from the repo root
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from payment_analyzer.config import get_settings
from payment_analyzer.contracts.uploads import UploadedFile
from payment_analyzer.pipeline.processor import PdfProcessor, to_daily_data, validate_file_set
from payment_analyzer.pipeline.worker import PdfWorkerClient, ProgressEvent


def _load(pdf_dir: Path) -> list[UploadedFile]:
    out = []
    for p in sorted(x for x in pdf_dir.rglob("*.pdf") if x.is_file()):
        out.append(
            UploadedFile(
                name=p.name,
                data=p.read_bytes(),
                last_modified=int(p.stat().st_mtime * 1000),
            )
        )
    return out


def _on_progress(event: ProgressEvent) -> None:
    if event.current:
        print(f"  [{event.current}/{event.total}] {event.file_name}")


def main() -> None:
    """
    Simplest batch run:
      python batch_extract.py <pdf_dir> <out_dir>

    No CLI framework, only an argument check.
    """
    if len(sys.argv) < 3:
        print("Usage:")
        print("  python batch_extract.py <pdf_dir> <out_dir>")
        sys.exit(1)

    pdf_dir = Path(sys.argv[1])
    out_dir = Path(sys.argv[2])
    out_dir.mkdir(parents=True, exist_ok=True)

    print(f"[INFO] PDF dir: {pdf_dir}")
    print(f"[INFO] OUT dir: {out_dir}")

    files = _load(pdf_dir)
    with PdfWorkerClient(PdfProcessor.from_settings(get_settings())) as client:
        result = client.process_files(files, on_progress=_on_progress).result()

    report_path = out_dir / "batch_report.json"
    report_path.write_text(result.model_dump_json(indent=2), encoding="utf-8")

    daily = {
        d.isoformat(): {
            "consignments": v.consignments,
            "paid_amount": str(v.paid_amount),
            "pickups": v.pickups,
            "pickup_total": str(v.pickup_total),
        }
        for d, v in to_daily_data(result).items()
    }
    (out_dir / "daily_data.json").write_text(json.dumps(daily, indent=2), encoding="utf-8")

    check = validate_file_set(result)
    s = result.summary
    print()
    print("[RESULT]")
    print(f"  total:     {s.total_files}")
    print(f"  ok:        {s.successful_files}")
    print(f"  fail:      {s.failed_files}")
    print(f"  runsheets: {s.runsheet_count}  invoices: {s.invoice_count}  unknown: {s.unknown_count}")
    for msg in [*result.validation.errors, *check.errors]:
        print(f"  [ERROR] {msg}")
    for msg in [*result.validation.warnings, *check.warnings]:
        print(f"  [WARN] {msg}")
    print(f"  report saved to: {report_path}")


if __name__ == "__main__":
    main()
