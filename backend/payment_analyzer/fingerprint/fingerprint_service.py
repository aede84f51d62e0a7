"""
Fingerprints for duplicate / update detection.

A fingerprint is a SHA-256 hex digest over a canonical JSON document, so the
same file set (or the same manual entries) always hashes to the same value
regardless of input order. It is an identity for comparison only.

Canonical JSON: sorted keys, compact separators, UTF-8.
"""

from __future__ import annotations

import hashlib
import json
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from ..contracts.processing import FileMetadata
from ..contracts.records import FileKind
from ..normalize.dates import dates_in_filename
from ..normalize.numbers import to_pence

logger = logging.getLogger(__name__)

CONTENT_PREFIX_CHARS = 1000
PARTIAL_MATCH_THRESHOLD = 0.5

_RUNSHEET_NAME_IDS = ("runsheet", "dv_")
_INVOICE_NAME_IDS = ("self", "invoice", "bill")


def canonical_json(payload: Any) -> str:
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def sha256_hex(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def detect_file_kind(filename: str) -> FileKind:
    low = (filename or "").lower()
    if any(i in low for i in _RUNSHEET_NAME_IDS):
        return "runsheet"
    if any(i in low for i in _INVOICE_NAME_IDS):
        return "invoice"
    return "unknown"


def file_type_label(filename: str) -> str:
    """runsheet / invoice by name, else the text after the last dot (the whole name when there is none)."""
    kind = detect_file_kind(filename)
    if kind != "unknown":
        return kind
    low = (filename or "").lower()
    ext = low.rsplit(".", 1)[-1]
    return ext or "unknown"


# ----------------------------
# Data
# ----------------------------


@dataclass(frozen=True)
class FileInfo:
    """Inputs for one file in a file-set fingerprint."""

    name: str
    size: int
    last_modified: int
    content: str = ""


@dataclass(frozen=True)
class Fingerprint:
    value: str
    file_hashes: Tuple[str, ...] = ()
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fingerprint": self.value,
            "components": {
                "file_hashes": list(self.file_hashes),
                "combined_hash": self.value,
                "metadata": dict(self.metadata),
            },
        }


class FingerprintStatus(str, Enum):
    NEW = "new"
    UNCHANGED = "unchanged"
    MODIFIED = "modified"
    DUPLICATE = "duplicate"


@dataclass(frozen=True)
class PriorSubmission:
    """A previously stored fingerprint and, when recorded, its file metadata."""

    fingerprint: str
    files: Optional[Tuple[FileMetadata, ...]] = None
    analysis_id: Optional[str] = None


@dataclass(frozen=True)
class FingerprintComparison:
    status: FingerprintStatus
    matched: Optional[PriorSubmission] = None
    updated_files: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "matched_fingerprint": self.matched.fingerprint if self.matched else None,
            "matched_analysis_id": self.matched.analysis_id if self.matched else None,
            "updated_files": list(self.updated_files),
        }


@dataclass(frozen=True)
class FileFingerprint:
    """Per-file history record (content hash of the bytes)."""

    name: str
    size: int
    last_modified: int
    hash: str
    type: FileKind
    processed_at: int = 0  # epoch ms
    analysis_id: Optional[str] = None

    @classmethod
    def from_metadata(
        cls, meta: FileMetadata, *, processed_at: int = 0, analysis_id: Optional[str] = None
    ) -> "FileFingerprint":
        if not meta.hash:
            raise ValueError(f"File {meta.name!r} has no content hash")
        return cls(
            name=meta.name,
            size=meta.size,
            last_modified=meta.last_modified,
            hash=meta.hash,
            type=detect_file_kind(meta.name),
            processed_at=processed_at,
            analysis_id=analysis_id,
        )


@dataclass(frozen=True)
class FileComparison:
    is_identical: bool = False
    is_duplicate: bool = False
    has_changed: bool = False
    previous: Optional[FileFingerprint] = None
    change_type: Optional[str] = None  # size / timestamp / content


@dataclass
class FileSetValidation:
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    duplicates: List[Tuple[FileFingerprint, FileFingerprint, str]] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class AnalysisMatch:
    has_match: bool
    confidence: str  # exact / partial / none
    analysis_id: Optional[str] = None
    matched: Tuple[FileFingerprint, ...] = ()


def _file_key(meta: FileMetadata) -> Tuple[str, int, int]:
    return (meta.name, meta.size, meta.last_modified)


# ----------------------------
# Service
# ----------------------------


class FileFingerprintService:
    """Stateless; every method is a pure function of its arguments."""

    # -----------------------------
    # File-set fingerprint
    # -----------------------------
    def file_hash(self, info: FileInfo) -> str:
        return sha256_hex(
            canonical_json(
                {
                    "name": info.name.lower(),
                    "size": info.size,
                    "lastModified": info.last_modified,
                    "contentPrefix": (info.content or "")[:CONTENT_PREFIX_CHARS],
                }
            )
        )

    def create_fingerprint(self, files: Sequence[FileInfo]) -> Fingerprint:
        if not files:
            raise ValueError("Cannot create fingerprint for empty file list")

        ordered = sorted(files, key=lambda f: (f.name.lower(), f.name))
        hashes = sorted(self.file_hash(f) for f in ordered)
        metadata = {
            "fileCount": len(files),
            "totalSize": sum(f.size for f in files),
            "fileTypes": sorted({file_type_label(f.name) for f in files}),
        }
        value = sha256_hex(canonical_json({"fileHashes": hashes, "metadata": metadata}))
        logger.debug("fingerprint over %d file(s): %s", len(files), value[:12])
        return Fingerprint(value=value, file_hashes=tuple(hashes), metadata=metadata)

    # -----------------------------
    # Manual-entry fingerprint
    # -----------------------------
    def create_manual_fingerprint(
        self,
        user_id: str,
        start: date,
        end: date,
        entries: Iterable[Any],
    ) -> Fingerprint:
        """
        entries: objects with date / consignments / paid_amount
        (ManualEntry or DailyEntry-like). Amounts go in as integer pence.
        """
        rows = sorted(entries, key=lambda e: e.date)
        payload = {
            "source": "manual",
            "userId": user_id,
            "period": {"start": start.isoformat(), "end": end.isoformat()},
            "entries": [
                {
                    "date": e.date.isoformat(),
                    "consignments": int(e.consignments),
                    "paidAmount": to_pence(_amount(e.paid_amount)),
                }
                for e in rows
            ],
        }
        value = sha256_hex(canonical_json(payload))
        return Fingerprint(value=value, metadata={"source": "manual", "entryCount": len(rows)})

    # -----------------------------
    # Comparison against prior submissions
    # -----------------------------
    def compare_fingerprint(
        self,
        current: str,
        prior_list: Iterable[PriorSubmission],
        files: Optional[Sequence[FileMetadata]] = None,
    ) -> FingerprintComparison:
        priors = list(prior_list)

        for prior in priors:
            if prior.fingerprint != current:
                continue
            if prior.files and files is not None:
                if sorted(map(_file_key, prior.files)) == sorted(map(_file_key, files)):
                    return FingerprintComparison(FingerprintStatus.DUPLICATE, matched=prior)
            return FingerprintComparison(FingerprintStatus.UNCHANGED, matched=prior)

        if files:
            for prior in priors:
                updated = self._updated_names(files, prior.files or ())
                if updated:
                    return FingerprintComparison(
                        FingerprintStatus.MODIFIED, matched=prior, updated_files=tuple(updated)
                    )

        return FingerprintComparison(FingerprintStatus.NEW)

    @staticmethod
    def _updated_names(current: Sequence[FileMetadata], previous: Iterable[FileMetadata]) -> List[str]:
        prev_by_sig: Dict[Tuple[str, int], FileMetadata] = {(p.name, p.size): p for p in previous}
        out: List[str] = []
        for meta in current:
            prev = prev_by_sig.get((meta.name, meta.size))
            if prev is not None and prev.last_modified != meta.last_modified:
                out.append(meta.name)
        return out

    def are_similar(self, fingerprint1: str, fingerprint2: str) -> bool:
        return fingerprint1 == fingerprint2

    # -----------------------------
    # Per-file history
    # -----------------------------
    @staticmethod
    def find_existing(meta: FileMetadata, history: Sequence[FileFingerprint]) -> Optional[FileFingerprint]:
        for fp in history:
            if fp.name == meta.name and fp.size == meta.size and fp.last_modified == meta.last_modified:
                return fp
        for fp in history:
            if fp.name == meta.name and fp.size == meta.size:
                return fp
        return None

    def compare_file(self, meta: FileMetadata, history: Sequence[FileFingerprint]) -> FileComparison:
        existing = self.find_existing(meta, history)
        if existing is None:
            return FileComparison()

        identical = meta.hash is not None and meta.hash == existing.hash
        changed = meta.last_modified > existing.last_modified

        change_type: Optional[str] = None
        if not identical:
            if meta.size != existing.size:
                change_type = "size"
            elif meta.last_modified != existing.last_modified:
                change_type = "timestamp"
            else:
                change_type = "content"

        return FileComparison(
            is_identical=identical,
            is_duplicate=identical and not changed,
            has_changed=changed,
            previous=existing,
            change_type=change_type,
        )

    def validate_file_set(
        self, files: Sequence[FileMetadata], history: Sequence[FileFingerprint]
    ) -> FileSetValidation:
        result = FileSetValidation()
        current = [FileFingerprint.from_metadata(m) for m in files]

        seen: Dict[str, FileFingerprint] = {}
        for fp in current:
            first = seen.get(fp.hash)
            if first is not None:
                result.duplicates.append((fp, first, "identical"))
                result.errors.append(f'Duplicate files detected: "{fp.name}" and "{first.name}"')
            else:
                seen[fp.hash] = fp

        for meta, fp in zip(files, current):
            cmp = self.compare_file(meta, history)
            if cmp.is_duplicate and cmp.previous is not None:
                result.duplicates.append((fp, cmp.previous, "identical"))
                when = _format_ms(cmp.previous.processed_at)
                result.warnings.append(f'File "{meta.name}" was already processed on {when}')
            elif cmp.has_changed and cmp.previous is not None:
                result.duplicates.append((fp, cmp.previous, "updated"))
                result.warnings.append(
                    f'File "{meta.name}" has been modified since last analysis ({cmp.change_type})'
                )

        runsheets = sum(1 for fp in current if fp.type == "runsheet")
        invoices = sum(1 for fp in current if fp.type == "invoice")
        if runsheets == 0 and invoices > 0:
            result.warnings.append("No runsheet files detected - payment calculations may be incomplete")
        if invoices == 0 and runsheets > 0:
            result.warnings.append("No invoice files detected - paid amounts will be zero")

        return result

    def find_matching_analysis(
        self, file_hashes: Sequence[str], history: Sequence[FileFingerprint]
    ) -> AnalysisMatch:
        by_analysis: Dict[str, List[FileFingerprint]] = defaultdict(list)
        for fp in history:
            if fp.analysis_id:
                by_analysis[fp.analysis_id].append(fp)

        signature = sorted(file_hashes)
        for analysis_id, fps in by_analysis.items():
            if sorted(fp.hash for fp in fps) == signature:
                return AnalysisMatch(True, "exact", analysis_id, tuple(fps))

        current = set(file_hashes)
        best_id: Optional[str] = None
        best_fps: List[FileFingerprint] = []
        best_score = 0.0
        for analysis_id, fps in by_analysis.items():
            matched = sum(1 for fp in fps if fp.hash in current)
            score = matched / max(len(fps), len(file_hashes))
            if score > best_score:
                best_id, best_fps, best_score = analysis_id, fps, score

        if best_id is not None and best_score >= PARTIAL_MATCH_THRESHOLD:
            return AnalysisMatch(True, "partial", best_id, tuple(best_fps))
        return AnalysisMatch(False, "none")

    # -----------------------------
    # Period from filenames
    # -----------------------------
    def extract_date_range(self, filenames: Iterable[str]) -> Tuple[Optional[date], Optional[date]]:
        found: List[date] = []
        for name in filenames:
            found.extend(dates_in_filename(name))
        if not found:
            return None, None
        return min(found), max(found)


def _amount(value: Any) -> Any:
    # Money exposes .amount; plain numbers pass through
    return getattr(value, "amount", value)


def _format_ms(ms: int) -> str:
    if not ms:
        return "an earlier date"
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc).strftime("%d/%m/%Y")
