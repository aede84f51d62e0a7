# backend/payment_analyzer/api/analysis.py

from __future__ import annotations

import logging
from functools import lru_cache
from typing import List

from fastapi import APIRouter, Depends, File, Form, UploadFile
from pydantic import TypeAdapter, ValidationError
from starlette.concurrency import run_in_threadpool

from ..contracts.uploads import UploadedFile
from ..core.errors import UserFacingError
from ..pipeline.processor import validate_file_set
from ..schemas.analysis import (
    CompareFingerprintRequest,
    ComparisonResponse,
    DailyPaymentRequest,
    DailyPaymentResponse,
    FingerprintResponse,
    ManualFingerprintRequest,
    ParseResponse,
)
from ..services.analysis_service import AnalysisService
from ..services.repositories import InMemoryFingerprintHistory

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analysis", tags=["analysis"])

_LAST_MODIFIED = TypeAdapter(List[int])


@lru_cache
def get_analysis_service() -> AnalysisService:
    return AnalysisService(history=InMemoryFingerprintHistory())


def _last_modified_list(raw: str, count: int) -> List[int]:
    try:
        values = _LAST_MODIFIED.validate_json(raw or "[]")
    except ValidationError as e:
        raise UserFacingError(
            code="BAD_LAST_MODIFIED",
            message="last_modified must be a JSON array of integers (epoch ms)",
            stage="input",
        ) from e
    if values and len(values) != count:
        raise UserFacingError(
            code="BAD_LAST_MODIFIED",
            message=f"last_modified has {len(values)} value(s) for {count} file(s)",
            stage="input",
        )
    return values or [0] * count


@router.post("/parse", response_model=ParseResponse)
async def parse_files(
    files: List[UploadFile] = File(...),
    user_id: str = Form(""),
    last_modified: str = Form("[]"),
    svc: AnalysisService = Depends(get_analysis_service),
) -> ParseResponse:
    stamps = _last_modified_list(last_modified, len(files))

    uploads: List[UploadedFile] = []
    for f, ts in zip(files, stamps):
        uploads.append(
            UploadedFile(
                name=f.filename or "",
                data=await f.read(),
                mime_type=f.content_type or "",
                last_modified=ts,
            )
        )

    result = await run_in_threadpool(svc.parse_files, uploads, user_id=user_id)

    fingerprint = None
    if result.validation.is_valid and uploads:
        fingerprint = (await run_in_threadpool(svc.compute_fingerprint, uploads)).value

    logger.info("parse: %d file(s), user=%r, valid=%s", len(uploads), user_id, result.validation.is_valid)
    return ParseResponse(result=result, file_set=validate_file_set(result), fingerprint=fingerprint)


@router.post("/daily-payment", response_model=DailyPaymentResponse)
def daily_payment(
    req: DailyPaymentRequest,
    svc: AnalysisService = Depends(get_analysis_service),
) -> DailyPaymentResponse:
    entry = svc.compute_daily_payment(
        req.rules.to_rules(),
        req.date,
        req.consignments,
        paid_amount=req.paid_amount,
        pickups=req.pickups,
        pickup_total=req.pickup_total,
    )
    return DailyPaymentResponse.from_entry(entry)


@router.post("/fingerprint/manual", response_model=FingerprintResponse)
def manual_fingerprint(
    req: ManualFingerprintRequest,
    svc: AnalysisService = Depends(get_analysis_service),
) -> FingerprintResponse:
    if req.start > req.end:
        raise UserFacingError(
            code="BAD_PERIOD",
            message="Period start must not be after its end",
            stage="input",
        )
    fp = svc.compute_manual_fingerprint(req.user_id, req.start, req.end, req.entries)
    return FingerprintResponse.from_fingerprint(fp)


@router.post("/fingerprint/compare", response_model=ComparisonResponse)
def compare_fingerprint(
    req: CompareFingerprintRequest,
    svc: AnalysisService = Depends(get_analysis_service),
) -> ComparisonResponse:
    comparison = svc.compare_fingerprint(
        req.current,
        [p.to_prior() for p in req.prior],
        files=req.files,
    )
    return ComparisonResponse.from_comparison(comparison)
