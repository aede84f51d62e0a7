"""
Schemas - Pydantic models for request/response validation.

This module contains the data validation schemas used by the API
endpoints.
"""

from .analysis import (
    CompareFingerprintRequest,
    ComparisonResponse,
    DailyPaymentRequest,
    DailyPaymentResponse,
    FingerprintResponse,
    ManualFingerprintRequest,
    ParseResponse,
    PriorSubmissionIn,
    RulesIn,
)
from .common import ErrorResponse

__all__ = [
    "CompareFingerprintRequest",
    "ComparisonResponse",
    "DailyPaymentRequest",
    "DailyPaymentResponse",
    "ErrorResponse",
    "FingerprintResponse",
    "ManualFingerprintRequest",
    "ParseResponse",
    "PriorSubmissionIn",
    "RulesIn",
]
