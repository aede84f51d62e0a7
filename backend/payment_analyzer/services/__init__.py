"""
Services layer - Business logic orchestration.

Coordinates parsing, calculation and fingerprinting for callers (HTTP API,
scripts) and reaches persistence only through the repository protocols.
"""

from .analysis_service import AnalysisOutcome, AnalysisService
from .repositories import (
    AnalysisRepository,
    FingerprintHistory,
    InMemoryFingerprintHistory,
    PriorAnalysisSource,
)

__all__ = [
    "AnalysisOutcome",
    "AnalysisRepository",
    "AnalysisService",
    "FingerprintHistory",
    "InMemoryFingerprintHistory",
    "PriorAnalysisSource",
]
