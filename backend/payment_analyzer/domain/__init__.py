from .analysis import Analysis, AnalysisSource, AnalysisStatus
from .calculator import DayInput, PaymentCalculator, WeeklyStats
from .entries import DailyEntry, PaymentStatus
from .errors import DomainError, InvalidCount, InvalidMoney, RulesError
from .merge import MergeStrategy, merge_paid_amount
from .rules import PaymentRules, default_rules
from .validation import ValidationIssue, ValidationReport, ValidationService
from .values import ConsignmentCount, DateRange, Money

__all__ = [
    "Analysis",
    "AnalysisSource",
    "AnalysisStatus",
    "ConsignmentCount",
    "DailyEntry",
    "DateRange",
    "DayInput",
    "DomainError",
    "InvalidCount",
    "InvalidMoney",
    "MergeStrategy",
    "Money",
    "PaymentCalculator",
    "PaymentRules",
    "PaymentStatus",
    "RulesError",
    "ValidationIssue",
    "ValidationReport",
    "ValidationService",
    "WeeklyStats",
    "default_rules",
    "merge_paid_amount",
]
