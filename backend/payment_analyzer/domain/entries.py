from __future__ import annotations

import uuid
from datetime import date
from enum import Enum
from typing import Any, Dict, Optional, Union

from ..normalize.numbers import Number
from .values import ConsignmentCount, Money

_DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

MoneyLike = Union[Money, Number]
CountLike = Union[ConsignmentCount, int]


class PaymentStatus(str, Enum):
    BALANCED = "balanced"
    OVERPAID = "overpaid"
    UNDERPAID = "underpaid"


def _parse_entry_date(raw: Any) -> date:
    if isinstance(raw, date):
        return raw
    # accepts "2025-07-01" and full ISO timestamps
    return date.fromisoformat(str(raw).strip()[:10])


class DailyEntry:
    """
    One day's payment record inside an analysis.

    expected_total = base_payment + pickup_total + unloading + attendance + early
    difference     = paid_amount - expected_total

    Both derived values are recomputed together by every mutator, so they
    are never observed out of step with their components.
    """

    def __init__(
        self,
        *,
        analysis_id: str,
        entry_date: date,
        consignments: CountLike,
        rate: MoneyLike,
        paid_amount: MoneyLike = 0,
        base_payment: Optional[MoneyLike] = None,
        pickups: CountLike = 0,
        pickup_total: MoneyLike = 0,
        unloading_bonus: MoneyLike = 0,
        attendance_bonus: MoneyLike = 0,
        early_bonus: MoneyLike = 0,
        id: Optional[str] = None,
    ) -> None:
        self._id = id or str(uuid.uuid4())
        self._analysis_id = analysis_id
        self._date = entry_date
        self._consignments = ConsignmentCount.of(consignments)
        self._rate = Money.of(rate)
        if base_payment is None:
            self._base_payment = self._rate.multiply(self._consignments.count)
        else:
            self._base_payment = Money.of(base_payment)
        self._pickups = ConsignmentCount.of(pickups)
        self._pickup_total = Money.of(pickup_total)
        self._unloading_bonus = Money.of(unloading_bonus)
        self._attendance_bonus = Money.of(attendance_bonus)
        self._early_bonus = Money.of(early_bonus)
        self._paid_amount = Money.of(paid_amount)
        self._recompute()

    # -----------------------------
    # Read-only view
    # -----------------------------
    @property
    def id(self) -> str:
        return self._id

    @property
    def analysis_id(self) -> str:
        return self._analysis_id

    @property
    def date(self) -> date:
        return self._date

    @property
    def weekday(self) -> int:
        return self._date.weekday()

    @property
    def day_name(self) -> str:
        return _DAY_NAMES[self.weekday]

    @property
    def consignments(self) -> ConsignmentCount:
        return self._consignments

    @property
    def rate(self) -> Money:
        return self._rate

    @property
    def base_payment(self) -> Money:
        return self._base_payment

    @property
    def pickups(self) -> ConsignmentCount:
        return self._pickups

    @property
    def pickup_total(self) -> Money:
        return self._pickup_total

    @property
    def unloading_bonus(self) -> Money:
        return self._unloading_bonus

    @property
    def attendance_bonus(self) -> Money:
        return self._attendance_bonus

    @property
    def early_bonus(self) -> Money:
        return self._early_bonus

    @property
    def total_bonus(self) -> Money:
        return self._unloading_bonus + self._attendance_bonus + self._early_bonus

    @property
    def expected_total(self) -> Money:
        return self._expected_total

    @property
    def paid_amount(self) -> Money:
        return self._paid_amount

    @property
    def difference(self) -> Money:
        return self._difference

    @property
    def status(self) -> PaymentStatus:
        if self._difference.is_zero():
            return PaymentStatus.BALANCED
        return PaymentStatus.OVERPAID if self._difference.is_positive() else PaymentStatus.UNDERPAID

    @property
    def is_working_day(self) -> bool:
        return self.weekday != 6

    @property
    def date_formatted(self) -> str:
        return self._date.strftime("%d/%m/%Y")

    # -----------------------------
    # Mutators
    # -----------------------------
    def update_paid_amount(self, amount: MoneyLike) -> None:
        self._paid_amount = Money.of(amount)
        self._recompute()

    def update_pickup_data(self, count: CountLike, total: MoneyLike) -> None:
        pickups = ConsignmentCount.of(count)
        pickup_total = Money.of(total)
        self._pickups = pickups
        self._pickup_total = pickup_total
        self._recompute()

    def _recompute(self) -> None:
        expected = self._base_payment + self._pickup_total + self.total_bonus
        self._expected_total = expected
        self._difference = self._paid_amount - expected

    # -----------------------------
    # Serialization
    # -----------------------------
    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self._id,
            "analysis_id": self._analysis_id,
            "date": self._date.isoformat(),
            "weekday": self.weekday,
            "consignments": self._consignments.count,
            "rate": self._rate.to_json(),
            "base_payment": self._base_payment.to_json(),
            "pickups": self._pickups.count,
            "pickup_total": self._pickup_total.to_json(),
            "unloading_bonus": self._unloading_bonus.to_json(),
            "attendance_bonus": self._attendance_bonus.to_json(),
            "early_bonus": self._early_bonus.to_json(),
            "expected_total": self._expected_total.to_json(),
            "paid_amount": self._paid_amount.to_json(),
            "difference": self._difference.to_json(),
            "status": self.status.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DailyEntry":
        # derived fields (expected_total, difference, status) are recomputed
        return cls(
            id=data.get("id"),
            analysis_id=str(data.get("analysis_id") or ""),
            entry_date=_parse_entry_date(data["date"]),
            consignments=data["consignments"],
            rate=data["rate"],
            base_payment=data.get("base_payment"),
            pickups=data.get("pickups") or 0,
            pickup_total=data.get("pickup_total") or 0,
            unloading_bonus=data.get("unloading_bonus") or 0,
            attendance_bonus=data.get("attendance_bonus") or 0,
            early_bonus=data.get("early_bonus") or 0,
            paid_amount=data.get("paid_amount") or 0,
        )

    def __repr__(self) -> str:
        return (
            f"DailyEntry(date={self._date.isoformat()}, consignments={self._consignments}, "
            f"expected={self._expected_total.to_json()}, paid={self._paid_amount.to_json()})"
        )
