from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from functools import total_ordering
from typing import Iterable, List, Union

from ..normalize.numbers import Number, quantize_money, to_decimal
from .errors import InvalidCount, InvalidMoney


@total_ordering
@dataclass(frozen=True, eq=False)
class Money:
    """
    Fixed-point amount, always stored with exactly two decimal places.

    Negative values are allowed: differences (paid - expected) use them.
    """

    amount: Decimal

    def __post_init__(self) -> None:
        try:
            raw = to_decimal(self.amount)
        except ValueError as e:
            raise InvalidMoney(f"Invalid money amount: {self.amount!r}") from e
        object.__setattr__(self, "amount", quantize_money(raw))

    @classmethod
    def zero(cls) -> "Money":
        return cls(Decimal("0"))

    @classmethod
    def of(cls, value: Union["Money", Number]) -> "Money":
        if isinstance(value, Money):
            return value
        return cls(value)  # type: ignore[arg-type]

    @classmethod
    def sum(cls, values: Iterable["Money"]) -> "Money":
        total = cls.zero()
        for v in values:
            total = total.add(v)
        return total

    def add(self, other: "Money") -> "Money":
        return Money(self.amount + other.amount)

    def subtract(self, other: "Money") -> "Money":
        return Money(self.amount - other.amount)

    def multiply(self, multiplier: Number) -> "Money":
        try:
            factor = to_decimal(multiplier)
        except ValueError as e:
            raise InvalidMoney(f"Invalid multiplier: {multiplier!r}") from e
        return Money(self.amount * factor)

    def abs(self) -> "Money":
        return Money(abs(self.amount))

    def is_zero(self) -> bool:
        return self.amount == 0

    def is_positive(self) -> bool:
        return self.amount > 0

    def is_negative(self) -> bool:
        return self.amount < 0

    def __add__(self, other: "Money") -> "Money":
        return self.add(other)

    def __sub__(self, other: "Money") -> "Money":
        return self.subtract(other)

    def __mul__(self, multiplier: Number) -> "Money":
        return self.multiply(multiplier)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return self.amount == other.amount

    def __lt__(self, other: "Money") -> bool:
        return self.amount < other.amount

    def __hash__(self) -> int:
        return hash(self.amount)

    def __str__(self) -> str:
        sign = "-" if self.amount < 0 else ""
        return f"{sign}£{abs(self.amount):.2f}"

    def to_json(self) -> str:
        return f"{self.amount:.2f}"


@total_ordering
@dataclass(frozen=True, eq=False)
class ConsignmentCount:
    """Number of consignments delivered on a day. Non-negative integer."""

    count: int

    def __post_init__(self) -> None:
        c = self.count
        if isinstance(c, bool):
            raise InvalidCount(f"Invalid consignment count: {c!r}")
        if isinstance(c, float):
            if math.isnan(c) or math.isinf(c) or not c.is_integer():
                raise InvalidCount(f"Invalid consignment count: {c!r}")
            c = int(c)
        elif isinstance(c, Decimal):
            if not c.is_finite() or c != c.to_integral_value():
                raise InvalidCount(f"Invalid consignment count: {c!r}")
            c = int(c)
        elif not isinstance(c, int):
            raise InvalidCount(f"Invalid consignment count: {c!r}")
        if c < 0:
            raise InvalidCount(
                f"Invalid consignment count: {c!r} (must be a non-negative integer)"
            )
        object.__setattr__(self, "count", c)

    @classmethod
    def zero(cls) -> "ConsignmentCount":
        return cls(0)

    @classmethod
    def of(cls, value: Union["ConsignmentCount", int, float]) -> "ConsignmentCount":
        if isinstance(value, ConsignmentCount):
            return value
        return cls(value)  # type: ignore[arg-type]

    def add(self, other: "ConsignmentCount") -> "ConsignmentCount":
        return ConsignmentCount(self.count + other.count)

    def is_zero(self) -> bool:
        return self.count == 0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConsignmentCount):
            return NotImplemented
        return self.count == other.count

    def __lt__(self, other: "ConsignmentCount") -> bool:
        return self.count < other.count

    def __hash__(self) -> int:
        return hash(self.count)

    def __int__(self) -> int:
        return self.count

    def __str__(self) -> str:
        return str(self.count)


@dataclass(frozen=True)
class DateRange:
    """Inclusive period between two dates."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError("Start date must be before or equal to end date")

    @classmethod
    def single_day(cls, day: date) -> "DateRange":
        return cls(day, day)

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    @property
    def day_count(self) -> int:
        return (self.end - self.start).days + 1

    def days(self) -> List[date]:
        return [self.start + timedelta(days=i) for i in range(self.day_count)]

    def working_days(self) -> List[date]:
        # Sunday is the only non-working day
        return [d for d in self.days() if d.weekday() != 6]

    def format_range(self) -> str:
        return f"{self.start:%d/%m/%Y} - {self.end:%d/%m/%Y}"

    def to_dict(self) -> dict:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}

    @classmethod
    def from_dict(cls, data: dict) -> "DateRange":
        return cls(date.fromisoformat(str(data["start"])[:10]), date.fromisoformat(str(data["end"])[:10]))
