from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional, Tuple, Union

from .errors import RulesError
from .values import Money

SATURDAY = 5
SUNDAY = 6
MONDAY = 0

_RATE_FIELDS = (
    "weekday_rate",
    "saturday_rate",
    "unloading_bonus",
    "attendance_bonus",
    "early_bonus",
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_datetime(value: Union[date, datetime]) -> datetime:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)


def _parse_datetime(raw: Any) -> Optional[datetime]:
    if raw is None or raw == "":
        return None
    if isinstance(raw, (date, datetime)):
        return _as_datetime(raw)
    s = str(raw).strip().replace("Z", "+00:00")
    return _as_datetime(datetime.fromisoformat(s))


@dataclass(frozen=True)
class Bonuses:
    unloading: Money
    attendance: Money
    early: Money

    @property
    def total(self) -> Money:
        return self.unloading + self.attendance + self.early


@dataclass(frozen=True)
class PaymentRules:
    """
    Versioned rate and bonus schedule.

    Instances never change: edits produce version N+1 through
    create_new_version(), and retiring a version returns a deactivated copy.
    """

    user_id: str
    weekday_rate: Money
    saturday_rate: Money
    unloading_bonus: Money
    attendance_bonus: Money
    early_bonus: Money
    version: int = 1
    valid_from: datetime = field(default_factory=_utcnow)
    valid_until: Optional[datetime] = None
    is_active: bool = True
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def __post_init__(self) -> None:
        for name in _RATE_FIELDS:
            object.__setattr__(self, name, Money.of(getattr(self, name)))
        if isinstance(self.version, bool) or not isinstance(self.version, int) or self.version < 1:
            raise RulesError(f"Invalid rules version: {self.version!r}")
        object.__setattr__(self, "valid_from", _as_datetime(self.valid_from))
        if self.valid_until is not None:
            object.__setattr__(self, "valid_until", _as_datetime(self.valid_until))

    # -----------------------------
    # Day-of-week lookups (Mon=0 .. Sun=6)
    # -----------------------------
    def get_rate_for_day(self, weekday: int) -> Money:
        return self.saturday_rate if weekday == SATURDAY else self.weekday_rate

    def get_applicable_bonuses(self, weekday: int) -> Bonuses:
        is_weekday = 0 <= weekday <= 4
        no_unloading = weekday in (SUNDAY, MONDAY)
        return Bonuses(
            unloading=Money.zero() if no_unloading else self.unloading_bonus,
            attendance=self.attendance_bonus if is_weekday else Money.zero(),
            early=self.early_bonus if is_weekday else Money.zero(),
        )

    def is_valid_for(self, when: Union[date, datetime]) -> bool:
        if not self.is_active:
            return False
        moment = _as_datetime(when)
        if moment < self.valid_from:
            return False
        if self.valid_until is not None and moment > self.valid_until:
            return False
        return True

    # -----------------------------
    # Lifecycle
    # -----------------------------
    def create_new_version(self, **updates: Any) -> "PaymentRules":
        unknown = set(updates) - set(_RATE_FIELDS)
        if unknown:
            raise RulesError(f"Unknown rule fields: {sorted(unknown)}")
        values = {name: updates.get(name, getattr(self, name)) for name in _RATE_FIELDS}
        return PaymentRules(
            user_id=self.user_id,
            version=self.version + 1,
            valid_from=_utcnow(),
            is_active=True,
            **values,
        )

    def deactivate(self, at: Optional[datetime] = None) -> "PaymentRules":
        return replace(self, is_active=False, valid_until=at or _utcnow())

    def supersede(self, **updates: Any) -> Tuple["PaymentRules", "PaymentRules"]:
        """(deactivated current version, new active version)."""
        new_rules = self.create_new_version(**updates)
        return self.deactivate(at=new_rules.valid_from), new_rules

    # -----------------------------
    # Serialization
    # -----------------------------
    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "user_id": self.user_id,
            "version": self.version,
            "valid_from": self.valid_from.isoformat(),
            "valid_until": self.valid_until.isoformat() if self.valid_until else None,
            "is_active": self.is_active,
        }
        for name in _RATE_FIELDS:
            out[name] = getattr(self, name).to_json()
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PaymentRules":
        kwargs: Dict[str, Any] = {name: Money.of(data[name]) for name in _RATE_FIELDS}
        if data.get("id"):
            kwargs["id"] = str(data["id"])
        valid_from = _parse_datetime(data.get("valid_from"))
        if valid_from is not None:
            kwargs["valid_from"] = valid_from
        return cls(
            user_id=str(data.get("user_id") or ""),
            version=int(data.get("version") or 1),
            valid_until=_parse_datetime(data.get("valid_until")),
            is_active=bool(data.get("is_active", True)),
            **kwargs,
        )


def default_rules(user_id: str = "") -> PaymentRules:
    return PaymentRules(
        user_id=user_id,
        weekday_rate=Money.of("2.00"),
        saturday_rate=Money.of("3.00"),
        unloading_bonus=Money.of("30.00"),
        attendance_bonus=Money.of("25.00"),
        early_bonus=Money.of("50.00"),
    )
