from __future__ import annotations


class DomainError(Exception):
    """Base error for payment domain invariants."""


class InvalidMoney(DomainError, ValueError):
    pass


class InvalidCount(DomainError, ValueError):
    pass


class RulesError(DomainError, ValueError):
    pass
