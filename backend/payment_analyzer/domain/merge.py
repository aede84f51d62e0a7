from __future__ import annotations

from enum import Enum
from typing import Iterable

from .values import Money


class MergeStrategy(str, Enum):
    """How incoming paid amounts combine with an amount already on record."""

    SMART = "smart"
    ADD = "add"
    REPLACE = "replace"
    MAX = "max"


def merge_paid_amount(
    strategy: MergeStrategy,
    existing: Money,
    incoming_amounts: Iterable[Money],
) -> Money:
    """
    replace -> sum(incoming)
    add     -> existing + sum(incoming)
    max     -> max(existing, sum(incoming))
    smart   -> replace for a single incoming amount, otherwise add
    """
    incoming = [Money.of(a) for a in incoming_amounts]
    incoming_sum = Money.sum(incoming)
    strategy = MergeStrategy(strategy)

    if strategy is MergeStrategy.SMART:
        strategy = MergeStrategy.REPLACE if len(incoming) == 1 else MergeStrategy.ADD

    if strategy is MergeStrategy.REPLACE:
        return incoming_sum
    if strategy is MergeStrategy.ADD:
        return existing + incoming_sum
    return max(existing, incoming_sum)
