"""Rounding policies applied after each period's amounts are computed.

The per-period formulas in the engine always work at full precision. A policy
then turns the raw ``(principal, interest)`` pair into the amounts that are
recorded, which keeps rounding out of the formulas themselves. Adding a rule
means adding a policy class and registering it in ``POLICIES``.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Dict, Tuple

from .data_models import RoundingRule
from .utils import round_money


class RoundingPolicy:
    """Base policy: keep full precision."""

    rounds_periods = False

    def apply(self, principal: Decimal, interest: Decimal) -> Tuple[Decimal, Decimal]:
        """Return the recorded ``(principal, interest)`` for one period."""
        return principal, interest

    def finalize_total(self, value: Decimal) -> Decimal:
        """Round an aggregate (total interest, total to repay)."""
        return value


class RoundEach(RoundingPolicy):
    """Round principal and interest to cents independently each period."""

    rounds_periods = True

    def apply(self, principal, interest):
        return round_money(principal), round_money(interest)


class AdjustLast(RoundEach):
    """Round to cents each period and let the last period absorb the drift.

    Principal is ``round(payment - interest)`` like ``ROUND_EACH``; the
    engine settles the outstanding balance on the final installment.
    """


class RoundEnd(RoundingPolicy):
    """Keep full precision per period and round only the aggregates."""

    def finalize_total(self, value):
        return round_money(value)


POLICIES: Dict[RoundingRule, RoundingPolicy] = {
    RoundingRule.ROUND_EACH: RoundEach(),
    RoundingRule.ADJUST_LAST: AdjustLast(),
    RoundingRule.ROUND_END: RoundEnd(),
}


def policy_for(rule: RoundingRule) -> RoundingPolicy:
    return POLICIES[RoundingRule(rule)]
