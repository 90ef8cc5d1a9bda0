"""Data models for the amortization engine.

This module defines the enumerations and immutable dataclasses used by the
engine: the loan terms it consumes, and the installments, schedule and
summary it produces. All of them are frozen so a schedule handed to a caller
can never be altered behind the engine's back, and all of them are plain data
that can be serialized to any wire format.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Iterator, Optional, Tuple, Union

from . import config
from .errors import InvalidTermsError, TermsErrorCode
from .utils import round_money


class Frequency(str, Enum):
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"

    @property
    def periods_per_year(self) -> int:
        return 12 if self is Frequency.MONTHLY else 4

    @property
    def months_per_period(self) -> int:
        return 12 // self.periods_per_year


class RepaymentStyle(str, Enum):
    AMORTIZABLE = "AMORTIZABLE"
    IN_FINE = "IN_FINE"


class AmortizationMethod(str, Enum):
    CONSTANT_PAYMENT = "CONSTANT_PAYMENT"
    CONSTANT_CAPITAL = "CONSTANT_CAPITAL"


class DayCountBasis(str, Enum):
    ACT_360 = "ACT_360"
    ACT_365 = "ACT_365"

    @property
    def days_in_year(self) -> int:
        return 365 if self is DayCountBasis.ACT_365 else 360


class RoundingRule(str, Enum):
    ROUND_EACH = "ROUND_EACH"
    ROUND_END = "ROUND_END"
    ADJUST_LAST = "ADJUST_LAST"


class DateRule(str, Enum):
    EXCLUDE_START = "EXCLUDE_START"
    INCLUDE_START = "INCLUDE_START"


class FeeKind(str, Enum):
    FLAT = "FLAT"
    PERCENTAGE_OF_PRINCIPAL = "PERCENTAGE_OF_PRINCIPAL"


class InstallmentStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    OVERDUE = "OVERDUE"


@dataclass(frozen=True)
class InFine:
    """Interest-only loan whose whole principal is repaid on the last period."""

    style = RepaymentStyle.IN_FINE
    method = None


@dataclass(frozen=True)
class Amortizable:
    """Loan whose principal is repaid progressively using ``method``."""

    method: AmortizationMethod

    style = RepaymentStyle.AMORTIZABLE


RepaymentPlan = Union[InFine, Amortizable]


def make_repayment(style: RepaymentStyle, method: Optional[AmortizationMethod] = None) -> RepaymentPlan:
    """Build a repayment plan from the flat style/method pair used on the wire.

    Raises
    ------
    InvalidTermsError
        ``MISSING_AMORTIZATION_METHOD`` for an amortizable loan without a
        method, ``AMORTIZATION_METHOD_NOT_ALLOWED`` for an in-fine loan with
        one.
    """
    style = RepaymentStyle(style)
    if style is RepaymentStyle.IN_FINE:
        if method is not None:
            raise InvalidTermsError(
                TermsErrorCode.AMORTIZATION_METHOD_NOT_ALLOWED,
                "An in-fine loan does not take an amortization method",
                "amortization_method",
            )
        return InFine()
    if method is None:
        raise InvalidTermsError(
            TermsErrorCode.MISSING_AMORTIZATION_METHOD,
            "An amortizable loan requires an amortization method",
            "amortization_method",
        )
    return Amortizable(AmortizationMethod(method))


@dataclass(frozen=True)
class InitialFees:
    """Bank fees charged when the loan is set up.

    Attributes
    ----------
    amount: Decimal
        A literal amount for ``FLAT`` fees, or a whole percentage of the
        principal for ``PERCENTAGE_OF_PRINCIPAL`` (``Decimal("2")`` is 2 %).
    kind: FeeKind
        How ``amount`` is interpreted.
    add_to_capital: bool
        When True the fee is financed and amortized along with the principal.
        Otherwise it is deducted from the funds disbursed.
    """

    amount: Decimal
    kind: FeeKind = FeeKind.FLAT
    add_to_capital: bool = False


@dataclass(frozen=True)
class LoanTerms:
    """Everything the engine needs to build a schedule.

    The same terms are used for a simulation and for the committed loan, so
    re-running the engine on stored terms always reproduces the schedule the
    borrower was shown.
    """

    principal: Decimal
    annual_rate_percent: Decimal  # whole percent, 5.5 means 5.5 %
    duration_months: int
    frequency: Frequency
    repayment: RepaymentPlan
    start_date: date
    day_count_basis: DayCountBasis = DayCountBasis(config.DEFAULT_DAY_COUNT_BASIS)
    rounding_rule: RoundingRule = RoundingRule(config.DEFAULT_ROUNDING_RULE)
    date_rule: DateRule = DateRule(config.DEFAULT_DATE_RULE)
    initial_fees: Optional[InitialFees] = None
    grace_period_months: int = 0

    @property
    def repayment_style(self) -> RepaymentStyle:
        return self.repayment.style

    @property
    def amortization_method(self) -> Optional[AmortizationMethod]:
        return self.repayment.method


@dataclass(frozen=True)
class Installment:
    """One period of the schedule.

    ``period_start`` and ``accrual_days`` describe the accrual window under
    the terms' date rule. They are informational and never feed the amounts.
    """

    period_index: int
    due_date: date
    principal_portion: Decimal
    interest_portion: Decimal
    total_payment: Decimal
    remaining_balance: Decimal
    period_start: date
    accrual_days: int
    is_grace: bool = False

    def rounded(self) -> "Installment":
        return replace(
            self,
            principal_portion=round_money(self.principal_portion),
            interest_portion=round_money(self.interest_portion),
            total_payment=round_money(self.total_payment),
            remaining_balance=round_money(self.remaining_balance),
        )


@dataclass(frozen=True)
class Schedule:
    """Ordered, immutable sequence of installments plus convention metadata."""

    installments: Tuple[Installment, ...]
    day_count_basis: DayCountBasis
    date_rule: DateRule
    rounding_rule: RoundingRule

    def __iter__(self) -> Iterator[Installment]:
        return iter(self.installments)

    def __len__(self) -> int:
        return len(self.installments)

    def __getitem__(self, index):
        return self.installments[index]

    def rounded(self) -> "Schedule":
        """Return a copy with every amount rounded to cents for display.

        Schedules computed under ``ROUND_EACH`` or ``ADJUST_LAST`` are
        already in cents, so this only changes ``ROUND_END`` schedules.
        """
        return replace(self, installments=tuple(i.rounded() for i in self.installments))


@dataclass(frozen=True)
class ScheduleSummary:
    total_interest: Decimal
    total_to_repay: Decimal
    effective_principal: Decimal
    initial_fees_amount: Decimal
    end_date: date
    net_disbursed: Decimal
    installment_count: int
    periodic_rate: Decimal
    level_payment: Optional[Decimal] = None


@dataclass(frozen=True)
class AmortizationStats:
    """Progress of a committed loan given the installments already paid."""

    total_amortized: Decimal
    remaining_balance: Decimal
    total_interest_paid: Decimal
    total_paid: Decimal
    paid_count: int


@dataclass(frozen=True)
class PayoffQuote:
    """Amount needed to settle the loan early after ``paid_through``."""

    paid_through: int
    outstanding_principal: Decimal
    penalty: Decimal
    total: Decimal
    interest_saved: Decimal


@dataclass(frozen=True)
class Discrepancy:
    """A difference between a provided installment and the computed one.

    ``field`` is ``"missing"`` when the provided schedule lacks the period and
    ``"extra"`` when the computed schedule does.
    """

    period_index: int
    field: str
    expected: Optional[object] = None
    actual: Optional[object] = None
    difference: Optional[Decimal] = None


@dataclass(frozen=True)
class ScenarioComparison:
    """Difference ``other - base`` between two scenario summaries."""

    total_interest_diff: Decimal
    total_to_repay_diff: Decimal
    installment_count_diff: int
    end_date_base: date
    end_date_other: date
