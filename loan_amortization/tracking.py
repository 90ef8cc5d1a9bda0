"""Operations on the schedule of a committed loan.

Once a loan is committed its installments are recomputed from the stored
terms with ``compute_schedule``. The helpers here answer the questions the
loan screens ask of that schedule: which installments are overdue, how much
has been amortized so far, what an early repayment would cost, and whether a
schedule supplied by the bank agrees with the computed one.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Collection, Dict, Iterable, List, Mapping

from . import config
from .data_models import (
    AmortizationStats,
    Discrepancy,
    Installment,
    InstallmentStatus,
    PayoffQuote,
    ScenarioComparison,
    Schedule,
    ScheduleSummary,
)
from .utils import parse_date, round_money, to_decimal

ZERO = Decimal("0")

# Column names used by bank-provided schedules, mapped to installment fields
PROVIDED_AMOUNT_FIELDS = {
    "principalAmount": "principal_portion",
    "interestAmount": "interest_portion",
    "totalPayment": "total_payment",
    "remainingPrincipal": "remaining_balance",
}


def installment_status(
    installment: Installment, paid_periods: Collection[int], as_of: date
) -> InstallmentStatus:
    """Classify an installment as paid, overdue or pending on ``as_of``."""
    if installment.period_index in paid_periods:
        return InstallmentStatus.PAID
    if installment.due_date < as_of:
        return InstallmentStatus.OVERDUE
    return InstallmentStatus.PENDING


def amortization_stats(schedule: Schedule, paid_periods: Collection[int]) -> AmortizationStats:
    """Summarize the progress of a loan given the periods already paid.

    Periods in ``paid_periods`` that do not exist in the schedule are
    ignored.
    """
    effective_principal = sum((i.principal_portion for i in schedule), ZERO)
    paid = [i for i in schedule if i.period_index in paid_periods]
    amortized = sum((i.principal_portion for i in paid), ZERO)
    interest_paid = sum((i.interest_portion for i in paid), ZERO)
    return AmortizationStats(
        total_amortized=amortized,
        remaining_balance=effective_principal - amortized,
        total_interest_paid=interest_paid,
        total_paid=amortized + interest_paid,
        paid_count=len(paid),
    )


def payoff_quote(schedule: Schedule, paid_through: int, penalty_percent: Any = ZERO) -> PayoffQuote:
    """Quote an early repayment of the whole balance after ``paid_through``.

    The penalty is a percentage of the outstanding principal (``2`` means
    2 %), rounded to cents. ``interest_saved`` is the interest the remaining
    installments would have charged.

    Raises
    ------
    ValueError
        If ``paid_through`` is outside ``0..len(schedule)`` or the penalty is
        negative.
    """
    if paid_through < 0 or paid_through > len(schedule):
        raise ValueError(f"paid_through must be between 0 and {len(schedule)}")
    penalty_rate = to_decimal(penalty_percent)
    if penalty_rate < 0:
        raise ValueError("penalty_percent cannot be negative")

    if paid_through == 0:
        outstanding = sum((i.principal_portion for i in schedule), ZERO)
    else:
        outstanding = schedule[paid_through - 1].remaining_balance
    penalty = round_money(outstanding * penalty_rate / Decimal("100"))
    interest_saved = sum((i.interest_portion for i in schedule[paid_through:]), ZERO)
    return PayoffQuote(
        paid_through=paid_through,
        outstanding_principal=outstanding,
        penalty=penalty,
        total=outstanding + penalty,
        interest_saved=interest_saved,
    )


def _provided_by_period(provided: Iterable[Mapping[str, Any]]) -> Dict[int, Mapping[str, Any]]:
    rows: Dict[int, Mapping[str, Any]] = {}
    for position, row in enumerate(provided, start=1):
        number = row.get("installmentNumber") or position
        rows[int(number)] = row
    return rows


def reconcile(
    schedule: Schedule,
    provided: Iterable[Mapping[str, Any]],
    tolerance: Any = config.DEFAULT_RECONCILE_TOLERANCE,
) -> List[Discrepancy]:
    """Compare a bank-provided schedule against the computed one.

    ``provided`` rows use the column names of the bank import
    (``installmentNumber``, ``dueDate``, ``principalAmount``,
    ``interestAmount``, ``totalPayment``, ``remainingPrincipal``). Amount
    differences within ``tolerance`` are accepted. Returns an empty list when
    both schedules agree.
    """
    tolerance = to_decimal(tolerance)
    rows = _provided_by_period(provided)
    discrepancies: List[Discrepancy] = []

    for installment in schedule:
        row = rows.pop(installment.period_index, None)
        if row is None:
            discrepancies.append(Discrepancy(period_index=installment.period_index, field="missing"))
            continue
        due = row.get("dueDate")
        if due is not None:
            due_date = due if isinstance(due, date) else parse_date(str(due))
            if due_date != installment.due_date:
                discrepancies.append(
                    Discrepancy(
                        period_index=installment.period_index,
                        field="dueDate",
                        expected=installment.due_date,
                        actual=due_date,
                    )
                )
        for column, attribute in PROVIDED_AMOUNT_FIELDS.items():
            if row.get(column) is None:
                continue
            expected = getattr(installment, attribute)
            actual = to_decimal(row[column])
            if abs(actual - expected) > tolerance:
                discrepancies.append(
                    Discrepancy(
                        period_index=installment.period_index,
                        field=column,
                        expected=expected,
                        actual=actual,
                        difference=actual - expected,
                    )
                )

    for number in sorted(rows):
        discrepancies.append(Discrepancy(period_index=number, field="extra"))
    return discrepancies


def compare_summaries(base: ScheduleSummary, other: ScheduleSummary) -> ScenarioComparison:
    """Return ``other - base`` for the headline metrics of two scenarios.

    A negative difference means the second scenario is cheaper or shorter.
    """
    return ScenarioComparison(
        total_interest_diff=other.total_interest - base.total_interest,
        total_to_repay_diff=other.total_to_repay - base.total_to_repay,
        installment_count_diff=other.installment_count - base.installment_count,
        end_date_base=base.end_date,
        end_date_other=other.end_date,
    )
