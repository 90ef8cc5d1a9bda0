"""Output helpers for the amortization CLI.

This module renders schedules, summaries and scenario comparisons as simple
tab-separated tables. It relies only on built-in printing and string
formatting; amounts are shown rounded to cents whatever the rounding rule of
the schedule.
"""

from __future__ import annotations

from typing import Iterable

from . import config
from .data_models import Installment, PayoffQuote, ScenarioComparison, ScheduleSummary


def _money(value) -> str:
    return f"{value:,.2f}"


def print_summary(summary: ScheduleSummary) -> None:
    """Print the summary of a schedule in a human-readable format."""
    print("Summary")
    print("-" * 72)
    print(f"Effective principal : {_money(summary.effective_principal)}")
    if summary.initial_fees_amount:
        print(f"Initial fees        : {_money(summary.initial_fees_amount)}")
        print(f"Net disbursed       : {_money(summary.net_disbursed)}")
    print(f"Total interest      : {_money(summary.total_interest)}")
    print(f"Total to repay      : {_money(summary.total_to_repay)}")
    # Only constant-payment loans have a level installment
    if summary.level_payment is not None:
        print(f"Level payment       : {_money(summary.level_payment)}")
    print(f"Installments        : {summary.installment_count}")
    print(f"End date            : {summary.end_date.strftime(config.DATE_FORMAT_DISPLAY)}")
    print("-" * 72)


def print_schedule(schedule: Iterable[Installment]) -> None:
    """Print the schedule as a simple table, one installment per row."""
    headers = ["Period", "DueDate", "Principal", "Interest", "Total", "Balance", "Grace"]
    print("\t".join(headers))
    for entry in schedule:
        row = [
            str(entry.period_index),
            entry.due_date.strftime(config.DATE_FORMAT_DISPLAY),
            _money(entry.principal_portion),
            _money(entry.interest_portion),
            _money(entry.total_payment),
            _money(entry.remaining_balance),
            "Yes" if entry.is_grace else "No",
        ]
        print("\t".join(row))


def print_comparison(s1: ScheduleSummary, s2: ScheduleSummary, comparison: ScenarioComparison) -> None:
    """Print two scenario summaries side by side.

    The difference column is scenario2 - scenario1: a negative value means the
    second scenario is cheaper or shorter.
    """
    print("Comparison")
    print("=" * 72)
    print(f"{'Metric':20s} {'Scenario1':>15s} {'Scenario2':>15s} {'Difference':>15s}")
    rows = [
        ("total_interest", s1.total_interest, s2.total_interest, comparison.total_interest_diff),
        ("total_to_repay", s1.total_to_repay, s2.total_to_repay, comparison.total_to_repay_diff),
    ]
    for key, v1, v2, diff in rows:
        print(f"{key:20s} {v1:15.2f} {v2:15.2f} {diff:15.2f}")
    print(
        f"{'installments':20s} {s1.installment_count:15d} {s2.installment_count:15d} "
        f"{comparison.installment_count_diff:15d}"
    )
    print(
        f"{'end_date':20s} {comparison.end_date_base.isoformat():>15s} "
        f"{comparison.end_date_other.isoformat():>15s}"
    )
    print("=" * 72)


def print_payoff(quote: PayoffQuote) -> None:
    print("Early repayment")
    print("-" * 72)
    print(f"After installment   : {quote.paid_through}")
    print(f"Outstanding         : {_money(quote.outstanding_principal)}")
    print(f"Penalty             : {_money(quote.penalty)}")
    print(f"Total to settle     : {_money(quote.total)}")
    print(f"Interest saved      : {_money(quote.interest_saved)}")
    print("-" * 72)
