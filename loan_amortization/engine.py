"""Core calculation engine for loan amortization.

This module builds the payment schedule for amortizable loans (constant
payment or constant capital, with an optional interest-only grace period) and
for in-fine loans. The computation is a pure function of ``LoanTerms``: it
performs no I/O, keeps no state between calls and runs its Decimal arithmetic
in a local context, so it is safe to call from several threads at once and
always reproduces the same schedule for the same terms.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, timedelta
from decimal import Decimal, localcontext
from typing import List, Optional, Tuple

from . import config
from .data_models import (
    Amortizable,
    AmortizationMethod,
    DateRule,
    DayCountBasis,
    FeeKind,
    Frequency,
    InFine,
    Installment,
    LoanTerms,
    RoundingRule,
    Schedule,
    ScheduleSummary,
)
from .errors import InvalidTermsError, TermsErrorCode
from .result import ScheduleResult
from .rounding import policy_for
from .utils import add_months, ceil_div, round_money, to_decimal

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def _calculate_annuity_payment(principal: Decimal, rate_per_period: Decimal, periods: int) -> Decimal:
    """Return the level (annuity) payment for a loan.

    The formula is:

        payment = P * (i * (1 + i)^n) / ((1 + i)^n - 1)

    where ``P`` is the principal, ``i`` is the periodic interest rate and
    ``n`` is the number of amortizing periods. When the interest rate is
    zero, the payment simplifies to ``P / n``.
    """
    if periods <= 0:
        raise ValueError("Number of amortizing periods must be positive")
    if rate_per_period == 0:
        return principal / Decimal(periods)
    factor = (1 + rate_per_period) ** periods
    return principal * (rate_per_period * factor) / (factor - 1)


def _coerce(terms: LoanTerms) -> LoanTerms:
    """Return ``terms`` with Decimal amounts and enum-typed conventions."""
    try:
        fees = terms.initial_fees
        if fees is not None:
            fees = replace(fees, amount=to_decimal(fees.amount), kind=FeeKind(fees.kind))
        return replace(
            terms,
            principal=to_decimal(terms.principal),
            annual_rate_percent=to_decimal(terms.annual_rate_percent),
            frequency=Frequency(terms.frequency),
            day_count_basis=DayCountBasis(terms.day_count_basis),
            rounding_rule=RoundingRule(terms.rounding_rule),
            date_rule=DateRule(terms.date_rule),
            initial_fees=fees,
        )
    except ValueError as exc:
        raise InvalidTermsError(TermsErrorCode.INVALID_VALUE, str(exc)) from exc


def validate_terms(terms: LoanTerms) -> LoanTerms:
    """Check the preconditions of ``compute_schedule``.

    Returns the terms with monetary fields normalized to ``Decimal``.

    Raises
    ------
    InvalidTermsError
        On the first violated precondition.
    """
    terms = _coerce(terms)
    if terms.principal <= 0:
        raise InvalidTermsError(
            TermsErrorCode.PRINCIPAL_NOT_POSITIVE, "Principal must be positive", "principal"
        )
    if isinstance(terms.duration_months, bool) or not isinstance(terms.duration_months, int):
        raise InvalidTermsError(
            TermsErrorCode.INVALID_VALUE, "Duration must be a whole number of months", "duration_months"
        )
    if terms.duration_months <= 0:
        raise InvalidTermsError(
            TermsErrorCode.DURATION_NOT_POSITIVE, "Duration must be positive", "duration_months"
        )
    if terms.annual_rate_percent < 0:
        raise InvalidTermsError(
            TermsErrorCode.NEGATIVE_RATE, "Annual rate cannot be negative", "annual_rate_percent"
        )
    if terms.start_date is None:
        raise InvalidTermsError(
            TermsErrorCode.MISSING_START_DATE, "A start date is required", "start_date"
        )
    if isinstance(terms.repayment, Amortizable):
        if terms.repayment.method is None:
            raise InvalidTermsError(
                TermsErrorCode.MISSING_AMORTIZATION_METHOD,
                "An amortizable loan requires an amortization method",
                "amortization_method",
            )
    elif not isinstance(terms.repayment, InFine):
        raise InvalidTermsError(
            TermsErrorCode.INVALID_VALUE, f"Unknown repayment plan: {terms.repayment!r}", "repayment"
        )
    if isinstance(terms.grace_period_months, bool) or not isinstance(terms.grace_period_months, int):
        raise InvalidTermsError(
            TermsErrorCode.INVALID_VALUE, "Grace period must be a whole number of months", "grace_period_months"
        )
    if terms.grace_period_months < 0:
        raise InvalidTermsError(
            TermsErrorCode.NEGATIVE_GRACE_PERIOD, "Grace period cannot be negative", "grace_period_months"
        )
    months_per_period = terms.frequency.months_per_period
    total_periods = ceil_div(terms.duration_months, months_per_period)
    grace_periods = ceil_div(terms.grace_period_months, months_per_period)
    if terms.grace_period_months >= terms.duration_months or grace_periods >= total_periods:
        raise InvalidTermsError(
            TermsErrorCode.GRACE_EXCEEDS_DURATION,
            "Grace period must leave at least one amortizing period",
            "grace_period_months",
        )
    if terms.initial_fees is not None and terms.initial_fees.amount < 0:
        raise InvalidTermsError(
            TermsErrorCode.NEGATIVE_FEES, "Initial fees cannot be negative", "initial_fees"
        )
    return terms


def fee_amount(terms: LoanTerms) -> Decimal:
    """Return the initial fee in money, rounded to cents."""
    fees = terms.initial_fees
    if fees is None:
        return ZERO
    if fees.kind is FeeKind.PERCENTAGE_OF_PRINCIPAL:
        return round_money(terms.principal * fees.amount / HUNDRED)
    return round_money(fees.amount)


def _accrual_window(terms: LoanTerms, period: int, due_date: date, previous_due: date) -> Tuple[date, int]:
    """Return the first accrual day and day count of a period.

    Only the first period depends on the date rule: under ``INCLUDE_START``
    the start date itself is day one, under ``EXCLUDE_START`` accrual begins
    the following day.
    """
    days = (due_date - previous_due).days
    if period == 1 and terms.date_rule is DateRule.INCLUDE_START:
        return previous_due, days + 1
    return previous_due + timedelta(days=1), days


def compute_schedule(terms: LoanTerms) -> Tuple[Schedule, ScheduleSummary]:
    """Compute the amortization schedule and summary for a loan.

    Parameters
    ----------
    terms: LoanTerms
        The loan terms. Amounts may be given as ``Decimal``, ``int`` or
        numeric strings; they are normalized before use.

    Returns
    -------
    schedule: Schedule
        One installment per period. The final installment always closes the
        balance at exactly zero.
    summary: ScheduleSummary
        Aggregate totals: total interest, total to repay (including a fee
        that is not capitalised), effective principal and end date.

    Raises
    ------
    InvalidTermsError
        If the terms violate a precondition. No partial schedule is returned.
    """
    terms = validate_terms(terms)
    with localcontext() as ctx:
        ctx.prec = config.DECIMAL_PRECISION
        return _build_schedule(terms)


def try_compute_schedule(terms: LoanTerms) -> ScheduleResult:
    """Like ``compute_schedule`` but returns the failure instead of raising."""
    try:
        schedule, summary = compute_schedule(terms)
    except InvalidTermsError as exc:
        logger.info("Rejected loan terms: %s", exc)
        return ScheduleResult.fail(exc)
    return ScheduleResult.ok(schedule, summary)


def _build_schedule(terms: LoanTerms) -> Tuple[Schedule, ScheduleSummary]:
    frequency = terms.frequency
    months_per_period = frequency.months_per_period
    total_periods = ceil_div(terms.duration_months, months_per_period)
    periodic_rate = terms.annual_rate_percent / HUNDRED / Decimal(frequency.periods_per_year)

    in_fine = isinstance(terms.repayment, InFine)
    method = terms.repayment.method
    grace_periods = 0 if in_fine else ceil_div(terms.grace_period_months, months_per_period)
    amortizing_periods = total_periods - grace_periods

    fee = fee_amount(terms)
    capitalised = terms.initial_fees is not None and terms.initial_fees.add_to_capital
    effective_principal = terms.principal + fee if capitalised else terms.principal

    policy = policy_for(terms.rounding_rule)

    level_payment: Optional[Decimal] = None
    capital_share = ZERO
    if method is AmortizationMethod.CONSTANT_PAYMENT:
        level_payment = _calculate_annuity_payment(effective_principal, periodic_rate, amortizing_periods)
    elif method is AmortizationMethod.CONSTANT_CAPITAL:
        capital_share = effective_principal / Decimal(amortizing_periods)

    logger.debug(
        "Computing %s schedule: %d periods (%d grace), periodic rate %s, effective principal %s",
        terms.repayment_style.value,
        total_periods,
        grace_periods,
        periodic_rate,
        effective_principal,
    )

    installments: List[Installment] = []
    remaining = effective_principal
    previous_due = terms.start_date
    total_interest = ZERO

    for period in range(1, total_periods + 1):
        is_final = period == total_periods
        is_grace = period <= grace_periods
        interest = remaining * periodic_rate

        if in_fine:
            principal = remaining if is_final else ZERO
        elif is_grace:
            principal = ZERO
        elif method is AmortizationMethod.CONSTANT_CAPITAL:
            principal = capital_share
        elif is_final:
            principal = remaining
        else:
            principal = level_payment - interest

        principal, interest = policy.apply(principal, interest)
        # never amortize more than what is still owed
        principal = min(max(principal, ZERO), remaining)
        if is_final:
            principal = remaining

        remaining -= principal
        total_interest += interest

        due_date = add_months(terms.start_date, period * months_per_period)
        period_start, accrual_days = _accrual_window(terms, period, due_date, previous_due)
        installments.append(
            Installment(
                period_index=period,
                due_date=due_date,
                principal_portion=principal,
                interest_portion=interest,
                total_payment=principal + interest,
                remaining_balance=max(ZERO, remaining),
                period_start=period_start,
                accrual_days=accrual_days,
                is_grace=is_grace,
            )
        )
        previous_due = due_date

    schedule = Schedule(
        installments=tuple(installments),
        day_count_basis=terms.day_count_basis,
        date_rule=terms.date_rule,
        rounding_rule=terms.rounding_rule,
    )

    if level_payment is not None and policy.rounds_periods:
        level_payment = round_money(level_payment)
    total_to_repay = effective_principal + total_interest + (ZERO if capitalised else fee)
    summary = ScheduleSummary(
        total_interest=policy.finalize_total(total_interest),
        total_to_repay=policy.finalize_total(total_to_repay),
        effective_principal=effective_principal,
        initial_fees_amount=fee,
        end_date=installments[-1].due_date,
        net_disbursed=terms.principal if capitalised else terms.principal - fee,
        installment_count=total_periods,
        periodic_rate=periodic_rate,
        level_payment=level_payment,
    )
    return schedule, summary
