"""Conversion between engine objects and plain JSON-compatible data.

Terms arrive from the surrounding application as dictionaries using the
camelCase keys of the loan API. The flat fee fields and the
``repaymentFrequency``/``repaymentType`` names stored on committed loans are
accepted too, so a stored loan record can be fed back to the engine as is.
Outputs use strings for decimals and ISO-8601 for dates so nothing is lost in
transit.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from . import config
from .data_models import (
    AmortizationMethod,
    AmortizationStats,
    DateRule,
    DayCountBasis,
    Discrepancy,
    FeeKind,
    Frequency,
    InitialFees,
    Installment,
    LoanTerms,
    PayoffQuote,
    RepaymentStyle,
    RoundingRule,
    Schedule,
    ScheduleSummary,
    make_repayment,
)
from .errors import InvalidTermsError, TermsErrorCode
from .utils import parse_date, to_decimal

# Fee types as stored on committed loan records
LEGACY_FEE_KINDS = {
    "AMOUNT": FeeKind.FLAT,
    "PERCENTAGE": FeeKind.PERCENTAGE_OF_PRINCIPAL,
}


def _require(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if data.get(key) not in (None, ""):
            return data[key]
    raise InvalidTermsError(TermsErrorCode.INVALID_VALUE, f"{keys[0]} is required", keys[0])


def _to_int(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"Invalid integer value: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    raise ValueError(f"Invalid integer value: {value!r}")


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "y")
    return bool(value)


def _fees_from_dict(data: Mapping[str, Any]) -> Optional[InitialFees]:
    fees = data.get("initialFees")
    if fees:
        return InitialFees(
            amount=to_decimal(_require(fees, "amount")),
            kind=FeeKind(fees.get("kind", FeeKind.FLAT.value)),
            add_to_capital=_to_bool(fees.get("addToCapital", False)),
        )
    if data.get("initialBankFees") not in (None, ""):
        kind = data.get("initialBankFeesType") or "AMOUNT"
        return InitialFees(
            amount=to_decimal(data["initialBankFees"]),
            kind=LEGACY_FEE_KINDS.get(kind) or FeeKind(kind),
            add_to_capital=_to_bool(data.get("initialBankFeesAddedToCapital", False)),
        )
    return None


def terms_from_dict(data: Mapping[str, Any]) -> LoanTerms:
    """Build ``LoanTerms`` from the wire representation.

    Raises
    ------
    InvalidTermsError
        ``INVALID_VALUE`` for missing or malformed fields, or the reason code
        of an invalid repayment style/method combination.
    """
    try:
        start = _require(data, "startDate")
        style = RepaymentStyle(data.get("repaymentStyle") or data.get("repaymentType") or "AMORTIZABLE")
        method = data.get("amortizationMethod") or None
        if style is RepaymentStyle.IN_FINE and "repaymentStyle" not in data:
            # committed loan records keep the form default method even for in-fine loans
            method = None
        return LoanTerms(
            principal=to_decimal(_require(data, "principal", "amount")),
            annual_rate_percent=to_decimal(_require(data, "annualRatePercent", "interestRate")),
            duration_months=_to_int(_require(data, "durationMonths")),
            frequency=Frequency(
                data.get("frequency") or data.get("repaymentFrequency") or config.DEFAULT_FREQUENCY
            ),
            repayment=make_repayment(style, AmortizationMethod(method) if method else None),
            start_date=start if isinstance(start, date) else parse_date(str(start)),
            day_count_basis=DayCountBasis(data.get("dayCountBasis") or config.DEFAULT_DAY_COUNT_BASIS),
            rounding_rule=RoundingRule(data.get("roundingRule") or config.DEFAULT_ROUNDING_RULE),
            date_rule=DateRule(data.get("dateRule") or config.DEFAULT_DATE_RULE),
            initial_fees=_fees_from_dict(data),
            grace_period_months=_to_int(data.get("gracePeriodMonths") or 0),
        )
    except InvalidTermsError:
        raise
    except (ValueError, TypeError, AttributeError) as exc:
        raise InvalidTermsError(TermsErrorCode.INVALID_VALUE, str(exc)) from exc


def _convert(value: Any) -> Any:
    if isinstance(value, Decimal):
        return format(value, "f")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


def terms_to_dict(terms: LoanTerms) -> Dict[str, Any]:
    fees = terms.initial_fees
    return {
        "principal": _convert(terms.principal),
        "annualRatePercent": _convert(terms.annual_rate_percent),
        "durationMonths": terms.duration_months,
        "frequency": _convert(terms.frequency),
        "repaymentStyle": _convert(terms.repayment_style),
        "amortizationMethod": _convert(terms.amortization_method),
        "dayCountBasis": _convert(terms.day_count_basis),
        "roundingRule": _convert(terms.rounding_rule),
        "dateRule": _convert(terms.date_rule),
        "startDate": _convert(terms.start_date),
        "initialFees": None
        if fees is None
        else {
            "amount": _convert(fees.amount),
            "kind": _convert(fees.kind),
            "addToCapital": fees.add_to_capital,
        },
        "gracePeriodMonths": terms.grace_period_months,
    }


def installment_to_dict(installment: Installment) -> Dict[str, Any]:
    return {
        "periodIndex": installment.period_index,
        "dueDate": _convert(installment.due_date),
        "principalPortion": _convert(installment.principal_portion),
        "interestPortion": _convert(installment.interest_portion),
        "totalPayment": _convert(installment.total_payment),
        "remainingBalance": _convert(installment.remaining_balance),
        "periodStart": _convert(installment.period_start),
        "accrualDays": installment.accrual_days,
        "isGrace": installment.is_grace,
    }


def summary_to_dict(summary: ScheduleSummary) -> Dict[str, Any]:
    return {
        "totalInterest": _convert(summary.total_interest),
        "totalToRepay": _convert(summary.total_to_repay),
        "effectivePrincipal": _convert(summary.effective_principal),
        "initialFeesAmount": _convert(summary.initial_fees_amount),
        "endDate": _convert(summary.end_date),
        "netDisbursed": _convert(summary.net_disbursed),
        "installmentCount": summary.installment_count,
        "periodicRate": _convert(summary.periodic_rate),
        "levelPayment": _convert(summary.level_payment),
    }


def schedule_to_dict(schedule: Schedule, summary: ScheduleSummary) -> Dict[str, Any]:
    """Serialize a schedule and its summary into a JSON-compatible dict."""
    return {
        "summary": summary_to_dict(summary),
        "dayCountBasis": _convert(schedule.day_count_basis),
        "dateRule": _convert(schedule.date_rule),
        "roundingRule": _convert(schedule.rounding_rule),
        "schedule": [installment_to_dict(i) for i in schedule],
    }


def stats_to_dict(stats: AmortizationStats) -> Dict[str, Any]:
    return {
        "totalAmortized": _convert(stats.total_amortized),
        "remainingBalance": _convert(stats.remaining_balance),
        "totalInterestPaid": _convert(stats.total_interest_paid),
        "totalPaid": _convert(stats.total_paid),
        "paidCount": stats.paid_count,
    }


def payoff_to_dict(quote: PayoffQuote) -> Dict[str, Any]:
    return {
        "paidThrough": quote.paid_through,
        "outstandingPrincipal": _convert(quote.outstanding_principal),
        "penalty": _convert(quote.penalty),
        "total": _convert(quote.total),
        "interestSaved": _convert(quote.interest_saved),
    }


def discrepancy_to_dict(discrepancy: Discrepancy) -> Dict[str, Any]:
    return {
        "periodIndex": discrepancy.period_index,
        "field": discrepancy.field,
        "expected": _convert(discrepancy.expected),
        "actual": _convert(discrepancy.actual),
        "difference": _convert(discrepancy.difference),
    }
