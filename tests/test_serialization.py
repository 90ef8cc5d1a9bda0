"""Tests for the wire representation of terms and schedules."""

import json
from datetime import date
from decimal import Decimal

import pytest

from loan_amortization.data_models import (
    AmortizationMethod,
    FeeKind,
    Frequency,
    InFine,
    RepaymentStyle,
    RoundingRule,
)
from loan_amortization.engine import compute_schedule
from loan_amortization.errors import InvalidTermsError, TermsErrorCode
from loan_amortization.serialization import schedule_to_dict, terms_from_dict, terms_to_dict


def test_terms_from_wire_dict() -> None:
    terms = terms_from_dict(
        {
            "principal": "5,000,000",
            "annualRatePercent": 5.5,
            "durationMonths": "24",
            "frequency": "QUARTERLY",
            "repaymentStyle": "AMORTIZABLE",
            "amortizationMethod": "CONSTANT_CAPITAL",
            "roundingRule": "ROUND_EACH",
            "startDate": "2024-03-01",
            "initialFees": {"amount": "2", "kind": "PERCENTAGE_OF_PRINCIPAL", "addToCapital": True},
            "gracePeriodMonths": 3,
        }
    )
    assert terms.principal == Decimal("5000000")
    assert terms.annual_rate_percent == Decimal("5.5")
    assert terms.duration_months == 24
    assert terms.frequency is Frequency.QUARTERLY
    assert terms.amortization_method is AmortizationMethod.CONSTANT_CAPITAL
    assert terms.rounding_rule is RoundingRule.ROUND_EACH
    assert terms.start_date == date(2024, 3, 1)
    assert terms.initial_fees.kind is FeeKind.PERCENTAGE_OF_PRINCIPAL
    assert terms.initial_fees.add_to_capital is True
    assert terms.grace_period_months == 3


def test_terms_from_stored_loan_record() -> None:
    """Committed loan records use the loan API field names."""
    terms = terms_from_dict(
        {
            "amount": 5000000,
            "interestRate": 4,
            "durationMonths": 12,
            "repaymentFrequency": "MONTHLY",
            "repaymentType": "IN_FINE",
            "amortizationMethod": "CONSTANT_PAYMENT",
            "startDate": "2024-01-01",
            "initialBankFees": 2,
            "initialBankFeesType": "PERCENTAGE",
            "initialBankFeesAddedToCapital": True,
        }
    )
    assert terms.repayment == InFine()
    assert terms.repayment_style is RepaymentStyle.IN_FINE
    assert terms.initial_fees.kind is FeeKind.PERCENTAGE_OF_PRINCIPAL
    _, summary = compute_schedule(terms)
    assert summary.effective_principal == Decimal("5100000.00")


def test_missing_field_is_reported() -> None:
    with pytest.raises(InvalidTermsError) as excinfo:
        terms_from_dict({"annualRatePercent": 5, "durationMonths": 12, "startDate": "2024-01-01"})
    assert excinfo.value.code is TermsErrorCode.INVALID_VALUE
    assert excinfo.value.field == "principal"


@pytest.mark.parametrize(
    "patch",
    [
        {"frequency": "WEEKLY"},
        {"durationMonths": "twelve"},
        {"startDate": "2024-13-01"},
        {"principal": "lots"},
        {"roundingRule": "ROUND_DOWN"},
    ],
)
def test_malformed_values_are_rejected(patch) -> None:
    data = {
        "principal": "1000",
        "annualRatePercent": "5",
        "durationMonths": 12,
        "startDate": "2024-01-01",
        "amortizationMethod": "CONSTANT_PAYMENT",
    }
    data.update(patch)
    with pytest.raises(InvalidTermsError) as excinfo:
        terms_from_dict(data)
    assert excinfo.value.code is TermsErrorCode.INVALID_VALUE


def test_style_method_mismatch_keeps_its_code() -> None:
    with pytest.raises(InvalidTermsError) as excinfo:
        terms_from_dict(
            {
                "principal": "1000",
                "annualRatePercent": "5",
                "durationMonths": 12,
                "startDate": "2024-01-01",
                "repaymentStyle": "AMORTIZABLE",
            }
        )
    assert excinfo.value.code is TermsErrorCode.MISSING_AMORTIZATION_METHOD


def test_terms_survive_the_wire(terms_factory) -> None:
    terms = terms_factory(grace_period_months=2)
    assert terms_from_dict(json.loads(json.dumps(terms_to_dict(terms)))) == terms


def test_schedule_dict_is_json_safe(terms_factory) -> None:
    schedule, summary = compute_schedule(terms_factory())
    payload = json.loads(json.dumps(schedule_to_dict(schedule, summary)))
    assert len(payload["schedule"]) == 12
    assert payload["schedule"][0]["periodIndex"] == 1
    assert payload["schedule"][0]["dueDate"] == "2024-02-15"
    assert Decimal(payload["schedule"][-1]["remainingBalance"]) == 0
    assert payload["summary"]["effectivePrincipal"] == "10000000"
    assert payload["roundingRule"] == "ADJUST_LAST"
    assert Decimal(payload["summary"]["totalInterest"]) == summary.total_interest
