from datetime import date
from decimal import Decimal

import pytest

from loan_amortization.data_models import (
    AmortizationMethod,
    Frequency,
    LoanTerms,
    RepaymentStyle,
    RoundingRule,
    make_repayment,
)


def make_terms(**overrides) -> LoanTerms:
    """Scenario A terms (10M at 5.5 % over 12 months), with overrides."""
    style = overrides.pop("style", RepaymentStyle.AMORTIZABLE)
    method = overrides.pop(
        "method", AmortizationMethod.CONSTANT_PAYMENT if style is RepaymentStyle.AMORTIZABLE else None
    )
    values = dict(
        principal=Decimal("10000000"),
        annual_rate_percent=Decimal("5.5"),
        duration_months=12,
        frequency=Frequency.MONTHLY,
        repayment=make_repayment(style, method),
        start_date=date(2024, 1, 15),
        rounding_rule=RoundingRule.ADJUST_LAST,
    )
    values.update(overrides)
    return LoanTerms(**values)


@pytest.fixture
def terms_factory():
    return make_terms
