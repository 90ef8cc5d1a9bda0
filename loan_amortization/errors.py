"""Error types raised by the amortization engine.

Every failure the engine can produce is an ``InvalidTermsError`` carrying a
machine-readable ``TermsErrorCode``. Callers (a UI, a persistence layer or the
command-line interface) map the code to whatever message suits them; the
engine only attaches a short English description intended for developers.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class TermsErrorCode(str, Enum):
    PRINCIPAL_NOT_POSITIVE = "PRINCIPAL_NOT_POSITIVE"
    DURATION_NOT_POSITIVE = "DURATION_NOT_POSITIVE"
    NEGATIVE_RATE = "NEGATIVE_RATE"
    MISSING_AMORTIZATION_METHOD = "MISSING_AMORTIZATION_METHOD"
    AMORTIZATION_METHOD_NOT_ALLOWED = "AMORTIZATION_METHOD_NOT_ALLOWED"
    GRACE_EXCEEDS_DURATION = "GRACE_EXCEEDS_DURATION"
    NEGATIVE_GRACE_PERIOD = "NEGATIVE_GRACE_PERIOD"
    NEGATIVE_FEES = "NEGATIVE_FEES"
    MISSING_START_DATE = "MISSING_START_DATE"
    INVALID_VALUE = "INVALID_VALUE"


class InvalidTermsError(ValueError):
    """Raised when loan terms violate a precondition of the engine.

    Attributes
    ----------
    code: TermsErrorCode
        Reason code suitable for programmatic handling.
    field: str, optional
        Name of the offending ``LoanTerms`` field, when there is one.
    """

    def __init__(self, code: TermsErrorCode, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.code = code
        self.field = field
        self.message = message

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"

    def to_dict(self) -> dict:
        return {"code": self.code.value, "field": self.field, "message": self.message}
