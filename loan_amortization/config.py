"""Centralized configuration for the amortization engine and its CLI.

Defaults mirror the options preselected by the loan form. Only the log level
can be overridden from the environment. Numeric conventions are fixed so that
a schedule computed today is identical to one computed later from the same
stored terms.
"""

import os

# =============================================================================
# NUMERIC CONVENTIONS
# =============================================================================

# Significant digits used for all intermediate Decimal arithmetic
DECIMAL_PRECISION = 28

# Smallest monetary unit (cents)
MONEY_QUANTUM = "0.01"

# =============================================================================
# LOAN TERM DEFAULTS
# =============================================================================

DEFAULT_ROUNDING_RULE = "ADJUST_LAST"
DEFAULT_DATE_RULE = "EXCLUDE_START"
DEFAULT_DAY_COUNT_BASIS = "ACT_360"
DEFAULT_FREQUENCY = "MONTHLY"

# Tolerance used when reconciling a bank-provided schedule
DEFAULT_RECONCILE_TOLERANCE = "0.01"

# =============================================================================
# DISPLAY
# =============================================================================

# Rows printed before the CLI truncates a schedule
MAX_PREVIEW_ROWS = 120

DATE_FORMAT_DISPLAY = "%Y-%m-%d"

# =============================================================================
# LOGGING
# =============================================================================

LOG_LEVEL = os.environ.get("LOAN_AMORTIZATION_LOG_LEVEL", "WARNING").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
