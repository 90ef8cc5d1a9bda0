"""Result pattern for returning engine failures instead of raising them.

Simulations and committed-loan workflows both call the engine through
``try_compute_schedule`` so that they receive the same failure signal: a
``ScheduleResult`` whose ``error`` is the ``InvalidTermsError`` the engine
would have raised.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .data_models import Schedule, ScheduleSummary
from .errors import InvalidTermsError


@dataclass(frozen=True)
class ScheduleResult:
    """Outcome of a schedule computation.

    Attributes
    ----------
    schedule: Optional[Schedule]
        The computed schedule on success, ``None`` on failure.
    summary: Optional[ScheduleSummary]
        The computed summary on success, ``None`` on failure.
    error: Optional[InvalidTermsError]
        The rejected-terms error on failure, ``None`` on success.

    Examples
    --------
    >>> result = try_compute_schedule(terms)
    >>> if not result:
    ...     print(result.error.code)
    """

    schedule: Optional[Schedule] = None
    summary: Optional[ScheduleSummary] = None
    error: Optional[InvalidTermsError] = None

    @classmethod
    def ok(cls, schedule: Schedule, summary: ScheduleSummary) -> "ScheduleResult":
        return cls(schedule=schedule, summary=summary)

    @classmethod
    def fail(cls, error: InvalidTermsError) -> "ScheduleResult":
        return cls(error=error)

    @property
    def success(self) -> bool:
        return self.error is None

    def __bool__(self) -> bool:
        return self.success

    def unwrap(self) -> Tuple[Schedule, ScheduleSummary]:
        """Get the schedule and summary, re-raising the error on failure."""
        if self.error is not None:
            raise self.error
        return self.schedule, self.summary
