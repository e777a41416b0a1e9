"""
Error taxonomy for the report pipeline.

Every error aborts the run; none of them is retried. They all derive from
ValueError so callers that only care about "bad data" can catch that.
"""

from __future__ import annotations


class CapmReportError(Exception):
    """Base class for all report pipeline errors."""


class InputFormatError(CapmReportError, ValueError):
    """Input file missing, wrong columns, or an unparseable date."""


class JoinMismatchError(CapmReportError, ValueError):
    """Returns and factors overlap on no (or suspiciously few) dates."""


class InvalidInputError(CapmReportError, ValueError):
    """Values that cannot be used: non-positive prices, duplicate dates, NaNs."""


class InsufficientHistoryError(InvalidInputError):
    """The return series does not cover the full evaluation window."""


class DegenerateInputError(CapmReportError, ValueError):
    """Regression design matrix is rank-deficient."""
