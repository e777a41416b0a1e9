"""
Align security returns with factor returns on date and compute excess returns.

The two sources come with different date spellings (YYYYMMDD in the factor
file, ISO strings in the price file). Both loaders normalise to midnight
timestamps; `validate_date_index` checks that here, so a mismatch fails
instead of silently emptying the inner join.
"""

from __future__ import annotations

import pandas as pd

from .config import JOIN_MIN_COVERAGE, JOIN_MIN_ROWS
from .errors import InputFormatError, InvalidInputError, JoinMismatchError
from .records import (
    DATE,
    EXCESS_RETURN,
    FACTOR_COLUMNS,
    LOG_RETURN,
    RF,
    CombinedRecord,
    require_columns,
    validate_frame,
)


def validate_date_index(frame: pd.DataFrame, name: str) -> None:
    """
    Check that `frame` is keyed by unique, tz-naive, midnight dates.

    Raises
    ------
    InputFormatError
        Index is not a DatetimeIndex, is tz-aware, or carries a time of day.
    InvalidInputError
        Duplicate dates.
    """
    idx = frame.index
    if not isinstance(idx, pd.DatetimeIndex):
        raise InputFormatError(f"{name} must be indexed by dates, got {type(idx).__name__}")
    if idx.tz is not None:
        raise InputFormatError(f"{name} dates are tz-aware ({idx.tz}); expected calendar dates")
    if len(idx) and not (idx == idx.normalize()).all():
        raise InputFormatError(f"{name} dates carry a time of day; expected calendar dates")
    if idx.has_duplicates:
        dup = idx[idx.duplicated()][0]
        raise InvalidInputError(f"{name} has duplicate date {dup.date()}")


def combine_returns_factors(
    returns: pd.DataFrame,
    factors: pd.DataFrame,
    min_rows: int = JOIN_MIN_ROWS,
    min_coverage: float = JOIN_MIN_COVERAGE,
) -> pd.DataFrame:
    """
    Inner-join returns and factors on date and add `excess_return`.

    The argument order does not matter: the table holding `log_return` is
    treated as the return side.

    Parameters
    ----------
    returns, factors : DataFrame
        Date-indexed tables with 'log_return' and ['Mkt-RF', 'SMB', 'HML', 'RF'].
    min_rows : int
        Fewest overlapping dates accepted.
    min_coverage : float
        Smallest accepted share of return dates that find a factor row.

    Returns
    -------
    DataFrame
        Columns ['log_return', 'Mkt-RF', 'SMB', 'HML', 'RF', 'excess_return'],
        one row per shared date, ascending.
    """
    if LOG_RETURN not in returns.columns and LOG_RETURN in factors.columns:
        returns, factors = factors, returns

    require_columns(returns, [LOG_RETURN], "Return table")
    require_columns(factors, FACTOR_COLUMNS, "Factor table")
    validate_date_index(returns, "Return table")
    validate_date_index(factors, "Factor table")

    combined = returns[[LOG_RETURN]].join(factors[list(FACTOR_COLUMNS)], how="inner")
    combined = combined.sort_index()
    combined[EXCESS_RETURN] = combined[LOG_RETURN] - combined[RF]
    combined.index.name = DATE

    n = len(combined)
    if n == 0:
        raise JoinMismatchError(
            "Returns and factors share no dates "
            f"(returns {_span(returns)}, factors {_span(factors)})"
        )
    if n < min_rows:
        raise JoinMismatchError(f"Only {n} overlapping dates; at least {min_rows} required")
    coverage = n / len(returns)
    if coverage < min_coverage:
        raise JoinMismatchError(
            f"Only {coverage:.0%} of return dates matched a factor date "
            f"(returns {_span(returns)}, factors {_span(factors)})"
        )
    return validate_frame(combined, CombinedRecord, "Combined table")


def _span(frame: pd.DataFrame) -> str:
    if frame.empty:
        return "empty"
    return f"{frame.index.min().date()} -> {frame.index.max().date()}"
