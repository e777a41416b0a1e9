"""
Price -> log-return transformation and the trailing evaluation window.

Log returns are in percent, `100 * ln(P_t / P_{t-1})`, to match the units
of the Fama–French factor file. The first price has no predecessor and is
dropped rather than set to zero.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np
import pandas as pd

from .config import WINDOW_YEARS
from .errors import InsufficientHistoryError, InvalidInputError
from .records import ADJ_CLOSE, DATE, LOG_RETURN


def log_returns(prices: pd.DataFrame, price_col: str = ADJ_CLOSE) -> pd.DataFrame:
    """
    Compute daily log returns (percent) from an ascending price table.

    Parameters
    ----------
    prices : DataFrame
        Date-indexed, strictly ascending, with column `price_col`.

    Returns
    -------
    DataFrame
        n-1 rows indexed by the later date of each pair, column 'log_return'.

    Raises
    ------
    InvalidInputError
        Fewer than two prices, unsorted/duplicate dates, or a missing,
        non-finite or non-positive price.
    """
    if price_col not in prices.columns:
        raise InvalidInputError(f"Price table has no '{price_col}' column")
    if len(prices) < 2:
        raise InvalidInputError("At least two prices are needed to compute a return")
    if not prices.index.is_monotonic_increasing or prices.index.has_duplicates:
        raise InvalidInputError("Price dates must be strictly ascending")

    p = prices[price_col].to_numpy(dtype=float)
    bad = ~np.isfinite(p) | (p <= 0)
    if bad.any():
        first = prices.index[np.argmax(bad)]
        raise InvalidInputError(
            f"Price on {pd.Timestamp(first).date()} is missing or non-positive ({p[np.argmax(bad)]})"
        )

    r = 100.0 * np.log(p[1:] / p[:-1])
    index = pd.DatetimeIndex(prices.index[1:], name=DATE)
    return pd.DataFrame({LOG_RETURN: r}, index=index)


def window_bounds(end: pd.Timestamp, years: int = WINDOW_YEARS) -> Tuple[pd.Timestamp, pd.Timestamp]:
    """
    Return the inclusive window [end - years, end].

    Calendar subtraction: 2024-02-29 minus 2 years is 2022-02-28.
    """
    end = pd.Timestamp(end)
    return end - pd.DateOffset(years=years), end


def select_window(
    returns: pd.DataFrame,
    years: int = WINDOW_YEARS,
    require_full_window: bool = True,
    history_start: pd.Timestamp | None = None,
) -> pd.DataFrame:
    """
    Keep the trailing `years` of returns ending at the latest return date.

    Parameters
    ----------
    returns : DataFrame
        Date-indexed return table.
    years : int
        Window length in calendar years.
    require_full_window : bool, default True
        If True, raise InsufficientHistoryError when the history does not
        reach back to the window start. If False, keep whatever history
        exists and print a warning.
    history_start : Timestamp, optional
        First price date. The window is covered when prices exist on or
        before its start. Without it, the first return must fall on or
        before the first business day of the window, so a window starting
        on a weekend is covered by a series starting the next Monday.
    """
    if returns.empty:
        raise InvalidInputError("Cannot select a window from an empty return series")
    if years <= 0:
        raise ValueError("years must be positive")

    start, end = window_bounds(returns.index.max(), years)
    if history_start is not None:
        first = pd.Timestamp(history_start)
        covered = first <= start
        source = "Price"
    else:
        first = returns.index.min()
        covered = first <= pd.offsets.BDay().rollforward(start)
        source = "Return"
    if not covered:
        msg = (
            f"{source} history starts {first.date()}, after the {years}-year window start "
            f"{start.date()} (window end {end.date()})"
        )
        if require_full_window:
            raise InsufficientHistoryError(msg)
        print(f"Warning: {msg}; using the shorter window.")

    mask = (returns.index >= start) & (returns.index <= end)
    return returns.loc[mask].copy()
