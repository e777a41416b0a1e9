"""
Load (and optionally download) daily adjusted-close prices for one stock.

Dependencies
-----------
- yfinance : used only by `download_prices` to fetch daily OHLC history.

Design choices
--------------
- The on-disk format is the Yahoo-style CSV (Date, Open, High, Low, Close,
  Adj Close, Volume). Only the adjusted close is used downstream.
- Dates are parsed with an explicit format. The factor file uses 8-digit
  YYYYMMDD while price files use ISO dates; both are normalised to midnight
  timestamps here so the join in `join.py` compares like with like.
"""

from __future__ import annotations

from pathlib import Path

import pandas as pd

from .errors import InputFormatError, InvalidInputError
from .records import ADJ_CLOSE, DATE, PriceRecord, validate_frame

PRICE_FILE_COLUMNS = ["Open", "High", "Low", "Close", ADJ_CLOSE, "Volume"]


def _stage(msg: str) -> None:
    print(f"[capm_report] {msg}", flush=True)


def load_prices_csv(
    path: str | Path,
    price_col: str = ADJ_CLOSE,
    date_format: str = "%Y-%m-%d",
) -> pd.DataFrame:
    """
    Load a daily price CSV and keep the adjusted close.

    Parameters
    ----------
    path : str or Path
        CSV with a `Date` column and at least `price_col` (or `Close`).
    price_col : str, default 'Adj Close'
        Column to use as the adjusted close. Falls back to 'Close' when the
        file has no such column (e.g. an already-adjusted download).
    date_format : str, default '%Y-%m-%d'
        strftime format of the Date column.

    Returns
    -------
    DataFrame
        Index: `Date` (ascending). Columns: ['Adj Close'].
    """
    path = Path(path)
    if not path.exists():
        raise InputFormatError(
            f"Price file not found: {path}. Have you run `python -m capm_report.setup_data`?"
        )

    df = pd.read_csv(path, dtype={DATE: str})
    df.columns = [str(c).strip() for c in df.columns]
    if DATE not in df.columns:
        raise InputFormatError(f"Price file {path.name} has no '{DATE}' column")
    if price_col not in df.columns:
        if "Close" not in df.columns:
            raise InputFormatError(
                f"Price file {path.name} has neither '{price_col}' nor 'Close'; "
                f"found {list(df.columns)}"
            )
        price_col = "Close"

    try:
        dates = pd.to_datetime(df[DATE].str.strip(), format=date_format)
    except ValueError as exc:
        raise InputFormatError(f"Unparseable price date in {path.name}: {exc}") from exc

    # Empty cells stay NaN and are rejected by `log_returns`; text is a format error.
    values = pd.to_numeric(df[price_col], errors="coerce")
    bad = values.isna() & df[price_col].notna()
    if bad.any():
        row = bad.idxmax()
        raise InputFormatError(
            f"Non-numeric price {df[price_col][row]!r} on {df[DATE][row].strip()} in {path.name}"
        )

    prices = pd.DataFrame(
        {ADJ_CLOSE: values.to_numpy(dtype=float)},
        index=pd.DatetimeIndex(dates, name=DATE).normalize(),
    )
    if prices.index.has_duplicates:
        dup = prices.index[prices.index.duplicated()][0]
        raise InvalidInputError(f"Duplicate price date {dup.date()} in {path.name}")

    prices = validate_frame(prices.sort_index(), PriceRecord, f"Price file {path.name}")
    _stage(
        f"Loaded {len(prices)} prices "
        f"({prices.index.min().date()} -> {prices.index.max().date()}) from {path.name}"
    )
    return prices


def download_prices(
    ticker: str,
    start: str,
    dest: Path,
    end: str | None = None,
    refresh: bool = False,
) -> Path:
    """
    Fetch daily OHLC history with yfinance and save it as a Yahoo-style CSV.

    Existing files are reused unless `refresh` is True.
    """
    import yfinance as yf

    dest.parent.mkdir(parents=True, exist_ok=True)
    if dest.exists() and not refresh:
        _stage(f"✓ {ticker} prices already downloaded at {dest}")
        return dest

    _stage(f"Downloading {ticker} daily prices from {start} ...")
    hist = yf.download(ticker, start=start, end=end, progress=False, auto_adjust=False)
    if hist.empty:
        raise RuntimeError(f"yfinance returned no data for {ticker}")

    # yfinance can return MultiIndex columns (field, ticker) for a single ticker
    if isinstance(hist.columns, pd.MultiIndex):
        hist = hist.xs(ticker, axis=1, level=-1)

    keep = [c for c in PRICE_FILE_COLUMNS if c in hist.columns]
    out = hist[keep].copy()
    out.index = pd.DatetimeIndex(out.index)
    if out.index.tz is not None:
        out.index = out.index.tz_localize(None)
    out.index = out.index.normalize()
    out.index.name = DATE
    out.to_csv(dest, date_format="%Y-%m-%d")
    _stage(f"✓ Saved {len(out)} rows for {ticker} to {dest}")
    return dest
