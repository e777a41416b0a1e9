"""
One-shot setup script for the report's input data.

Usage (from the project root):

    python -m capm_report.setup_data

This will:
1. Discover and download the daily Fama–French 3-factor ZIP.
2. Download daily prices for `config.TICKER` with yfinance.
3. Load both files once and print their date ranges so you can check the
   overlap before running the report.
"""

from __future__ import annotations

from .config import DATA_ROOT, PRICE_HISTORY_START, PRICES_FILENAME, PROCESSED_DIR, RAW_DIR, TICKER
from .download_french import download_ff3_daily_zip
from .process_french import load_ff3_daily
from .stock_data import download_prices, load_prices_csv


def main() -> None:
    """Run the full data-setup pipeline."""
    print(f"capm_report data root: {DATA_ROOT}")
    RAW_DIR.mkdir(parents=True, exist_ok=True)
    PROCESSED_DIR.mkdir(parents=True, exist_ok=True)

    print("\nStep 1: Downloading Fama–French daily 3-factor ZIP ...")
    ff_zip = download_ff3_daily_zip()

    print(f"\nStep 2: Downloading {TICKER} daily prices ...")
    prices_csv = download_prices(TICKER, start=PRICE_HISTORY_START, dest=RAW_DIR / PRICES_FILENAME)

    print("\nStep 3: Quick sanity checks ...")
    factors = load_ff3_daily(ff_zip)
    prices = load_prices_csv(prices_csv)
    overlap = prices.index.intersection(factors.index)
    print(f"  Factors: {factors.shape}, {factors.index.min().date()} -> {factors.index.max().date()}")
    print(f"  Prices:  {prices.shape}, {prices.index.min().date()} -> {prices.index.max().date()}")
    print(f"  Overlapping dates: {len(overlap)}")

    print("\n✓ capm_report data setup complete.")


if __name__ == "__main__":
    main()
