"""
Configuration for the CAPM / Fama–French regression report.

Centralises paths and the fixed run parameters so that all data for the
report lives under a single `capm_report_data/` directory at the project root.
"""

from pathlib import Path

# Project root = parent of this `capm_report` package
PROJECT_ROOT = Path(__file__).resolve().parents[1]

DATA_ROOT = PROJECT_ROOT / "capm_report_data"
RAW_DIR = DATA_ROOT / "raw"              # Downloaded ZIP / price CSV files
PROCESSED_DIR = DATA_ROOT / "processed"  # Extracted factor CSVs
FIGURES_DIR = DATA_ROOT / "figures"      # Saved report figures

# Security under study and its price history request.
TICKER = "AAPL"
PRICE_HISTORY_START = "2015-01-01"

FACTORS_FILENAME = "F-F_Research_Data_Factors_daily_CSV.zip"
PRICES_FILENAME = f"{TICKER}_daily.csv"

# Trailing evaluation window, in calendar years, ending at the last price date.
WINDOW_YEARS = 2

QUANTILES = (0.05, 0.25, 0.50, 0.75, 0.90)

# Join sanity limits: fewer overlapping rows than this (or less than this
# share of the windowed return dates) is treated as silent data loss.
JOIN_MIN_ROWS = 30
JOIN_MIN_COVERAGE = 0.8

# Directory creation is left to the entry scripts; importing this module has
# no side effects.
