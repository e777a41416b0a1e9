"""
Parse the daily Fama–French 3-factor file into a clean factor table.

The Ken French CSV looks like:

    This file was created by CMPT_ME_BEME_RETS_DAILY using ...
    <blank>
    ,Mkt-RF,SMB,HML,RF
    19260701,    0.10,   -0.25,   -0.27,    0.01
    ...
    20240830,    0.57,   -0.13,    0.47,    0.02
    <blank>
    Copyright 2024 Kenneth R. French

Dates are 8-digit YYYYMMDD and values are in percent. We keep percent
(log returns are scaled by 100 as well) and parse the dates strictly, so a
malformed row fails loudly instead of being dropped from the join later.
"""

from __future__ import annotations

import re
import zipfile
from io import StringIO
from pathlib import Path
from typing import List

import pandas as pd

from .config import PROCESSED_DIR
from .errors import InputFormatError, InvalidInputError
from .records import DATE, FACTOR_COLUMNS, FactorRecord, require_columns, validate_frame

_DATE_ROW = re.compile(r"^\s*\d{8}\s*,")


def _stage(msg: str) -> None:
    print(f"[capm_report] {msg}", flush=True)


def extract_factor_csv(zip_path: Path, output_dir: Path = PROCESSED_DIR) -> Path:
    """
    Extract the single CSV inside a Ken French ZIP and return its path.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(zip_path, "r") as zf:
        members = [m for m in zf.namelist() if m.lower().endswith((".csv", ".txt"))]
        if not members:
            raise InputFormatError(f"No CSV or TXT file inside {zip_path}")
        zf.extract(members[0], output_dir)

    csv_path = output_dir / members[0]
    _stage(f"Extracted {zip_path.name} to {csv_path}")
    return csv_path


def _factor_section(lines: List[str]) -> str:
    """
    Return the header line plus every dated row after it.

    Blank lines are skipped. The copyright footer, an annual section or the
    end of the file ends the daily table; any other undated row is an error.
    """
    header_idx = None
    for i, line in enumerate(lines):
        stripped = line.strip().replace(" ", "")
        if stripped.startswith(",") and all(col in stripped for col in FACTOR_COLUMNS):
            header_idx = i
            break
        if stripped.upper().startswith("DATE,") and all(col in stripped for col in FACTOR_COLUMNS):
            header_idx = i
            break

    if header_idx is None:
        raise InputFormatError(
            f"Could not find a factor header row with columns {list(FACTOR_COLUMNS)}"
        )

    body = []
    for line in lines[header_idx + 1:]:
        stripped = line.strip()
        if _DATE_ROW.match(line):
            body.append(line)
            continue
        if not stripped:
            continue
        if stripped.lower().startswith(("copyright", "annual")):
            break
        raise InputFormatError(f"Unparseable date row in factor file: {stripped!r}")

    if not body:
        raise InputFormatError("Factor file has a header but no dated rows")
    return lines[header_idx] + "".join(body)


def parse_ff3_daily_text(text: str) -> pd.DataFrame:
    """
    Parse the text of a daily 3-factor CSV.

    Returns
    -------
    DataFrame
        Index: `Date` (DatetimeIndex, ascending).
        Columns: ['Mkt-RF', 'SMB', 'HML', 'RF'] in percent.
    """
    section = _factor_section(text.splitlines(keepends=True))
    df = pd.read_csv(StringIO(section), header=0, skipinitialspace=True, dtype=str)
    df.columns = [str(c).strip() for c in df.columns]
    df = df.rename(columns={df.columns[0]: DATE})
    require_columns(df, FACTOR_COLUMNS, "Factor file")

    raw_dates = df[DATE].str.strip()
    bad = raw_dates[~raw_dates.str.fullmatch(r"\d{8}")]
    if not bad.empty:
        raise InputFormatError(f"Factor dates must be 8-digit YYYYMMDD; got {bad.iloc[0]!r}")
    try:
        dates = pd.to_datetime(raw_dates, format="%Y%m%d")
    except ValueError as exc:
        raise InputFormatError(f"Unparseable factor date: {exc}") from exc

    values = df[list(FACTOR_COLUMNS)].apply(pd.to_numeric, errors="coerce")
    if values.isna().any().any():
        bad_row = values[values.isna().any(axis=1)].index[0]
        raise InputFormatError(f"Non-numeric factor value on {raw_dates.iloc[bad_row]}")

    values.index = pd.DatetimeIndex(dates, name=DATE)
    if values.index.has_duplicates:
        dup = values.index[values.index.duplicated()][0]
        raise InvalidInputError(f"Duplicate factor date {dup.date()}")
    return validate_frame(values.sort_index(), FactorRecord, "Factor file")


def load_ff3_daily(path: str | Path, extract_dir: Path = PROCESSED_DIR) -> pd.DataFrame:
    """
    Load the daily Fama–French 3-factor table from a ZIP or an extracted CSV.

    ZIPs are extracted into `extract_dir` first.

    Raises
    ------
    InputFormatError
        File missing, header not found, or an unparseable date/value.
    InvalidInputError
        Duplicate dates.
    """
    path = Path(path)
    if not path.exists():
        raise InputFormatError(
            f"Factor file not found: {path}. Have you run `python -m capm_report.setup_data`?"
        )
    if path.suffix.lower() == ".zip":
        path = extract_factor_csv(path, extract_dir)

    text = path.read_text(encoding="utf-8", errors="ignore")
    factors = parse_ff3_daily_text(text)
    _stage(
        f"Loaded {len(factors)} factor rows "
        f"({factors.index.min().date()} -> {factors.index.max().date()}) from {path.name}"
    )
    return factors
