"""
Record types and column names shared by every pipeline stage.

Tables travel between stages as pandas DataFrames indexed by a `Date`
DatetimeIndex. The column names below are the only names the pipeline uses;
the factor columns keep the Ken French spelling so printed tables read the
same as the source file.

The frozen dataclasses are the schema of those tables: `validate_frame`
checks a loaded or joined table against its record type (columns, order,
numeric dtypes, date index), and `records_from_frame` gives the typed,
row-level view of the same rows.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Iterable, List, Tuple, Type, TypeVar

import pandas as pd

from .errors import InputFormatError

DATE = "Date"
ADJ_CLOSE = "Adj Close"
MKT_RF = "Mkt-RF"
SMB = "SMB"
HML = "HML"
RF = "RF"
LOG_RETURN = "log_return"
EXCESS_RETURN = "excess_return"

FACTOR_COLUMNS = (MKT_RF, SMB, HML, RF)
PRICE_COLUMNS = (ADJ_CLOSE,)
RETURN_COLUMNS = (LOG_RETURN,)
COMBINED_COLUMNS = (LOG_RETURN, MKT_RF, SMB, HML, RF, EXCESS_RETURN)


@dataclass(frozen=True)
class FactorRecord:
    """One trading day of Fama–French factor returns (percent)."""

    date: pd.Timestamp
    mkt_rf: float
    smb: float
    hml: float
    rf: float


@dataclass(frozen=True)
class PriceRecord:
    date: pd.Timestamp
    adj_close: float


@dataclass(frozen=True)
class ReturnRecord:
    date: pd.Timestamp
    log_return: float


@dataclass(frozen=True)
class CombinedRecord:
    """Joined row used by the estimators; excess_return = log_return - rf."""

    date: pd.Timestamp
    log_return: float
    mkt_rf: float
    smb: float
    hml: float
    rf: float
    excess_return: float


# Record field -> frame column. `date` always maps to the index.
_FIELD_TO_COLUMN = {
    "adj_close": ADJ_CLOSE,
    "mkt_rf": MKT_RF,
    "smb": SMB,
    "hml": HML,
    "rf": RF,
    "log_return": LOG_RETURN,
    "excess_return": EXCESS_RETURN,
}

R = TypeVar("R", FactorRecord, PriceRecord, ReturnRecord, CombinedRecord)


def require_columns(frame: pd.DataFrame, columns: Iterable[str], name: str) -> None:
    """Raise InputFormatError if any of `columns` is missing from `frame`."""
    missing = [c for c in columns if c not in frame.columns]
    if missing:
        raise InputFormatError(
            f"{name} is missing required columns {missing}; found {list(frame.columns)}"
        )


def record_columns(record_type: Type[R]) -> Tuple[str, ...]:
    """Frame columns of `record_type`, in field order (the date is the index)."""
    return tuple(_FIELD_TO_COLUMN[f.name] for f in fields(record_type) if f.name != "date")


def validate_frame(frame: pd.DataFrame, record_type: Type[R], name: str) -> pd.DataFrame:
    """
    Check `frame` against the schema of `record_type`.

    Returns the frame restricted to the record's columns, in field order.

    Raises
    ------
    InputFormatError
        Missing columns, a non-date index or a non-numeric value column.
    """
    columns = record_columns(record_type)
    require_columns(frame, columns, name)
    if not isinstance(frame.index, pd.DatetimeIndex):
        raise InputFormatError(
            f"{name} must be indexed by dates; got {type(frame.index).__name__}"
        )
    non_numeric = [c for c in columns if not pd.api.types.is_numeric_dtype(frame[c])]
    if non_numeric:
        raise InputFormatError(f"{name} has non-numeric columns {non_numeric}")
    return frame.loc[:, list(columns)]


def records_from_frame(frame: pd.DataFrame, record_type: Type[R]) -> List[R]:
    """
    Convert a Date-indexed table into a list of `record_type` instances.

    Columns not used by the record are ignored; missing ones raise
    InputFormatError.
    """
    value_fields = [f.name for f in fields(record_type) if f.name != "date"]
    columns = list(record_columns(record_type))
    require_columns(frame, columns, record_type.__name__)

    out: List[R] = []
    for date, row in zip(frame.index, frame[columns].itertuples(index=False, name=None)):
        values = {f: float(v) for f, v in zip(value_fields, row)}
        out.append(record_type(date=pd.Timestamp(date), **values))
    return out


def frame_from_records(records: Iterable[R]) -> pd.DataFrame:
    """Inverse of `records_from_frame`: build a Date-indexed table."""
    rows = [asdict(r) for r in records]
    if not rows:
        return pd.DataFrame(index=pd.DatetimeIndex([], name=DATE))
    df = pd.DataFrame(rows).rename(columns=_FIELD_TO_COLUMN)
    df = df.rename(columns={"date": DATE}).set_index(DATE)
    df.index = pd.DatetimeIndex(df.index, name=DATE)
    return df
