"""
Power Market Service - Tabular Source Reader
============================================

Reads exported market data (Excel or CSV) into raw rows and normalizes them
into Observation records.

Source column names vary between exports (Chinese headers from the trading
platform, English headers from manual exports), so every semantic field is
resolved through an ordered list of candidate column names. The first
candidate holding a non-empty value wins.
"""

import logging
import math
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

import pandas as pd

from powermarket.data.models import Observation
from powermarket.exceptions import SourceUnreadable

logger = logging.getLogger(__name__)


FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "timestamp": ("时间", "timestamp", "Time"),
    "price": ("电价", "price", "Price"),
    "load": ("负荷", "load", "Load"),
    "demand": ("需求", "demand", "Demand"),
    "supply": ("供应", "supply", "Supply"),
}

EXCEL_SUFFIXES = (".xlsx",)
CSV_SUFFIXES = (".csv",)


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def resolve_field(row: Dict[str, Any], field_name: str) -> Any:
    """Return the first non-empty value among the aliases of ``field_name``."""
    for key in FIELD_ALIASES[field_name]:
        if key in row and not _is_blank(row[key]):
            return row[key]
    return None


def parse_float(value: Any) -> Optional[float]:
    if _is_blank(value) or isinstance(value, bool):
        return None
    try:
        number = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse a timestamp cell into a naive datetime (aware values are moved to UTC)."""
    if _is_blank(value):
        return None
    try:
        ts = pd.to_datetime(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if ts is pd.NaT or pd.isna(ts):
        return None
    if ts.tzinfo is not None:
        ts = ts.tz_convert("UTC").tz_localize(None)
    return ts.to_pydatetime()


def normalize_row(row: Dict[str, Any]) -> Optional[Observation]:
    """Convert one raw row into an Observation, or None if it is not usable.

    A row is kept only when both its timestamp and its price parse. The
    secondary series (load, demand, supply) default to 0.
    """
    timestamp = parse_timestamp(resolve_field(row, "timestamp"))
    if timestamp is None:
        return None
    price = parse_float(resolve_field(row, "price"))
    if price is None:
        return None

    return Observation(
        timestamp=timestamp,
        price=price,
        load=parse_float(resolve_field(row, "load")) or 0.0,
        demand=parse_float(resolve_field(row, "demand")) or 0.0,
        supply=parse_float(resolve_field(row, "supply")) or 0.0,
    )


def normalize_rows(rows: Iterable[Dict[str, Any]]) -> List[Observation]:
    observations = []
    for row in rows:
        obs = normalize_row(row)
        if obs is not None:
            observations.append(obs)
    return observations


def read_rows(path) -> List[Dict[str, Any]]:
    """Read the first sheet (or the CSV body) of ``path`` as a list of dict rows.

    Raises:
        FileNotFoundError: the path does not exist
        SourceUnreadable: the file exists but cannot be parsed
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(str(path))

    suffix = path.suffix.lower()
    try:
        if suffix in EXCEL_SUFFIXES:
            df = pd.read_excel(path, sheet_name=0)
        elif suffix in CSV_SUFFIXES:
            df = pd.read_csv(path)
        else:
            raise SourceUnreadable(path, f"unsupported format '{suffix}'")
    except SourceUnreadable:
        raise
    except Exception as e:
        raise SourceUnreadable(path, str(e)) from e

    return df.to_dict(orient="records")
