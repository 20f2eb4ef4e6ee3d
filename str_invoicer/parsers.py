import math
import numbers
import re
import warnings
from datetime import date, datetime
from typing import Any, Optional

import pandas as pd

# Spreadsheet serial for 1970-01-01 (serial 1 is 1900-01-01, with the 1900 leap-year bug)
EXCEL_EPOCH_OFFSET_DAYS = 25569
MS_PER_DAY = 86400 * 1000

# Tried in order on the date part of a string cell. Ambiguous slash dates resolve
# month-first; day-first slash dates only parse when the first part cannot be a month.
DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%d/%m/%Y",
    "%d.%m.%Y",
    "%d-%m-%Y",
)

_LEADING_NUMBER = re.compile(r"-?(?:\d+\.?\d*|\.\d+)")
_MONTH_NAME = re.compile(r"\b(?:jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)", re.IGNORECASE)


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def to_text(value: Any) -> str:
    """Cell value as text; blanks give "" and integral floats lose their ".0"."""
    if _is_blank(value) or isinstance(value, bool):
        return ""
    # ids read back from spreadsheets often come in as 12345.0
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _from_serial(value: float) -> Optional[str]:
    if not math.isfinite(value) or value == 0:
        return None
    ms = round((value - EXCEL_EPOCH_OFFSET_DAYS) * MS_PER_DAY)
    try:
        ts = pd.Timestamp(ms, unit="ms")
    except (OverflowError, ValueError):
        return None
    return ts.date().isoformat()


def _from_text(text: str) -> Optional[str]:
    head = re.split(r"[T ]", text, maxsplit=1)[0]
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(head, fmt).date().isoformat()
        except ValueError:
            continue

    # "Jan 15, 2024", "15 March 2024", ...
    if not (_MONTH_NAME.search(text) and re.search(r"\d", text)):
        return None
    with warnings.catch_warnings():
        warnings.filterwarnings("ignore", message="Could not infer format.*")
        try:
            parsed = pd.to_datetime(text, errors="coerce", dayfirst=False)
        except (OverflowError, ValueError):
            return None
    if pd.isna(parsed):
        return None
    return parsed.date().isoformat()


def parse_date(value: Any) -> Optional[str]:
    """
    Loose date parser for spreadsheet cells. Returns ``YYYY-MM-DD`` or None.

      - blank cells, NaN and 0 → None
      - datetime / date / Timestamp → calendar date
      - numbers → spreadsheet date serial (44927 → 2023-01-01)
      - strings → DATE_FORMATS in order, then month-name dates via pandas

    Never raises; anything unresolvable degrades to None.
    """
    if _is_blank(value) or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, numbers.Real):
        return _from_serial(float(value))
    return _from_text(str(value).strip())


def parse_number(value: Any) -> float:
    """
    Tolerant currency parser: "$1,234.56" → 1234.56, "(123.45)" → -123.45.
    Unparseable or blank values give 0.0, never NaN.
    """
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, numbers.Real):
        number = float(value)
        return number if math.isfinite(number) else 0.0
    if _is_blank(value):
        return 0.0

    text = str(value).strip()
    # accounting negatives
    is_negative = text.startswith("(") and text.endswith(")")
    text = re.sub(r"[^0-9.\-]", "", text)

    match = _LEADING_NUMBER.match(text)
    if not match:
        return 0.0
    number = float(match.group())
    return -abs(number) if is_negative else number
