"""
Shared utilities for feed decoding: numeric coercion, field lookup,
date label handling.
"""

import logging
import math
from typing import Any

import pandas as pd

from ..config import DATE_LABEL_FORMAT, REPORT_TIMEZONE, TIME_LABEL_FORMAT

logger = logging.getLogger(__name__)


def safe_float(val: Any) -> float | None:
    """Coerce a value to a finite float, returning None for anything else.

    Booleans, NaN and infinities are treated as missing. Zero is kept.
    """
    if val is None or isinstance(val, bool):
        return None
    if isinstance(val, str):
        val = val.strip()
        if not val:
            return None
        # Producer sometimes leaves a trailing percent sign on rates
        if val.endswith("%"):
            val = val[:-1].strip()
    try:
        result = float(val)
    except (ValueError, TypeError):
        return None
    if not math.isfinite(result):
        return None
    return result


def safe_int(val: Any) -> int | None:
    """Coerce a value to int via safe_float; fractional values are rounded."""
    result = safe_float(val)
    if result is None:
        return None
    return int(round(result))


def is_blank(val: Any) -> bool:
    return val is None or (isinstance(val, str) and not val.strip())


def lookup(raw: dict, *keys: str) -> Any:
    """Return the first non-None value among keys in raw."""
    for key in keys:
        if raw.get(key) is not None:
            return raw[key]
    return None


def today_label(now: pd.Timestamp | None = None) -> str:
    """Return today's date in the producer's "dd/mm" label format.

    Naive timestamps are taken to be in REPORT_TIMEZONE already.
    """
    if now is None:
        now = pd.Timestamp.now(tz=REPORT_TIMEZONE)
    elif now.tzinfo is not None:
        now = now.tz_convert(REPORT_TIMEZONE)
    return now.strftime(DATE_LABEL_FORMAT)


def parse_report_timestamp(
    date_label: str,
    time_label: str,
    year: int,
) -> pd.Timestamp | None:
    """Combine "dd/mm" and "HH:MM" labels into a timestamp for the given year."""
    try:
        return pd.to_datetime(
            f"{date_label}/{year} {time_label}",
            format=f"{DATE_LABEL_FORMAT}/%Y {TIME_LABEL_FORMAT}",
        )
    except (ValueError, TypeError):
        logger.debug("Unparseable report timestamp: %s %s", date_label, time_label)
        return None
