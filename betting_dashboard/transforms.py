"""
Record filtering and tabular conversion.

All functions here are pure: they take an ordered record sequence and
return a new sequence (or DataFrame) without touching the input.
"""

import logging
from collections.abc import Sequence

import pandas as pd

from .config import EXPORT_COLUMNS, LAST_N_WINDOWS
from .loaders.utils import today_label
from .models import PeriodFilter, ReportRecord, TypeFilter

logger = logging.getLogger(__name__)


def apply_type_filter(
    records: Sequence[ReportRecord],
    type_filter: TypeFilter,
) -> tuple[ReportRecord, ...]:
    """Keep records whose report type matches exactly; ALL is identity."""
    wanted = type_filter.report_type
    if wanted is None:
        return tuple(records)
    return tuple(r for r in records if r.report_type is wanted)


def apply_period_filter(
    records: Sequence[ReportRecord],
    period: PeriodFilter,
    now: pd.Timestamp | None = None,
) -> tuple[ReportRecord, ...]:
    """Select a window of records.

    TODAY compares each record's "dd/mm" label with today's label in the
    producer's timezone. LAST_N keeps the trailing N records; shorter
    sequences are returned whole.
    """
    if period is PeriodFilter.ALL:
        return tuple(records)

    if period is PeriodFilter.TODAY:
        label = today_label(now)
        return tuple(r for r in records if r.date == label)

    n = LAST_N_WINDOWS[period.value]
    return tuple(records[-n:]) if len(records) > n else tuple(records)


def filter_records(
    records: Sequence[ReportRecord],
    period: PeriodFilter = PeriodFilter.ALL,
    type_filter: TypeFilter = TypeFilter.ALL,
    now: pd.Timestamp | None = None,
) -> tuple[ReportRecord, ...]:
    """Derive the filtered view: type filter first, then the period window.

    Parameters
    ----------
    records : Snapshot records in producer order.
    period : Window selector.
    type_filter : Report-type selector.
    now : Reference time for TODAY (defaults to the current time).

    Returns
    -------
    Subsequence of records with their original relative order.
    """
    typed = apply_type_filter(records, type_filter)
    result = apply_period_filter(typed, period, now)
    logger.debug(
        "Filtered %d -> %d records (period=%s, type=%s)",
        len(records), len(result), period.value, type_filter.value,
    )
    return result


def records_to_frame(records: Sequence[ReportRecord]) -> pd.DataFrame:
    """Convert records to a DataFrame with one column per export field.

    Columns keep Python objects so absent values stay None and integer
    fields are not widened to float.
    """
    attrs = [attr for _, attr in EXPORT_COLUMNS]
    if not records:
        return pd.DataFrame(columns=attrs, dtype=object)

    rows = [{attr: r.get(attr) for attr in attrs} for r in records]
    return pd.DataFrame(rows, columns=attrs, dtype=object)
