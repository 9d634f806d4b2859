"""
CSV export of the filtered view.

Columns follow config.EXPORT_COLUMNS. Missing values are written as empty
fields. Fields containing the delimiter, quotes or line breaks are quoted
(RFC 4180), so a stray comma in a text field cannot shift the columns.
"""

import csv
import logging
from collections.abc import Sequence

import pandas as pd

from .config import (
    EXPORT_COLUMNS,
    EXPORT_ENCODING,
    EXPORT_FILENAME_TEMPLATE,
    REPORT_TIMEZONE,
)
from .models import ReportRecord
from .transforms import records_to_frame

logger = logging.getLogger(__name__)

DELIMITER = ","


def to_delimited_text(records: Sequence[ReportRecord]) -> str:
    """Render records as CSV text with a header row."""
    df = records_to_frame(records)
    df.columns = [header for header, _ in EXPORT_COLUMNS]
    text = df.to_csv(
        index=False,
        sep=DELIMITER,
        na_rep="",
        quoting=csv.QUOTE_MINIMAL,
        lineterminator="\n",
    )
    logger.info("Exported %d records (%d columns)", len(df), len(EXPORT_COLUMNS))
    return text


def to_csv_bytes(records: Sequence[ReportRecord]) -> bytes:
    """Encoded CSV, ready for a download response."""
    return to_delimited_text(records).encode(EXPORT_ENCODING)


def export_filename(now: pd.Timestamp | None = None) -> str:
    """Return ``dashboard-export-<YYYY-MM-DD>.csv`` for the export date."""
    if now is None:
        now = pd.Timestamp.now(tz=REPORT_TIMEZONE)
    return EXPORT_FILENAME_TEMPLATE.format(date=now.strftime("%Y-%m-%d"))
