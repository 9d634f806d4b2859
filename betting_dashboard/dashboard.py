"""
Dashboard-ready output functions.

These are the primary entry points for the Streamlit front end. Every
derived figure on screen comes from one call to get_dashboard_view, which
reads a single Snapshot so cards, charts and the export never disagree.
"""

import logging

import pandas as pd

from .anomalies import scan_anomalies
from .export import export_filename, to_csv_bytes
from .kpis import aggregate_metrics
from .models import DashboardView, PeriodFilter, Snapshot, TypeFilter
from .segments import bonus_behavior, product_split
from .transforms import filter_records, records_to_frame

logger = logging.getLogger(__name__)


def get_dashboard_view(
    snapshot: Snapshot,
    period: PeriodFilter = PeriodFilter.ALL,
    type_filter: TypeFilter = TypeFilter.ALL,
    now: pd.Timestamp | None = None,
) -> DashboardView:
    """Filter the snapshot and derive every summary from the result.

    Parameters
    ----------
    snapshot : Store snapshot taken once by the caller.
    period : Window selector.
    type_filter : Report-type selector.
    now : Reference time for the TODAY window.

    Returns
    -------
    DashboardView with the filtered records, metrics (None when no record
    has both GGR and NGR), product split, bonus/behaviour card and the
    anomalies raised by the filtered records, each judged against the
    full snapshot history.
    """
    records = filter_records(snapshot.records, period, type_filter, now)

    view = DashboardView(
        period=period,
        type_filter=type_filter,
        records=records,
        metrics=aggregate_metrics(records),
        product_split=product_split(records),
        bonus_behavior=bonus_behavior(records),
        anomalies=tuple(scan_anomalies(snapshot.records, only=records)),
        fetched_at=snapshot.fetched_at,
    )

    if not records:
        logger.warning(
            "No records for period '%s' and type '%s'", period.value, type_filter.value
        )
    return view


def get_chart_frame(view: DashboardView) -> pd.DataFrame:
    """Numeric frame of the filtered records for trend charts.

    Adds a ``label`` column ("dd/mm HH:MM") for the x axis and a per-record
    ``margin_pct`` (NGR/GGR in percent, NaN where undefined).
    """
    df = records_to_frame(view.records)
    if df.empty:
        return df

    numeric = [c for c in df.columns if c not in ("date", "time", "report_type")]
    for col in numeric:
        df[col] = pd.to_numeric(df[col], errors="coerce")

    df.insert(0, "label", df["date"].astype(str) + " " + df["time"].astype(str))
    ggr = df["ggr"].where(df["ggr"] != 0)
    df["margin_pct"] = df["ngr"] / ggr * 100
    return df


def get_export(
    view: DashboardView,
    now: pd.Timestamp | None = None,
) -> tuple[str, bytes]:
    """Return (filename, CSV bytes) for the view's records."""
    return export_filename(now), to_csv_bytes(view.records)
