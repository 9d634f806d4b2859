"""
KPI computation functions — pure functions with no side effects.

Provides ratio/trend helpers that refuse to return non-finite numbers and
the metrics aggregation over the filtered view's valid subset.
"""

import logging
import math
from collections.abc import Sequence

import numpy as np
import pandas as pd

from .models import MetricsSnapshot, ReportRecord

logger = logging.getLogger(__name__)


def safe_ratio(numerator: float, denominator: float) -> float | None:
    """Return numerator / denominator, or None when that is not finite."""
    if denominator == 0:
        return None
    result = numerator / denominator
    return result if math.isfinite(result) else None


def calc_trend(current: float | None, previous: float | None) -> float | None:
    """Return period-over-period change in percent.

    None if either side is missing or previous == 0.
    """
    if current is None or previous is None:
        return None
    ratio = safe_ratio(current - previous, previous)
    return None if ratio is None else ratio * 100


def record_margin(record: ReportRecord) -> float | None:
    """Per-record NGR/GGR margin as a fraction."""
    if record.ggr is None or record.ngr is None:
        return None
    return safe_ratio(record.ngr, record.ggr)


def valid_subset(records: Sequence[ReportRecord]) -> list[ReportRecord]:
    """Records carrying both GGR and NGR, in their original order."""
    return [r for r in records if r.ggr is not None and r.ngr is not None]


def aggregate_metrics(records: Sequence[ReportRecord]) -> MetricsSnapshot | None:
    """Summarise the filtered view.

    Rules
    -----
    - Only records with both GGR and NGR count (the valid subset).
    - margin = mean(NGR) / mean(GGR).
    - conversion = mean(NGR) / turnover of the first valid record, 0 when
      that turnover is missing or zero.
    - volatility = population standard deviation of GGR.
    - ggr_trend / margin_trend compare the last two valid records by
      position; both are 0 when fewer than two valid records exist.

    A figure that cannot be computed or is not finite is None and listed in
    ``anomalies``; the remaining metrics are still reported.

    Returns
    -------
    MetricsSnapshot, or None when the valid subset is empty.
    """
    valid = valid_subset(records)
    if not valid:
        return None

    df = pd.DataFrame(
        {"ggr": [r.ggr for r in valid], "ngr": [r.ngr for r in valid]},
        dtype=float,
    )
    n = len(df)
    anomalies: list[str] = []

    # Sums of huge values can overflow to inf
    stats = {
        "avg_ggr": float(df["ggr"].mean()),
        "avg_ngr": float(df["ngr"].mean()),
        "volatility": float(df["ggr"].std(ddof=0)),
    }
    for name, value in stats.items():
        if not np.isfinite(value):
            stats[name] = None
            anomalies.append(name)
    avg_ggr, avg_ngr, volatility = stats["avg_ggr"], stats["avg_ngr"], stats["volatility"]

    margin = None
    if avg_ggr is not None and avg_ngr is not None:
        margin = safe_ratio(avg_ngr, avg_ggr)
    if margin is None:
        anomalies.append("margin")

    first_turnover = valid[0].turnover_total
    conversion = 0.0
    if first_turnover and avg_ngr is not None:
        conversion = safe_ratio(avg_ngr, first_turnover) or 0.0

    ggr_trend: float | None = 0.0
    margin_trend: float | None = 0.0
    if n >= 2:
        current, previous = valid[-1], valid[-2]
        ggr_trend = calc_trend(current.ggr, previous.ggr)
        if ggr_trend is None:
            anomalies.append("ggr_trend")
        margin_trend = calc_trend(record_margin(current), record_margin(previous))
        if margin_trend is None:
            anomalies.append("margin_trend")

    if anomalies:
        logger.warning(
            "Non-finite metrics over %d valid records: %s", n, ", ".join(anomalies)
        )

    return MetricsSnapshot(
        valid_count=n,
        avg_ggr=avg_ggr,
        avg_ngr=avg_ngr,
        margin=margin,
        conversion=conversion,
        volatility=volatility,
        ggr_trend=ggr_trend,
        margin_trend=margin_trend,
        anomalies=tuple(anomalies),
    )
