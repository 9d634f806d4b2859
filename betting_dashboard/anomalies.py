"""
Anomaly rules and data-quality scoring over report records.

detect_anomalies checks one record against the records that preceded it;
assess_data_quality summarises completeness and anomaly rate per report
type for a whole snapshot.
"""

import logging
from collections.abc import Sequence

import pandas as pd

from .config import ANOMALY_THRESHOLDS, QUALITY_FIELDS, QUALITY_GRADES
from .models import Anomaly, DataQualityReport, ReportRecord, ReportType, RiskTeamRecord
from .loaders.utils import parse_report_timestamp

logger = logging.getLogger(__name__)


def _anomaly(record: ReportRecord, **kwargs) -> Anomaly:
    return Anomaly(
        date=record.date,
        time=record.time,
        report_type=record.report_type.value,
        **kwargs,
    )


def detect_anomalies(
    record: ReportRecord,
    history: Sequence[ReportRecord] = (),
    thresholds: dict[str, float] | None = None,
) -> list[Anomaly]:
    """Return the anomalies raised by a single record.

    Rules
    -----
    - GGR below the negative floor                         -> CRITICAL
    - GGR above spike_multiplier x mean GGR of the last
      spike_window same-type records                       -> HIGH
    - deposits/withdrawals ratio above limit with large
      deposits                                             -> MEDIUM
    - net flow below the floor                             -> HIGH
    - bonus conversion rate above the ceiling              -> MEDIUM
    - NGR greater than GGR                                 -> CRITICAL
    """
    t = {**ANOMALY_THRESHOLDS, **(thresholds or {})}
    found: list[Anomaly] = []

    if record.ggr is not None and record.ggr < t["negative_ggr_floor"]:
        found.append(_anomaly(
            record,
            type="NEGATIVE_GGR_HIGH",
            severity="CRITICAL",
            message=f"Very negative GGR: {record.ggr:,.2f}",
            field="ggr",
            value=record.ggr,
        ))

    window = int(t["spike_window"])
    if record.ggr is not None and len(history) > window:
        same_type = [r for r in history if r.report_type is record.report_type]
        if len(same_type) >= window:
            # Missing GGR counts as zero towards the baseline
            baseline = sum(r.ggr or 0.0 for r in same_type[-window:]) / window
            if baseline > 0 and record.ggr > baseline * t["spike_multiplier"]:
                found.append(_anomaly(
                    record,
                    type="SPIKE_DETECTION",
                    severity="HIGH",
                    message=f"GGR spike: {(record.ggr / baseline - 1) * 100:.0f}% above recent mean",
                    field="ggr",
                    value=record.ggr,
                ))

    if record.deposits and record.withdrawals:
        ratio = record.deposits / record.withdrawals
        if ratio > t["deposit_withdrawal_ratio"] and record.deposits > t["deposit_imbalance_min"]:
            found.append(_anomaly(
                record,
                type="DEPOSIT_WITHDRAWAL_IMBALANCE",
                severity="MEDIUM",
                message=f"Deposits far exceed withdrawals: ratio {ratio:.1f}:1",
                field="deposits_withdrawals",
                value=ratio,
            ))

    if record.net_flow is not None and record.net_flow < t["net_flow_floor"]:
        found.append(_anomaly(
            record,
            type="HIGH_NEGATIVE_CASH_FLOW",
            severity="HIGH",
            message=f"Very negative net flow: {record.net_flow:,.2f}",
            field="net_flow",
            value=record.net_flow,
        ))

    if (
        isinstance(record, RiskTeamRecord)
        and record.bonus_conversion_rate is not None
        and record.bonus_conversion_rate > t["bonus_conversion_max_pct"]
    ):
        found.append(_anomaly(
            record,
            type="HIGH_BONUS_CONVERSION",
            severity="MEDIUM",
            message=f"Bonus conversion rate unusually high: {record.bonus_conversion_rate}%",
            field="bonus_conversion_rate",
            value=record.bonus_conversion_rate,
        ))

    if record.ggr is not None and record.ngr is not None and record.ngr > record.ggr:
        found.append(_anomaly(
            record,
            type="DATA_INCONSISTENCY",
            severity="CRITICAL",
            message=f"NGR greater than GGR: NGR={record.ngr}, GGR={record.ggr}",
            field="ngr_ggr",
            value=record.ngr,
        ))

    return found


def scan_anomalies(
    records: Sequence[ReportRecord],
    thresholds: dict[str, float] | None = None,
    only: Sequence[ReportRecord] | None = None,
) -> list[Anomaly]:
    """Apply detect_anomalies to each record using its predecessors as history.

    ``only`` restricts the output to those records (matched by identity)
    while the history still spans the whole of ``records``, so a record is
    flagged the same way whichever view it is shown in.
    """
    keep = None if only is None else {id(r) for r in only}
    found: list[Anomaly] = []
    for i, record in enumerate(records):
        if keep is not None and id(record) not in keep:
            continue
        found.extend(detect_anomalies(record, records[:i], thresholds))
    if found:
        logger.warning("Detected %d anomalies across %d records", len(found), len(records))
    return found


def _completeness(records: Sequence[ReportRecord], field_names: Sequence[str]) -> float:
    """Percentage of key fields filled across records (0 when empty)."""
    if not records:
        return 0.0
    total = len(records) * len(field_names)
    filled = sum(1 for r in records for name in field_names if r.get(name) is not None)
    return filled / total * 100


def _avg_interval_minutes(records: Sequence[ReportRecord], year: int) -> float | None:
    stamps = [parse_report_timestamp(r.date, r.time, year) for r in records]
    stamps = sorted(s for s in stamps if s is not None)
    if len(stamps) < 2:
        return None
    diffs = pd.Series(stamps).diff().dropna().dt.total_seconds() / 60
    return float(diffs.mean())


def grade_for(score: float) -> str:
    for floor, grade in QUALITY_GRADES:
        if score >= floor:
            return grade
    return "CRITICAL"


def assess_data_quality(
    records: Sequence[ReportRecord],
    year: int | None = None,
) -> DataQualityReport:
    """Score completeness and anomaly rate of a record sequence.

    Parameters
    ----------
    records : Snapshot records in producer order.
    year : Year used to turn "dd/mm" labels into timestamps for the
           interval estimate. Defaults to the current year.

    Returns
    -------
    DataQualityReport; score is mean completeness of the present report
    types minus up to 20 points for the share of records with anomalies.
    """
    if year is None:
        year = pd.Timestamp.now().year

    total = len(records)
    flagged = 0
    for i, record in enumerate(records):
        if detect_anomalies(record, records[:i]):
            flagged += 1
    anomaly_rate = (flagged / total * 100) if total else 0.0

    by_type: dict[str, dict] = {}
    completeness_values = []
    for report_type in ReportType:
        subset = [r for r in records if r.report_type is report_type]
        completeness = _completeness(subset, QUALITY_FIELDS[report_type.value])
        by_type[report_type.value] = {
            "count": len(subset),
            "avg_interval_minutes": _avg_interval_minutes(subset, year),
            "completeness_pct": completeness,
        }
        if subset:
            completeness_values.append(completeness)

    mean_completeness = (
        sum(completeness_values) / len(completeness_values) if completeness_values else 0.0
    )
    score = max(0.0, mean_completeness - anomaly_rate / 100 * 20)

    return DataQualityReport(
        total_records=total,
        records_with_anomalies=flagged,
        anomaly_rate=anomaly_rate,
        by_type=by_type,
        score=score,
        grade=grade_for(score),
    )
