"""
Record and result types.

Report records form a two-variant union: ProductPerformanceRecord carries
the casino/sportsbook split, RiskTeamRecord carries balance, behaviour and
bonus figures. Both share the identity and core financial fields of
ReportRecord. Absent values are None; 0 is a real value.
"""

from dataclasses import dataclass, field, fields
from enum import Enum

import pandas as pd


class ReportType(str, Enum):
    """Report family, valued with the producer's wire labels."""

    PRODUCT_PERFORMANCE = "Performance de Produtos"
    RISK_TEAM = "Time de Risco"


class PeriodFilter(str, Enum):
    ALL = "all"
    TODAY = "today"
    LAST_20 = "last20"
    LAST_50 = "last50"


class TypeFilter(str, Enum):
    ALL = "all"
    PRODUCT_PERFORMANCE = "product_performance"
    RISK_TEAM = "risk_team"

    @property
    def report_type(self) -> ReportType | None:
        if self is TypeFilter.PRODUCT_PERFORMANCE:
            return ReportType.PRODUCT_PERFORMANCE
        if self is TypeFilter.RISK_TEAM:
            return ReportType.RISK_TEAM
        return None


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class ReportRecord:
    """One reporting period as aggregated by the producer.

    Base of the two report variants; only the subclasses are instantiated.
    """

    date: str
    time: str
    ggr: float | None = None
    ngr: float | None = None
    turnover_total: float | None = None
    deposits: float | None = None
    withdrawals: float | None = None
    net_flow: float | None = None
    unique_players: int | None = None
    bettors: int | None = None
    depositors: int | None = None
    count: int | None = None

    def __post_init__(self):
        if type(self) is ReportRecord:
            raise TypeError(
                "ReportRecord is a base class; build a ProductPerformanceRecord or RiskTeamRecord"
            )

    @property
    def report_type(self) -> ReportType:
        raise NotImplementedError

    def get(self, name: str):
        """Attribute lookup that yields None for fields outside this variant."""
        if name == "report_type":
            return self.report_type.value
        return getattr(self, name, None)

    def to_dict(self) -> dict:
        row = {f.name: getattr(self, f.name) for f in fields(self)}
        row["report_type"] = self.report_type.value
        return row


@dataclass(frozen=True)
class ProductPerformanceRecord(ReportRecord):
    casino_ggr: float | None = None
    casino_turnover: float | None = None
    sportsbook_ggr: float | None = None
    sportsbook_turnover: float | None = None

    @property
    def report_type(self) -> ReportType:
        return ReportType.PRODUCT_PERFORMANCE


@dataclass(frozen=True)
class RiskTeamRecord(ReportRecord):
    opening_balance: float | None = None
    closing_balance: float | None = None
    balance_delta: float | None = None
    avg_deposit: float | None = None
    avg_deposit_count: float | None = None
    avg_withdrawal: float | None = None
    avg_ticket: float | None = None
    avg_ggr_per_player: float | None = None
    bonus_granted: float | None = None
    bonus_converted: float | None = None
    bonus_conversion_rate: float | None = None
    bets_with_bonus: float | None = None
    bonus_cost: float | None = None

    @property
    def report_type(self) -> ReportType:
        return ReportType.RISK_TEAM


RECORD_CLASSES: dict[ReportType, type[ReportRecord]] = {
    ReportType.PRODUCT_PERFORMANCE: ProductPerformanceRecord,
    ReportType.RISK_TEAM: RiskTeamRecord,
}


# ---------------------------------------------------------------------------
# Feed payload
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class FeedStats:
    total_reports: int | None = None
    reports_today: int | None = None
    last_updated: str | None = None
    raw_record_count: int | None = None


@dataclass(frozen=True)
class FeedPayload:
    records: tuple[ReportRecord, ...]
    stats: FeedStats = field(default_factory=FeedStats)


# ---------------------------------------------------------------------------
# Derived results
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class MetricsSnapshot:
    """Scalar summary of the valid subset (records with both GGR and NGR).

    Figures that would be non-finite are None and named in ``anomalies``.
    """

    valid_count: int
    avg_ggr: float | None
    avg_ngr: float | None
    margin: float | None
    conversion: float
    volatility: float | None
    ggr_trend: float | None
    margin_trend: float | None
    anomalies: tuple[str, ...] = ()

    @property
    def margin_pct(self) -> float | None:
        return None if self.margin is None else self.margin * 100


@dataclass(frozen=True)
class ProductSplit:
    date: str
    time: str
    casino_ggr: float
    sportsbook_ggr: float
    casino_share: float | None
    sportsbook_share: float | None
    anomalies: tuple[str, ...] = ()


@dataclass(frozen=True)
class BonusGroup:
    granted: float | None = None
    converted: float | None = None
    conversion_rate: float | None = None
    bets_with_bonus: float | None = None
    cost: float | None = None
    roi: float | None = 0.0
    anomalies: tuple[str, ...] = ()


@dataclass(frozen=True)
class BalanceGroup:
    opening: float | None = None
    closing: float | None = None
    delta: float | None = None


@dataclass(frozen=True)
class BehaviorGroup:
    avg_deposit: float | None = None
    avg_deposit_count: float | None = None
    avg_withdrawal: float | None = None
    avg_ticket: float | None = None
    avg_ggr_per_player: float | None = None


@dataclass(frozen=True)
class BonusBehaviorSnapshot:
    date: str
    time: str
    has_data: bool
    bonus: BonusGroup
    balance: BalanceGroup
    behavior: BehaviorGroup


@dataclass(frozen=True)
class Anomaly:
    type: str
    severity: str
    message: str
    field: str
    value: float | None = None
    date: str | None = None
    time: str | None = None
    report_type: str | None = None


@dataclass(frozen=True)
class DataQualityReport:
    total_records: int
    records_with_anomalies: int
    anomaly_rate: float
    by_type: dict[str, dict]
    score: float
    grade: str


# ---------------------------------------------------------------------------
# Store / view
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class Snapshot:
    """One complete, atomically replaced copy of the record sequence."""

    records: tuple[ReportRecord, ...] = ()
    stats: FeedStats = field(default_factory=FeedStats)
    fetched_at: pd.Timestamp | None = None


@dataclass(frozen=True)
class DashboardView:
    period: PeriodFilter
    type_filter: TypeFilter
    records: tuple[ReportRecord, ...]
    metrics: MetricsSnapshot | None
    product_split: ProductSplit | None
    bonus_behavior: BonusBehaviorSnapshot | None
    anomalies: tuple[Anomaly, ...]
    fetched_at: pd.Timestamp | None = None

    @property
    def record_count(self) -> int:
        return len(self.records)
