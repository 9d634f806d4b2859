"""
Segment extractors: casino/sportsbook split and the bonus/behaviour card.

Both read the most recent qualifying record of the filtered view.
"""

import logging
from collections.abc import Sequence

from .kpis import safe_ratio
from .models import (
    BalanceGroup,
    BehaviorGroup,
    BonusBehaviorSnapshot,
    BonusGroup,
    ProductPerformanceRecord,
    ProductSplit,
    ReportRecord,
    RiskTeamRecord,
)

logger = logging.getLogger(__name__)


def product_split(records: Sequence[ReportRecord]) -> ProductSplit | None:
    """Casino vs sportsbook share of GGR on the latest product report.

    Only ProductPerformance records with both casino and sportsbook GGR
    qualify. Each share is its own division over the combined GGR, so the
    two may differ from summing to 100 by floating-point rounding.
    """
    candidates = [
        r for r in records
        if isinstance(r, ProductPerformanceRecord)
        and r.casino_ggr is not None
        and r.sportsbook_ggr is not None
    ]
    if not candidates:
        return None

    latest = candidates[-1]
    total = latest.casino_ggr + latest.sportsbook_ggr

    casino_share = safe_ratio(latest.casino_ggr, total)
    sportsbook_share = safe_ratio(latest.sportsbook_ggr, total)
    anomalies: tuple[str, ...] = ()
    if casino_share is None or sportsbook_share is None:
        anomalies = ("casino_share", "sportsbook_share")
        logger.warning(
            "Product split undefined for %s %s: combined GGR is zero",
            latest.date, latest.time,
        )

    return ProductSplit(
        date=latest.date,
        time=latest.time,
        casino_ggr=latest.casino_ggr,
        sportsbook_ggr=latest.sportsbook_ggr,
        casino_share=None if casino_share is None else casino_share * 100,
        sportsbook_share=None if sportsbook_share is None else sportsbook_share * 100,
        anomalies=anomalies,
    )


def bonus_roi(record: RiskTeamRecord) -> float | None:
    """GGR returned per unit of bonus granted, in percent.

    0 without a positive grant or without GGR; None when the ratio is not
    finite.
    """
    if record.bonus_granted is None or record.bonus_granted <= 0 or record.ggr is None:
        return 0.0
    return safe_ratio(record.ggr * 100, record.bonus_granted)


def bonus_behavior(records: Sequence[ReportRecord]) -> BonusBehaviorSnapshot | None:
    """Bonus, balance and player-behaviour figures from the latest risk report.

    Returns None only when the view holds no RiskTeam record. Each field is
    passed through independently; ``has_data`` tells whether any of the
    headline fields (bonus granted, opening balance, average deposit,
    average ticket) is present.
    """
    risk = [r for r in records if isinstance(r, RiskTeamRecord)]
    if not risk:
        return None

    latest = risk[-1]
    roi = bonus_roi(latest)
    if roi is None:
        logger.warning("Bonus ROI undefined for %s %s", latest.date, latest.time)
    has_data = any(
        value is not None
        for value in (
            latest.bonus_granted,
            latest.opening_balance,
            latest.avg_deposit,
            latest.avg_ticket,
        )
    )

    return BonusBehaviorSnapshot(
        date=latest.date,
        time=latest.time,
        has_data=has_data,
        bonus=BonusGroup(
            granted=latest.bonus_granted,
            converted=latest.bonus_converted,
            conversion_rate=latest.bonus_conversion_rate,
            bets_with_bonus=latest.bets_with_bonus,
            cost=latest.bonus_cost,
            roi=roi,
            anomalies=() if roi is not None else ("roi",),
        ),
        balance=BalanceGroup(
            opening=latest.opening_balance,
            closing=latest.closing_balance,
            delta=latest.balance_delta,
        ),
        behavior=BehaviorGroup(
            avg_deposit=latest.avg_deposit,
            avg_deposit_count=latest.avg_deposit_count,
            avg_withdrawal=latest.avg_withdrawal,
            avg_ticket=latest.avg_ticket,
            avg_ggr_per_player=latest.avg_ggr_per_player,
        ),
    )
