"""
Simulated report generator for the betting operations dashboard.

Produces a realistic hourly sequence of product-performance and risk-team
reports. All values are synthetic.
"""

import numpy as np
import pandas as pd

from .config import DATE_LABEL_FORMAT, REPORT_TIMEZONE, TIME_LABEL_FORMAT
from .models import ProductPerformanceRecord, ReportRecord, RiskTeamRecord

# ---------------------------------------------------------------------------
# Typical hourly figures (BRL)
# ---------------------------------------------------------------------------
_HOURLY_PARAMS = {
    "ggr": {"mean": 42_000, "std": 9_000},
    "turnover_total": {"mean": 610_000, "std": 85_000},
    "deposits": {"mean": 180_000, "std": 30_000},
    "withdrawals": {"mean": 140_000, "std": 28_000},
    "unique_players": {"mean": 5_200, "std": 600},
}

_CASINO_SHARE = (0.55, 0.08)      # mean, std of casino share of GGR
_NGR_RATIO = (0.82, 0.04)         # NGR as a fraction of GGR
_BONUS_RATE = (0.06, 0.015)       # bonus granted as a fraction of GGR


def _draw(rng: np.random.Generator, name: str, floor: float = 0.0) -> float:
    params = _HOURLY_PARAMS[name]
    return max(float(rng.normal(params["mean"], params["std"])), floor)


def generate_report_records(
    n_hours: int = 36,
    end: pd.Timestamp | None = None,
    seed: int = 42,
) -> list[ReportRecord]:
    """Generate simulated hourly reports ending at ``end``.

    Each hour yields one ProductPerformance record; every other hour also
    yields a RiskTeam record. Records come out in report order.
    """
    rng = np.random.default_rng(seed)
    if end is None:
        end = pd.Timestamp.now(tz=REPORT_TIMEZONE).floor("h")
    hours = pd.date_range(end=end, periods=n_hours, freq="h")

    records: list[ReportRecord] = []
    for i, hour in enumerate(hours):
        date = hour.strftime(DATE_LABEL_FORMAT)
        time = hour.strftime(TIME_LABEL_FORMAT)

        ggr = round(_draw(rng, "ggr", floor=1_000), 2)
        ngr = round(ggr * float(rng.normal(*_NGR_RATIO)), 2)
        turnover = round(_draw(rng, "turnover_total", floor=ggr), 2)
        casino_share = float(np.clip(rng.normal(*_CASINO_SHARE), 0.2, 0.9))

        records.append(ProductPerformanceRecord(
            date=date,
            time=time,
            ggr=ggr,
            ngr=ngr,
            turnover_total=turnover,
            casino_ggr=round(ggr * casino_share, 2),
            casino_turnover=round(turnover * casino_share, 2),
            sportsbook_ggr=round(ggr * (1 - casino_share), 2),
            sportsbook_turnover=round(turnover * (1 - casino_share), 2),
            count=int(rng.integers(1, 5)),
        ))

        if i % 2:
            continue

        deposits = round(_draw(rng, "deposits"), 2)
        withdrawals = round(_draw(rng, "withdrawals"), 2)
        players = int(_draw(rng, "unique_players", floor=100))
        bettors = int(players * rng.uniform(0.7, 0.9))
        depositors = int(players * rng.uniform(0.3, 0.5))
        opening = round(float(rng.normal(2_500_000, 150_000)), 2)
        closing = round(opening + deposits - withdrawals, 2)
        granted = round(ggr * float(rng.normal(*_BONUS_RATE)), 2)
        converted = round(granted * float(rng.uniform(0.2, 0.5)), 2)

        records.append(RiskTeamRecord(
            date=date,
            time=time,
            ggr=ggr,
            ngr=ngr,
            deposits=deposits,
            withdrawals=withdrawals,
            net_flow=round(deposits - withdrawals, 2),
            unique_players=players,
            bettors=bettors,
            depositors=depositors,
            opening_balance=opening,
            closing_balance=closing,
            balance_delta=round(closing - opening, 2),
            avg_deposit=round(deposits / max(depositors, 1), 2),
            avg_deposit_count=round(float(rng.uniform(1.2, 2.4)), 2),
            avg_withdrawal=round(withdrawals / max(int(depositors * 0.6), 1), 2),
            avg_ticket=round(turnover / max(bettors, 1), 2),
            avg_ggr_per_player=round(ggr / players, 2),
            bonus_granted=granted,
            bonus_converted=converted,
            bonus_conversion_rate=round(converted / granted * 100, 2) if granted else None,
            bets_with_bonus=float(rng.integers(200, 900)),
            bonus_cost=round(converted * 1.1, 2),
            count=int(rng.integers(1, 3)),
        ))

    return records
