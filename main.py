"""
Betting Operations Dashboard — End-to-end analytics pipeline.

Loads a record snapshot (simulated by default, or the live producer feed
with --live), derives every dashboard view and prints smoke-test summaries.

Usage:
    python main.py
    python main.py --live [--api-url http://localhost:3001] [--reingest]
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

import pandas as pd

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent))

from betting_dashboard.anomalies import assess_data_quality
from betting_dashboard.config import API_URL, REPORT_TIMEZONE
from betting_dashboard.dashboard import get_dashboard_view, get_export
from betting_dashboard.loaders import FeedClient
from betting_dashboard.models import FeedPayload, PeriodFilter, TypeFilter
from betting_dashboard.scheduler import RefreshScheduler
from betting_dashboard.simulator import generate_report_records
from betting_dashboard.store import RecordStore

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


def _fmt(value, pattern: str = "{:,.2f}") -> str:
    return pattern.format(value) if value is not None else "--"


async def _load(store: RecordStore, live: bool, api_url: str, reingest: bool) -> bool:
    if live:
        client = FeedClient(api_url)
        fetch = client.fetch_dashboard_data
        trigger = client.trigger_ingestion
    else:
        records = generate_report_records()

        async def fetch() -> FeedPayload:
            return FeedPayload(records=tuple(records))

        trigger = None

    scheduler = RefreshScheduler(store, fetch, trigger)
    outcome = await scheduler.refresh(reingest=reingest)
    if not outcome.ok:
        print(f"\n  Refresh failed ({outcome.error_type}): {outcome.error}")
    return outcome.ok


def main(argv: list[str] | None = None) -> None:
    """Run the full analytics pipeline and print smoke-test outputs."""
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--live", action="store_true", help="read the producer feed")
    parser.add_argument("--api-url", default=API_URL)
    parser.add_argument("--reingest", action="store_true", help="trigger re-ingestion first")
    args = parser.parse_args(argv)

    print("=" * 70)
    print("  BETTING OPERATIONS DASHBOARD")
    print("  Analytics Pipeline Smoke Test")
    print("=" * 70)
    print()

    # ------------------------------------------------------------------
    # 1. Load records
    # ------------------------------------------------------------------
    print("[ 1 ] LOADING RECORDS")
    print("-" * 40)

    store = RecordStore()
    ok = asyncio.run(_load(store, args.live, args.api_url, args.reingest))
    if not ok:
        sys.exit(1)

    snapshot = store.snapshot
    print(f"\nSnapshot: {len(snapshot.records)} records, fetched {snapshot.fetched_at}")

    # ------------------------------------------------------------------
    # 2. Views per filter
    # ------------------------------------------------------------------
    print("\n")
    print("[ 2 ] DASHBOARD VIEWS")
    print("-" * 40)

    now = pd.Timestamp.now(tz=REPORT_TIMEZONE)
    for period in PeriodFilter:
        for type_filter in TypeFilter:
            view = get_dashboard_view(snapshot, period, type_filter, now)
            m = view.metrics
            if m is None:
                summary = "no GGR/NGR data"
            else:
                summary = (
                    f"avgGGR={_fmt(m.avg_ggr)} margin={_fmt(m.margin_pct, '{:.2f}%')} "
                    f"vol={_fmt(m.volatility)} trend={_fmt(m.ggr_trend, '{:+.2f}%')}"
                )
            print(f"  {period.value:7s} | {type_filter.value:19s} | {view.record_count:3d} | {summary}")

    # ------------------------------------------------------------------
    # 3. Segment cards (all records)
    # ------------------------------------------------------------------
    print("\n")
    print("[ 3 ] SEGMENTS")
    print("-" * 40)

    view = get_dashboard_view(snapshot, PeriodFilter.ALL, TypeFilter.ALL, now)
    split = view.product_split
    if split is not None:
        print(
            f"\n  Product split @ {split.date} {split.time}: "
            f"casino {_fmt(split.casino_share, '{:.1f}%')} / "
            f"sportsbook {_fmt(split.sportsbook_share, '{:.1f}%')}"
        )
    card = view.bonus_behavior
    if card is not None:
        print(f"  Bonus @ {card.date} {card.time}: has_data={card.has_data}")
        print(f"    bonus    | {card.bonus}")
        print(f"    balance  | {card.balance}")
        print(f"    behavior | {card.behavior}")

    # ------------------------------------------------------------------
    # 4. Export & quality
    # ------------------------------------------------------------------
    print("\n")
    print("[ 4 ] EXPORT & DATA QUALITY")
    print("-" * 40)

    filename, payload = get_export(view, now)
    header = payload.decode("utf-8").splitlines()[0]
    print(f"\n  {filename}: {len(payload):,} bytes, {len(header.split(','))} columns")

    quality = assess_data_quality(snapshot.records, year=now.year)
    print(f"  Quality score {quality.score:.0f} ({quality.grade}), "
          f"{quality.records_with_anomalies} records with anomalies")
    for anomaly in view.anomalies[:5]:
        print(f"    [{anomaly.severity}] {anomaly.date} {anomaly.time} {anomaly.message}")

    print("\n" + "=" * 70)
    print("  Pipeline complete.")
    print("=" * 70)


if __name__ == "__main__":
    main()
