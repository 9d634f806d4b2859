import pandas as pd
import pytest

from betting_dashboard.dashboard import get_chart_frame, get_dashboard_view, get_export
from betting_dashboard.models import PeriodFilter, ReportType, Snapshot, TypeFilter
from betting_dashboard.simulator import generate_report_records

from factories import product, risk


@pytest.fixture()
def snapshot(fixed_now) -> Snapshot:
    records = (
        product(date="18/10", time="22:00", ggr=100.0, ngr=50.0, casino_ggr=60.0, sportsbook_ggr=40.0),
        risk(date="19/10", time="09:00", ggr=500.0, ngr=400.0, bonus_granted=200.0),
        product(date="19/10", time="10:00", ggr=0.0, ngr=0.0),
    )
    return Snapshot(records=records, fetched_at=fixed_now)


def test_view_derives_everything_from_one_filtered_set(snapshot, fixed_now) -> None:
    view = get_dashboard_view(snapshot, PeriodFilter.TODAY, TypeFilter.ALL, fixed_now)

    assert view.record_count == 2
    assert view.metrics.valid_count == 2
    assert view.metrics.avg_ggr == pytest.approx(250.0)
    assert view.metrics.ggr_trend == pytest.approx(-100.0)
    assert view.metrics.margin_trend is None
    # 18/10 product record is outside today's window
    assert view.product_split is None
    assert view.bonus_behavior.bonus.roi == pytest.approx(250.0)
    assert view.fetched_at == fixed_now


def test_view_by_type(snapshot, fixed_now) -> None:
    view = get_dashboard_view(snapshot, PeriodFilter.ALL, TypeFilter.PRODUCT_PERFORMANCE, fixed_now)

    assert all(r.report_type is ReportType.PRODUCT_PERFORMANCE for r in view.records)
    assert view.bonus_behavior is None
    assert view.product_split.casino_share == pytest.approx(60.0)


def test_empty_snapshot_renders_placeholders() -> None:
    view = get_dashboard_view(Snapshot())

    assert view.records == ()
    assert view.metrics is None
    assert view.product_split is None
    assert view.bonus_behavior is None
    assert view.anomalies == ()


def test_chart_frame_is_numeric_with_margin(snapshot, fixed_now) -> None:
    view = get_dashboard_view(snapshot, PeriodFilter.ALL, TypeFilter.ALL, fixed_now)

    df = get_chart_frame(view)

    assert list(df["label"]) == ["18/10 22:00", "19/10 09:00", "19/10 10:00"]
    assert df["ggr"].dtype.kind == "f"
    assert df["margin_pct"].iloc[0] == pytest.approx(50.0)
    assert pd.isna(df["margin_pct"].iloc[2])


def test_export_for_view(snapshot, fixed_now) -> None:
    view = get_dashboard_view(snapshot, PeriodFilter.ALL, TypeFilter.RISK_TEAM, fixed_now)

    filename, payload = get_export(view, fixed_now)

    assert filename == "dashboard-export-2026-10-19.csv"
    lines = payload.decode("utf-8").splitlines()
    assert len(lines) == 2
    assert lines[1].startswith("19/10,09:00,Time de Risco,")


def test_simulated_records_feed_the_pipeline(fixed_now) -> None:
    records = generate_report_records(n_hours=30, end=fixed_now, seed=7)

    assert len(records) == 45
    assert records == generate_report_records(n_hours=30, end=fixed_now, seed=7)

    view = get_dashboard_view(Snapshot(records=tuple(records)), PeriodFilter.LAST_20, TypeFilter.ALL, fixed_now)

    assert view.record_count == 20
    assert view.metrics is not None
    assert view.product_split is not None
    assert view.bonus_behavior.has_data


def test_anomalies_do_not_depend_on_type_filter(fixed_now) -> None:
    records = tuple(
        [risk(date="19/10", time=f"0{h}:00", ggr=100.0) for h in range(6)]
        + [product(date="19/10", time=f"{h:02d}:00", ggr=100.0, ngr=50.0) for h in range(6, 16)]
        + [product(date="19/10", time="16:00", ggr=1000.0, ngr=500.0)]
    )
    snapshot = Snapshot(records=records, fetched_at=fixed_now)

    everything = get_dashboard_view(snapshot, PeriodFilter.ALL, TypeFilter.ALL, fixed_now)
    products = get_dashboard_view(snapshot, PeriodFilter.ALL, TypeFilter.PRODUCT_PERFORMANCE, fixed_now)

    assert [a.type for a in everything.anomalies] == ["SPIKE_DETECTION"]
    assert products.anomalies == everything.anomalies


def test_anomalies_limited_to_records_in_view(fixed_now) -> None:
    records = (
        risk(date="19/10", time="08:00", deposits=600_000.0, withdrawals=50_000.0),
        product(date="19/10", time="09:00", ggr=100.0, ngr=50.0),
    )
    snapshot = Snapshot(records=records, fetched_at=fixed_now)

    view = get_dashboard_view(snapshot, PeriodFilter.ALL, TypeFilter.PRODUCT_PERFORMANCE, fixed_now)

    assert view.anomalies == ()
