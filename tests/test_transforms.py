import pandas as pd
import pytest

from betting_dashboard.config import EXPORT_COLUMNS
from betting_dashboard.loaders.utils import today_label
from betting_dashboard.models import PeriodFilter, ReportType, TypeFilter
from betting_dashboard.transforms import (
    apply_period_filter,
    apply_type_filter,
    filter_records,
    records_to_frame,
)

from factories import product, risk


def test_type_filter_runs_before_period_window(mixed_records) -> None:
    result = filter_records(mixed_records, PeriodFilter.LAST_20, TypeFilter.RISK_TEAM)

    expected = [r for r in mixed_records if r.report_type is ReportType.RISK_TEAM][-20:]
    slice_first = [
        r for r in mixed_records[-20:] if r.report_type is ReportType.RISK_TEAM
    ]

    assert list(result) == expected
    assert len(result) == 10
    assert len(slice_first) == 7
    assert list(result) != slice_first


def test_last_n_keeps_trailing_records_in_order(mixed_records) -> None:
    result = filter_records(mixed_records, PeriodFilter.LAST_20, TypeFilter.ALL)

    assert list(result) == mixed_records[-20:]


def test_last_n_on_short_sequence_returns_everything() -> None:
    records = [product(time="10:00"), risk(time="11:00")]

    assert list(apply_period_filter(records, PeriodFilter.LAST_50)) == records


def test_filtering_empty_sequence_yields_empty() -> None:
    for period in PeriodFilter:
        for type_filter in TypeFilter:
            assert filter_records([], period, type_filter) == ()


@pytest.mark.parametrize("period", list(PeriodFilter))
@pytest.mark.parametrize("type_filter", list(TypeFilter))
def test_filter_is_idempotent(mixed_records, fixed_now, period, type_filter) -> None:
    once = filter_records(mixed_records, period, type_filter, fixed_now)
    twice = filter_records(once, period, type_filter, fixed_now)

    assert twice == once


def test_type_filter_all_is_identity(mixed_records) -> None:
    assert list(apply_type_filter(mixed_records, TypeFilter.ALL)) == mixed_records


def test_type_filter_exact_match(mixed_records) -> None:
    result = apply_type_filter(mixed_records, TypeFilter.PRODUCT_PERFORMANCE)

    assert len(result) == 20
    assert all(r.report_type is ReportType.PRODUCT_PERFORMANCE for r in result)


def test_today_filter_matches_producer_date_label(fixed_now) -> None:
    records = [
        product(date="18/10", time="23:00"),
        product(date="19/10", time="00:00"),
        risk(date="19/10", time="01:00"),
        product(date="19/11", time="02:00"),
    ]

    result = filter_records(records, PeriodFilter.TODAY, TypeFilter.ALL, fixed_now)

    assert [r.time for r in result] == ["00:00", "01:00"]


def test_today_label_uses_report_timezone() -> None:
    # 01:30 UTC on the 20th is still the 19th in Brasilia
    now = pd.Timestamp("2026-10-20 01:30", tz="UTC")

    assert today_label(now) == "19/10"


def test_records_to_frame_keeps_export_columns_and_none() -> None:
    records = [product(ggr=0.0, count=3), risk(time="11:00", bonus_granted=10.0)]

    df = records_to_frame(records)

    assert list(df.columns) == [attr for _, attr in EXPORT_COLUMNS]
    assert df.loc[0, "ggr"] == 0.0
    assert df.loc[0, "report_type"] == "Performance de Produtos"
    assert pd.isna(df.loc[0, "bonus_granted"])
    assert pd.isna(df.loc[1, "casino_ggr"])
    assert df.loc[0, "count"] == 3


def test_records_to_frame_empty_has_schema() -> None:
    df = records_to_frame([])

    assert df.empty
    assert len(df.columns) == 30
