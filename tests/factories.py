"""Record builders for tests."""

from betting_dashboard.models import ProductPerformanceRecord, RiskTeamRecord


def product(time: str = "10:00", date: str = "19/10", **fields) -> ProductPerformanceRecord:
    return ProductPerformanceRecord(date=date, time=time, **fields)


def risk(time: str = "10:00", date: str = "19/10", **fields) -> RiskTeamRecord:
    return RiskTeamRecord(date=date, time=time, **fields)
