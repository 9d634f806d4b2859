"""Tests for feed decoding and the HTTP client, with the producer stubbed."""

import json

import httpx
import pytest

from betting_dashboard.exceptions import MalformedResponse, NetworkFailure
from betting_dashboard.loaders import FeedClient, decode_record, decode_stats, parse_feed_payload
from betting_dashboard.loaders.utils import safe_float, safe_int
from betting_dashboard.models import ProductPerformanceRecord, ReportRecord, RiskTeamRecord


class TestSafeCoercion:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            (0, 0.0),
            ("0", 0.0),
            (" 12.5 ", 12.5),
            ("78%", 78.0),
            (3, 3.0),
        ],
    )
    def test_numeric_values(self, raw, expected) -> None:
        assert safe_float(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "n/a", True, float("nan"), float("inf"), "-inf", [1]])
    def test_missing_or_non_finite(self, raw) -> None:
        assert safe_float(raw) is None

    def test_safe_int_rounds(self) -> None:
        assert safe_int("320.6") == 321
        assert safe_int(None) is None


class TestDecodeRecord:
    def test_payload_decodes_to_typed_variants(self, feed_payload) -> None:
        payload = parse_feed_payload(feed_payload)

        first, second = payload.records
        assert isinstance(first, ProductPerformanceRecord)
        assert isinstance(second, RiskTeamRecord)
        assert first.date == "19/10"
        assert first.time == "10:00"
        assert first.ggr == 1500.5
        assert first.ngr == 1200.0
        assert first.turnover_total == 25000.0
        assert first.casino_ggr == 900.0
        assert first.sportsbook_ggr == 600.5
        assert first.count == 2

    def test_fields_outside_group_are_dropped(self, feed_payload) -> None:
        first, second = parse_feed_payload(feed_payload).records

        assert not hasattr(first, "opening_balance")
        assert not hasattr(second, "casino_ggr")

    def test_zero_and_absent_are_distinct(self, feed_payload) -> None:
        second = parse_feed_payload(feed_payload).records[1]

        assert second.ggr == 0.0
        assert second.ngr is None
        assert second.deposits == 5000.25
        assert second.withdrawals == 4000.0
        assert second.net_flow == 1000.25
        assert second.unique_players == 321
        assert second.bonus_granted == 200.0
        assert second.avg_ticket is None

    def test_english_aliases_accepted(self) -> None:
        record = decode_record({
            "date": "19/10",
            "time": "08:00",
            "reportType": "RiskTeam",
            "bonusGranted": 50,
            "openingBalance": 10,
            "ggr": 1,
        })

        assert isinstance(record, RiskTeamRecord)
        assert record.bonus_granted == 50.0
        assert record.opening_balance == 10.0

    def test_unknown_report_type_is_malformed(self) -> None:
        with pytest.raises(MalformedResponse):
            decode_record({"data": "19/10", "hora": "10:00", "tipoRelatorio": "Outro"})

    def test_missing_identity_is_malformed(self) -> None:
        with pytest.raises(MalformedResponse):
            decode_record({"hora": "10:00", "tipoRelatorio": "Time de Risco"})

    def test_stats_decoded(self, feed_payload) -> None:
        stats = parse_feed_payload(feed_payload).stats

        assert stats.total_reports == 2
        assert stats.reports_today == 2
        assert stats.last_updated == "19/10/2026, 11:05:00"
        assert stats.raw_record_count == 3

    def test_missing_stats_tolerated(self) -> None:
        assert decode_stats(None).total_reports is None

    def test_base_record_cannot_be_built(self) -> None:
        with pytest.raises(TypeError):
            ReportRecord(date="19/10", time="10:00")


class TestParsePayload:
    def test_order_is_preserved(self) -> None:
        data = [
            {"data": "19/10", "hora": f"{h:02d}:00", "tipoRelatorio": "Time de Risco"}
            for h in (5, 3, 9)
        ]

        records = parse_feed_payload({"success": True, "data": data}).records

        assert [r.time for r in records] == ["05:00", "03:00", "09:00"]

    def test_unsuccessful_payload_is_network_failure(self) -> None:
        with pytest.raises(NetworkFailure):
            parse_feed_payload({"success": False, "error": "boom"})

    @pytest.mark.parametrize("payload", [[], "x", {"success": True}, {"data": {}}])
    def test_bad_shapes_are_malformed(self, payload) -> None:
        with pytest.raises(MalformedResponse):
            parse_feed_payload(payload)


def _client(handler) -> FeedClient:
    return FeedClient("http://producer.test/", transport=httpx.MockTransport(handler))


class TestFeedClient:
    @pytest.mark.asyncio
    async def test_fetch_dashboard_data(self, feed_payload) -> None:
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200, json=feed_payload)

        payload = await _client(handler).fetch_dashboard_data()

        assert seen == ["http://producer.test/api/dashboard-data"]
        assert len(payload.records) == 2

    @pytest.mark.asyncio
    async def test_http_error_status_is_network_failure(self) -> None:
        client = _client(lambda request: httpx.Response(500, json={"success": False}))

        with pytest.raises(NetworkFailure):
            await client.fetch_dashboard_data()

    @pytest.mark.asyncio
    async def test_connection_error_is_network_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(NetworkFailure):
            await _client(handler).fetch_dashboard_data()

    @pytest.mark.asyncio
    async def test_non_json_body_is_malformed(self) -> None:
        client = _client(lambda request: httpx.Response(200, text="<html>"))

        with pytest.raises(MalformedResponse):
            await client.fetch_dashboard_data()

    @pytest.mark.asyncio
    async def test_trigger_ingestion(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/api/fetch-messages"
            return httpx.Response(200, content=json.dumps({"success": True, "count": 4}))

        assert await _client(handler).trigger_ingestion() == 4

    @pytest.mark.asyncio
    async def test_trigger_failure(self) -> None:
        client = _client(lambda request: httpx.Response(200, json={"success": False, "error": "slack"}))

        with pytest.raises(NetworkFailure):
            await client.trigger_ingestion()
