"""
Loader for the report producer's dashboard feed.

The producer serves ``{"success": true, "data": [...], "stats": {...}}`` where
each entry in ``data`` is one aggregated reporting period keyed with the
producer's own field names (see config.WIRE_FIELD_MAP). The order of
``data`` is authoritative and is preserved as-is.
"""

import logging
from dataclasses import fields
from typing import Any

import httpx

from ..config import (
    API_URL,
    DATA_ENDPOINT,
    FIELD_ALIASES,
    HTTP_TIMEOUT_SECONDS,
    IDENTITY_WIRE_KEYS,
    INTEGER_FIELDS,
    TRIGGER_ENDPOINT,
    WIRE_FIELD_MAP,
)
from ..exceptions import MalformedResponse, NetworkFailure
from ..models import RECORD_CLASSES, FeedPayload, FeedStats, ReportRecord, ReportType
from .utils import is_blank, lookup, safe_float, safe_int

logger = logging.getLogger(__name__)

_REPORT_TYPE_LABELS = {rt.value: rt for rt in ReportType}
_REPORT_TYPE_ALIASES = {
    "ProductPerformance": ReportType.PRODUCT_PERFORMANCE,
    "RiskTeam": ReportType.RISK_TEAM,
}


def _resolve_report_type(raw_type: Any, index: int) -> ReportType:
    if isinstance(raw_type, str):
        label = raw_type.strip()
        if label in _REPORT_TYPE_LABELS:
            return _REPORT_TYPE_LABELS[label]
        if label in _REPORT_TYPE_ALIASES:
            return _REPORT_TYPE_ALIASES[label]
    raise MalformedResponse(f"record {index}: unknown report type {raw_type!r}")


def decode_record(raw: dict, index: int = 0) -> ReportRecord:
    """Build the record variant matching the entry's report type.

    Fields outside the variant's legal group are dropped. Values that are
    present but not finite numbers decode as absent.
    """
    if not isinstance(raw, dict):
        raise MalformedResponse(f"record {index}: expected an object, got {type(raw).__name__}")

    date = lookup(raw, IDENTITY_WIRE_KEYS["date"], "date")
    time = lookup(raw, IDENTITY_WIRE_KEYS["time"], "time")
    raw_type = lookup(raw, IDENTITY_WIRE_KEYS["report_type"], "reportType")

    if is_blank(date) or is_blank(time):
        raise MalformedResponse(f"record {index}: missing date/time")
    report_type = _resolve_report_type(raw_type, index)
    cls = RECORD_CLASSES[report_type]
    legal = {f.name for f in fields(cls)}

    values: dict[str, Any] = {"date": str(date).strip(), "time": str(time).strip()}
    for key, val in raw.items():
        attr = WIRE_FIELD_MAP.get(key) or FIELD_ALIASES.get(key)
        if attr is None or val is None:
            continue
        if attr not in legal:
            logger.debug(
                "Dropping %s on %s record %d (not part of its field group)",
                key, report_type.value, index,
            )
            continue
        coerced = safe_int(val) if attr in INTEGER_FIELDS else safe_float(val)
        if coerced is None:
            if not is_blank(val):
                logger.warning("Discarding non-numeric %s=%r on record %d", key, val, index)
            continue
        values[attr] = coerced

    return cls(**values)


def decode_stats(raw: Any) -> FeedStats:
    """Decode the producer's stats block; missing or odd stats are tolerated."""
    if not isinstance(raw, dict):
        return FeedStats()
    last_updated = raw.get("ultimaAtualizacao", raw.get("lastUpdated"))
    return FeedStats(
        total_reports=safe_int(lookup(raw, "totalAlertas", "totalReports")),
        reports_today=safe_int(lookup(raw, "alertasHoje", "reportsToday")),
        last_updated=str(last_updated) if last_updated is not None else None,
        raw_record_count=safe_int(lookup(raw, "totalRegistrosBrutos", "rawRecordCount")),
    )


def parse_feed_payload(payload: Any) -> FeedPayload:
    """Validate and decode a full feed response body.

    Raises
    ------
    NetworkFailure : producer answered with ``success: false``.
    MalformedResponse : the body or any record lacks the expected shape.
    """
    if not isinstance(payload, dict):
        raise MalformedResponse(f"expected a JSON object, got {type(payload).__name__}")
    if payload.get("success") is False:
        raise NetworkFailure(f"producer reported failure: {payload.get('error', 'unknown error')}")

    data = payload.get("data")
    if not isinstance(data, list):
        raise MalformedResponse("payload has no 'data' list")

    records = tuple(decode_record(raw, i) for i, raw in enumerate(data))
    stats = decode_stats(payload.get("stats"))

    logger.info("Decoded %d report records from feed", len(records))
    return FeedPayload(records=records, stats=stats)


class FeedClient:
    """Async client for the producer's data and re-ingestion endpoints.

    Parameters
    ----------
    base_url : Producer root URL.
    timeout : Per-request timeout in seconds.
    transport : Optional httpx transport (used to stub the producer).
    """

    def __init__(
        self,
        base_url: str = API_URL,
        timeout: float = HTTP_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def _get_json(self, path: str) -> Any:
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise NetworkFailure(
                f"{url} returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise NetworkFailure(f"could not reach {url}: {exc}") from exc

        try:
            return response.json()
        except ValueError as exc:
            raise MalformedResponse(f"{url} did not return JSON") from exc

    async def fetch_dashboard_data(self) -> FeedPayload:
        """Fetch and decode the current record set."""
        payload = await self._get_json(DATA_ENDPOINT)
        return parse_feed_payload(payload)

    async def trigger_ingestion(self) -> int:
        """Ask the producer to ingest new messages; returns how many it processed."""
        payload = await self._get_json(TRIGGER_ENDPOINT)
        if not isinstance(payload, dict):
            raise MalformedResponse("trigger endpoint returned a non-object body")
        if not payload.get("success"):
            raise NetworkFailure(f"re-ingestion failed: {payload.get('error', 'unknown error')}")
        count = safe_int(payload.get("count")) or 0
        logger.info("Producer processed %d new messages", count)
        return count
