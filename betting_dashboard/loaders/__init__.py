"""Feed access for the report producer's dashboard endpoints."""

from .feed import FeedClient, decode_record, decode_stats, parse_feed_payload

__all__ = [
    "FeedClient",
    "decode_record",
    "decode_stats",
    "parse_feed_payload",
]
