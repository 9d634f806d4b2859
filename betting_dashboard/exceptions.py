"""Errors raised at the feed boundary."""


class DashboardError(Exception):
    """Base class for dashboard errors."""


class FeedError(DashboardError):
    """The report feed could not supply a usable record set."""


class NetworkFailure(FeedError):
    """The fetch could not complete or the producer reported failure."""


class MalformedResponse(FeedError):
    """The payload is missing its expected shape."""
