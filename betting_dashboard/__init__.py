"""
Betting Operations Dashboard

Analytics backend turning the report producer's periodic gambling-ops
reports into dashboard-ready metrics, segment cards and CSV exports.

To render a view:
    Take ``store.snapshot`` once and call
    dashboard.get_dashboard_view(snapshot, period, type_filter). The result
    holds the filtered records and every derived summary.

To keep data fresh:
    Wrap a RecordStore in scheduler.RefreshScheduler with
    loaders.FeedClient().fetch_dashboard_data as the fetcher and call
    refresh() or start_auto_refresh().

To add a field:
    Add the producer key to config.WIRE_FIELD_MAP, the attribute to the
    matching record dataclass in models, and a column to
    config.EXPORT_COLUMNS if it should be exported.
"""
