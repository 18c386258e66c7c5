class Tables:
    """Centralised ClickHouse table definitions"""

    EVENTS = "monitor_events"
    ERRORS = "monitor_errors"
