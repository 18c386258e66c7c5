from shared.constants import Tables

EVENTS_DDL = f"""
CREATE TABLE IF NOT EXISTS {Tables.EVENTS} (
    event_id UUID,
    app_id Nullable(String),
    env Nullable(String),
    release Nullable(String),
    user_id Nullable(String),
    event_name String,
    props String,
    occurred_at DateTime64(3, 'UTC'),
    received_at DateTime64(3, 'UTC'),
    raw String
) ENGINE = MergeTree()
ORDER BY (occurred_at, event_name)
"""

ERRORS_DDL = f"""
CREATE TABLE IF NOT EXISTS {Tables.ERRORS} (
    id UUID,
    app_id Nullable(String),
    env Nullable(String),
    release Nullable(String),
    user_id Nullable(String),
    message String,
    stack Nullable(String),
    error_type Nullable(String),
    filename Nullable(String),
    lineno Nullable(Int32),
    colno Nullable(Int32),
    occurred_at DateTime64(3, 'UTC'),
    received_at DateTime64(3, 'UTC'),
    raw String
) ENGINE = MergeTree()
ORDER BY occurred_at
"""

ALL_DDLS = [
    EVENTS_DDL,
    ERRORS_DDL,
]
