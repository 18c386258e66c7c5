class InvalidQueryError(ValueError):
    """Dashboard query violates its contract (bad or inverted time range)."""


class InvalidPayloadError(ValueError):
    """Collect payload does not match the SDK schema."""
