"""Process-wide flag recording whether the JSON logging setup has run."""

_configured = False


def is_configured() -> bool:
    """Check if logging has been configured."""
    return _configured


def mark_configured():
    """Mark logging as configured (called by shared.logging.json.configure_logging)."""
    global _configured
    _configured = True
