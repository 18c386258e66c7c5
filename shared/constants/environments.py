from enum import Enum


class MonitorEnv(str, Enum):
    """Environment tag attached by the SDK to every reported payload."""

    DEV = "dev"
    TEST = "test"
    PROD = "prod"

    @classmethod
    def parse(cls, value: object) -> "MonitorEnv | None":
        """Return the matching tag, or None for anything unrecognised."""
        if isinstance(value, str):
            try:
                return cls(value)
            except ValueError:
                return None
        return None
