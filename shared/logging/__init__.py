from .json import CustomJsonFormatter, SensitiveDataFilter, configure_logging
from .logger import is_configured

__all__ = [
    "CustomJsonFormatter",
    "SensitiveDataFilter",
    "configure_logging",
    "is_configured",
]
