from .environments import MonitorEnv
from .events import EventNames
from .tables import Tables

__all__ = ["MonitorEnv", "EventNames", "Tables"]
