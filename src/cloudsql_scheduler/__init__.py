"""Cloud SQL Scheduler - start and stop Cloud SQL instances from Pub/Sub.

This package decodes start/stop requests and applies them as Cloud SQL
Admin API activation-policy patches.
"""

__version__ = "0.1.0"

from .config import SchedulerConfig
from .dispatcher import ActionDispatcher
from .exceptions import (
    ClientConstructionError,
    InstancePatchError,
    InvalidActionError,
    PayloadDecodeError,
    SchedulerError,
)

__all__ = [
    "ActionDispatcher",
    "ClientConstructionError",
    "InstancePatchError",
    "InvalidActionError",
    "PayloadDecodeError",
    "SchedulerConfig",
    "SchedulerError",
]
