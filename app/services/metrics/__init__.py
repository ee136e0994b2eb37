"""TVL metrics store and its update loop.

Session-only in-memory state: the store holds a bounded window of synthetic
TVL records for one protocol, seeded at startup and advanced by the
scheduler.
"""

from .generator import TvlGenerator
from .store import MetricSample, MetricsStore
from .models import MetricModel, TvlUpdateEvent, TVL_UPDATE_EVENT
from .scheduler import UpdateScheduler

__all__ = [
    "TvlGenerator",
    "MetricSample",
    "MetricsStore",
    "MetricModel",
    "TvlUpdateEvent",
    "TVL_UPDATE_EVENT",
    "UpdateScheduler",
]
