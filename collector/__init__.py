"""
Deployment event collector.

Runs one log watcher per worker of each tracked operation and serves range
polls over the collected events.
"""

from .config import CollectorConfig
from .service import DeploymentEventCollector
from .sources import LogSource, StaticLogSource
from .watcher import IndexAllocator, LogWatcher

__all__ = [
    "CollectorConfig",
    "DeploymentEventCollector",
    "LogSource",
    "StaticLogSource",
    "IndexAllocator",
    "LogWatcher",
]
