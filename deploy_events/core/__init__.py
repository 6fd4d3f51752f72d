"""
Core primitives for deployment event aggregation.

This module provides:
- DeploymentEvent: Immutable, index-keyed lifecycle event
- RangeQuery: Inclusive index window used by completeness checks
- Errors: Integrity failures surfaced to the immediate caller
"""

from .events import DeploymentEvent, RangeQuery
from .errors import MalformedLogLineError, EventStoreError, InvalidRangeError

__all__ = [
    "DeploymentEvent",
    "RangeQuery",
    "MalformedLogLineError",
    "EventStoreError",
    "InvalidRangeError",
]
