"""
Range poller: the consumer-facing read contract.

poll() never blocks. It returns Complete when every index in the window is
present and Incomplete otherwise; waiting and backoff belong to the caller.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from .core.events import DeploymentEvent, RangeQuery
from .log.store import EventSequenceStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Complete:
    """Every event in the requested window, ascending by index."""
    deployment_id: str
    query: RangeQuery
    events: Tuple[DeploymentEvent, ...]

    @property
    def complete(self) -> bool:
        return True


@dataclass(frozen=True)
class Incomplete:
    """
    The window has gaps; retry later.

    Fields:
        present: Number of indices already filled in the window
        max_wait: Caller's wait budget, echoed back for the transport's retry policy
    """
    deployment_id: str
    query: RangeQuery
    present: int
    max_wait: Optional[float] = None

    @property
    def complete(self) -> bool:
        return False

    @property
    def missing(self) -> int:
        return self.query.size - self.present


PollResult = Union[Complete, Incomplete]


class RangePoller:
    def __init__(self, store: EventSequenceStore) -> None:
        self.store = store

    def poll(
        self,
        deployment_id: str,
        start: int,
        end: int,
        max_wait: Optional[float] = None,
        correlation_id: Optional[str] = None,
    ) -> PollResult:
        query = RangeQuery(start, end)
        extra = {"correlation_id": correlation_id or "N/A", "deployment_id": deployment_id}

        if self.store.is_complete(deployment_id, start, end):
            events = self.store.extract(deployment_id, start, end)
            # Sequence evicted between the two calls
            if len(events) == query.size:
                logger.debug(f"Range [{start}, {end}] complete ({len(events)} events)", extra=extra)
                return Complete(deployment_id=deployment_id, query=query, events=tuple(events))
            present = len(events)
        else:
            present = len(self.store.extract(deployment_id, start, end))

        logger.debug(
            f"Range [{start}, {end}] incomplete ({present}/{query.size} present)", extra=extra
        )
        return Incomplete(
            deployment_id=deployment_id,
            query=query,
            present=present,
            max_wait=max_wait,
        )
