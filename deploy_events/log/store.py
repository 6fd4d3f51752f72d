"""
Per-deployment, write-once, sparse event sequences.

Guarantees:
- Insert-once per index (first writer wins, duplicates are no-ops)
- Range reads in ascending index order
- Completeness checks never rescan the contiguous prefix
- One lock per deployment; unrelated deployments never contend
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Dict, List, Optional

from ..core.errors import EventStoreError
from ..core.events import DeploymentEvent, RangeQuery

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PutResult:
    """
    Result of a put attempt.

    When duplicate is True the existing event was kept and `event` is the
    one already stored at that index.
    """

    deployment_id: str
    index: int
    event: DeploymentEvent
    stored: bool
    duplicate: bool


class EventSequence:
    """
    Sparse index -> event map owned by one deployment.

    high_water_mark is the largest h such that 0..h are all present
    (-1 while index 0 is missing).
    """

    def __init__(self, deployment_id: str) -> None:
        self.deployment_id = deployment_id
        self._events: Dict[int, DeploymentEvent] = {}
        self._lock = threading.Lock()
        self._high_water_mark = -1
        self.last_write = time.monotonic()
        self._evicted = False

    def put(self, index: int, event: DeploymentEvent) -> Optional[PutResult]:
        """Insert under the sequence lock. Returns None once the sequence is evicted."""
        with self._lock:
            if self._evicted:
                return None
            existing = self._events.get(index)
            if existing is not None:
                return PutResult(
                    deployment_id=self.deployment_id,
                    index=index,
                    event=existing,
                    stored=False,
                    duplicate=True,
                )
            self._events[index] = event
            self.last_write = time.monotonic()
            if index == self._high_water_mark + 1:
                hwm = index
                while hwm + 1 in self._events:
                    hwm += 1
                self._high_water_mark = hwm
        return PutResult(
            deployment_id=self.deployment_id,
            index=index,
            event=event,
            stored=True,
            duplicate=False,
        )

    def extract(self, query: RangeQuery) -> List[DeploymentEvent]:
        if query.is_empty:
            return []
        with self._lock:
            if query.size <= len(self._events):
                found = [self._events.get(i) for i in query.indices()]
                return [e for e in found if e is not None]
            # Window wider than the sequence: walk stored keys instead
            keys = sorted(k for k in self._events if query.start <= k <= query.end)
            return [self._events[k] for k in keys]

    def is_complete(self, query: RangeQuery) -> bool:
        if query.is_empty:
            return True
        with self._lock:
            if query.end <= self._high_water_mark:
                return True
            if query.size > len(self._events):
                return False
            first_unchecked = max(query.start, self._high_water_mark + 1)
            for i in range(first_unchecked, query.end + 1):
                if i not in self._events:
                    return False
            return True

    def mark_evicted(self) -> None:
        with self._lock:
            self._evicted = True

    @property
    def high_water_mark(self) -> int:
        with self._lock:
            return self._high_water_mark

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)


class EventSequenceStore:
    """
    Registry of event sequences keyed by deployment id.

    The registry lock only guards creation and eviction of sequences; all
    per-event work happens under the owning sequence's lock.
    """

    def __init__(self) -> None:
        self._sequences: Dict[str, EventSequence] = {}
        self._registry_lock = threading.Lock()

    def _get(self, deployment_id: str) -> Optional[EventSequence]:
        return self._sequences.get(deployment_id)

    def _get_or_create(self, deployment_id: str) -> EventSequence:
        seq = self._sequences.get(deployment_id)
        if seq is not None:
            return seq
        with self._registry_lock:
            seq = self._sequences.get(deployment_id)
            if seq is None:
                seq = EventSequence(deployment_id)
                self._sequences[deployment_id] = seq
                logger.debug(f"Created event sequence for deployment {deployment_id}")
            return seq

    def put(
        self,
        deployment_id: str,
        index: int,
        event: DeploymentEvent,
        correlation_id: Optional[str] = None,
    ) -> PutResult:
        """
        Insert event at index, creating the deployment's sequence if needed.

        Args:
            deployment_id: Owning deployment
            index: Event index (must equal event.index)
            event: Event to insert
            correlation_id: Caller-supplied id for diagnostic logging

        Returns:
            PutResult; duplicate=True when the index was already filled

        Raises:
            EventStoreError: If index is negative or disagrees with event.index
        """
        if index < 0:
            raise EventStoreError(f"event index must be non-negative, got {index}")
        if event.index != index:
            raise EventStoreError(
                f"event index {event.index} does not match put index {index}"
            )

        result = None
        while result is None:
            # Evicted after lookup: land on a freshly registered sequence
            result = self._get_or_create(deployment_id).put(index, event)
        extra = {"correlation_id": correlation_id or "N/A", "deployment_id": deployment_id}
        if result.duplicate:
            logger.debug(f"Ignored duplicate event at index {index}", extra=extra)
        else:
            logger.debug(f"Stored event at index {index}", extra=extra)
        return result

    def extract(self, deployment_id: str, start: int, end: int) -> List[DeploymentEvent]:
        """
        Return present events with start <= index <= end, ascending.

        Missing indices are omitted; an unknown deployment yields [].
        """
        query = RangeQuery(start, end)
        seq = self._get(deployment_id)
        if seq is None:
            return []
        return seq.extract(query)

    def is_complete(self, deployment_id: str, start: int, end: int) -> bool:
        """True iff every index in [start, end] is present (degenerate ranges are complete)."""
        query = RangeQuery(start, end)
        if query.is_empty:
            return True
        seq = self._get(deployment_id)
        if seq is None:
            return False
        return seq.is_complete(query)

    def high_water_mark(self, deployment_id: str) -> int:
        seq = self._get(deployment_id)
        return -1 if seq is None else seq.high_water_mark

    def size(self, deployment_id: str) -> int:
        seq = self._get(deployment_id)
        return 0 if seq is None else len(seq)

    def deployment_ids(self) -> List[str]:
        return sorted(self._sequences.keys())

    def evict(self, deployment_id: str) -> bool:
        """
        Drop a deployment's sequence. Returns True if one was removed.

        A put that looked the sequence up before eviction and writes after it
        is retried on a new sequence, so it is never lost.
        """
        with self._registry_lock:
            removed = self._sequences.pop(deployment_id, None)
            if removed is not None:
                removed.mark_evicted()
        if removed is not None:
            logger.info(f"Evicted event sequence for deployment {deployment_id}")
        return removed is not None

    def evict_idle(self, max_idle_seconds: float, now: Optional[float] = None) -> List[str]:
        """
        Drop sequences with no new event for longer than max_idle_seconds.

        Args:
            max_idle_seconds: Retention window chosen by the caller
            now: time.monotonic() reading to compare against (default: now)

        Returns:
            Evicted deployment ids
        """
        now = time.monotonic() if now is None else now
        evicted = []
        with self._registry_lock:
            for deployment_id, seq in list(self._sequences.items()):
                if now - seq.last_write > max_idle_seconds:
                    del self._sequences[deployment_id]
                    seq.mark_evicted()
                    evicted.append(deployment_id)
        for deployment_id in evicted:
            logger.info(f"Evicted idle event sequence for deployment {deployment_id}")
        return evicted
