"""
Deployment event collector: wiring of classifier, watchers, store and poller.

One collector serves any number of operations. Each tracked operation gets
its own IndexAllocator and one LogWatcher per discovered worker.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, List, Optional

from deploy_events.classify import DeploymentClassifier, OperationKind
from deploy_events.log.store import EventSequenceStore
from deploy_events.poll import PollResult, RangePoller

from .config import CollectorConfig
from .metrics import set_tracked_sequences, track_poll
from .sources import LogSource
from .watcher import IndexAllocator, LogWatcher

logger = logging.getLogger(__name__)


class DeploymentEventCollector:
    def __init__(
        self,
        classifier: DeploymentClassifier,
        source: LogSource,
        config: CollectorConfig,
        store: Optional[EventSequenceStore] = None,
    ) -> None:
        self.classifier = classifier
        self.source = source
        self.config = config
        self.store = store or EventSequenceStore()
        self.poller = RangePoller(self.store)
        self._allocators: Dict[str, IndexAllocator] = {}
        self._watchers: Dict[str, Dict[str, LogWatcher]] = {}
        self._lock = threading.Lock()

    def track(self, operation_id: str, start: bool = True) -> OperationKind:
        """
        Begin collecting events for an operation.

        Workers not discoverable yet are picked up by later refresh() calls.

        Returns:
            The operation's classification at tracking time
        """
        kind = self.classifier.classify(operation_id)
        with self._lock:
            self._allocators.setdefault(operation_id, IndexAllocator())
            self._watchers.setdefault(operation_id, {})
        logger.info(
            f"Tracking {kind.value} {operation_id}",
            extra={"correlation_id": operation_id},
        )
        self.refresh(operation_id, start=start)
        return kind

    def refresh(self, operation_id: str, start: bool = True) -> List[LogWatcher]:
        """
        Attach watchers to workers that appeared since the last refresh.

        Returns:
            Newly created watchers
        """
        workers = self.classifier.units_for(operation_id)
        created = []
        with self._lock:
            if operation_id not in self._watchers:
                raise KeyError(f"operation {operation_id} is not tracked")
            watchers = self._watchers[operation_id]
            allocator = self._allocators[operation_id]
            for worker in sorted(workers, key=lambda w: w.name):
                if worker.name in watchers:
                    continue
                watcher = LogWatcher(
                    deployment_id=operation_id,
                    worker=worker,
                    source=self.source,
                    store=self.store,
                    allocator=allocator,
                    poll_interval_seconds=self.config.poll_interval_seconds,
                    halt_on_malformed=self.config.halt_on_malformed,
                )
                watchers[worker.name] = watcher
                created.append(watcher)

        if not workers:
            logger.info(
                f"No workers discoverable yet for {operation_id}",
                extra={"correlation_id": operation_id},
            )
        for watcher in created:
            if start:
                watcher.start()
        return created

    def watchers(self, operation_id: str) -> List[LogWatcher]:
        with self._lock:
            return list(self._watchers.get(operation_id, {}).values())

    def collect_once(self, operation_id: str) -> int:
        """Run one synchronous pass over every watcher of an operation."""
        return sum(w.poll_once() for w in self.watchers(operation_id))

    def poll(
        self,
        operation_id: str,
        start: int,
        end: int,
        max_wait: Optional[float] = None,
        correlation_id: Optional[str] = None,
    ) -> PollResult:
        result = self.poller.poll(
            operation_id, start, end, max_wait=max_wait, correlation_id=correlation_id
        )
        track_poll(result.complete)
        return result

    def untrack(self, operation_id: str) -> None:
        """Stop an operation's watchers and evict its sequence."""
        with self._lock:
            watchers = self._watchers.pop(operation_id, {})
            self._allocators.pop(operation_id, None)
        for watcher in watchers.values():
            watcher.stop(timeout=self.config.poll_interval_seconds)
        self.store.evict(operation_id)
        set_tracked_sequences(len(self.store.deployment_ids()))

    def evict_expired(self) -> List[str]:
        """Untrack operations idle longer than the configured retention window."""
        evicted = self.store.evict_idle(self.config.retention_seconds)
        for operation_id in evicted:
            self.untrack(operation_id)
        set_tracked_sequences(len(self.store.deployment_ids()))
        return evicted

    def stop(self) -> None:
        with self._lock:
            operation_ids = list(self._watchers.keys())
        for operation_id in operation_ids:
            for watcher in self.watchers(operation_id):
                watcher.stop(timeout=self.config.poll_interval_seconds)
