"""
Per-worker log watchers.

Each watcher turns its worker's event log lines into DeploymentEvents and
puts them into the deployment's sequence. Indices come from a shared
IndexAllocator so re-delivered lines land on the index they had the first
time and become no-op duplicates.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Dict, List, Optional, Tuple

from deploy_events.core.errors import MalformedLogLineError
from deploy_events.core.events import DeploymentEvent
from deploy_events.log.store import EventSequenceStore, PutResult
from deploy_events.topology.base import Worker
from deploy_events.translate import is_event_line, translate

from .metrics import track_malformed_line, track_put
from .sources import LogSource

logger = logging.getLogger(__name__)


class IndexAllocator:
    """
    Assigns event indices for one deployment.

    (worker name, log generation, position) -> index is fixed on first
    allocation; indices are handed out in allocation order starting at 0.

    A worker's log generation advances when its snapshot restarts: it gets
    shorter than the longest one seen, or its first line changes. Lines of
    the new log then take fresh indices instead of colliding with old ones.
    """

    def __init__(self) -> None:
        self._assigned: Dict[Tuple[str, int, int], int] = {}
        self._next = 0
        # worker name -> (generation, first line, longest snapshot length)
        self._logs: Dict[str, Tuple[int, Optional[str], int]] = {}
        self._lock = threading.Lock()

    def generation_for(self, worker_name: str, lines: List[str]) -> int:
        """Record a snapshot of the worker's event lines and return its log generation."""
        with self._lock:
            generation, first, seen = self._logs.get(worker_name, (0, None, 0))
            # An empty read carries no evidence of a restart
            if lines and first is not None and (len(lines) < seen or lines[0] != first):
                generation += 1
                seen = 0
                first = None
            if first is None and lines:
                first = lines[0]
            self._logs[worker_name] = (generation, first, max(seen, len(lines)))
            return generation

    def index_for(self, worker_name: str, position: int, generation: int = 0) -> int:
        key = (worker_name, generation, position)
        with self._lock:
            index = self._assigned.get(key)
            if index is None:
                index = self._next
                self._assigned[key] = index
                self._next += 1
            return index

    @property
    def allocated(self) -> int:
        with self._lock:
            return self._next


class LogWatcher:
    """
    Watches one worker's log for one deployment.

    Malformed event lines are logged and skipped unless halt_on_malformed is
    set, in which case the error propagates out of poll_once() and stops the
    background loop.
    """

    def __init__(
        self,
        deployment_id: str,
        worker: Worker,
        source: LogSource,
        store: EventSequenceStore,
        allocator: IndexAllocator,
        poll_interval_seconds: float = 2.0,
        halt_on_malformed: bool = False,
    ) -> None:
        self.deployment_id = deployment_id
        self.worker = worker
        self.source = source
        self.store = store
        self.allocator = allocator
        self.poll_interval_seconds = poll_interval_seconds
        self.halt_on_malformed = halt_on_malformed
        self.error: Optional[BaseException] = None
        self._position = 0
        self._generation: Optional[int] = None
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def correlation_id(self) -> str:
        return f"{self.deployment_id}/{self.worker.name}"

    def poll_once(self) -> int:
        """
        Read the worker log once and store any new events.

        Returns:
            Number of events newly stored by this pass

        Raises:
            MalformedLogLineError: Only when halt_on_malformed is set
        """
        lines = [line for line in self.source.read_lines(self.worker) if is_event_line(line)]
        stored = 0
        extra = {"correlation_id": self.correlation_id}

        generation = self.allocator.generation_for(self.worker.name, lines)
        if generation != self._generation:
            if self._generation is not None:
                logger.info(
                    f"Log of {self.worker.name} restarted (generation {generation}), reading from the top",
                    extra=extra,
                )
                self._position = 0
            self._generation = generation

        for position in range(self._position, len(lines)):
            line = lines[position]
            try:
                # Translate first so a bad line never takes an index
                description = translate(line, self.worker.host_name, self.worker.host_address)
            except MalformedLogLineError:
                track_malformed_line()
                if self.halt_on_malformed:
                    self._position = position
                    raise
                logger.error(f"Dropping malformed event line at position {position}: {line!r}", extra=extra)
                continue

            index = self.allocator.index_for(self.worker.name, position, generation)
            event = DeploymentEvent(index=index, description=description, timestamp=time.time())
            result: PutResult = self.store.put(
                self.deployment_id, index, event, correlation_id=self.correlation_id
            )
            track_put(result.duplicate)
            if result.stored:
                stored += 1

        self._position = max(self._position, len(lines))
        if stored:
            logger.debug(f"Stored {stored} new events", extra=extra)
        return stored

    def _run(self) -> None:
        extra = {"correlation_id": self.correlation_id}
        logger.info(f"Watching worker {self.worker.name}", extra=extra)
        while not self._stop.is_set():
            try:
                self.poll_once()
            except MalformedLogLineError as e:
                self.error = e
                logger.error(f"Watcher halted: {e}", extra=extra)
                return
            except Exception as e:
                # Transient source failures: retry on the next tick
                logger.warning(f"Log read failed for {self.worker.name}: {e}", extra=extra)
            self._stop.wait(self.poll_interval_seconds)
        logger.info(f"Stopped watching worker {self.worker.name}", extra=extra)

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, daemon=True, name=f"LogWatcher-{self.worker.name}"
        )
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
