"""
Tests for concurrent producers and readers on one event sequence.

Goal: no lost writes, one winner per index, readers never see a gap reported
as complete.
"""

import threading

from deploy_events.core.events import DeploymentEvent
from deploy_events.log.store import EventSequenceStore


def test_disjoint_concurrent_puts_lose_nothing():
    """N producers writing interleaved disjoint indices: union survives."""
    store = EventSequenceStore()
    producers = 8
    per_producer = 500
    barrier = threading.Barrier(producers)

    def produce(worker: int):
        barrier.wait()
        for i in range(worker, producers * per_producer, producers):
            store.put("d1", i, DeploymentEvent(index=i, description=f"[w{worker}/a] - {i}"))

    threads = [threading.Thread(target=produce, args=(w,)) for w in range(producers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    total = producers * per_producer
    events = store.extract("d1", 0, total - 1)
    assert [e.index for e in events] == list(range(total))
    assert store.is_complete("d1", 0, total - 1)
    assert store.high_water_mark("d1") == total - 1


def test_same_index_race_has_single_winner():
    """Concurrent puts at one index: exactly one stores, all see the same event."""
    store = EventSequenceStore()
    writers = 16
    barrier = threading.Barrier(writers)
    results = []
    results_lock = threading.Lock()

    def write(worker: int):
        barrier.wait()
        r = store.put("d1", 0, DeploymentEvent(index=0, description=f"writer {worker}"))
        with results_lock:
            results.append(r)

    threads = [threading.Thread(target=write, args=(w,)) for w in range(writers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    stored = [r for r in results if r.stored]
    assert len(stored) == 1
    assert all(r.event == stored[0].event for r in results)
    assert store.extract("d1", 0, 0) == [stored[0].event]


def test_readers_never_see_complete_window_with_gap():
    """While producers fill a window, complete => extract returns the full window."""
    store = EventSequenceStore()
    total = 2000
    done = threading.Event()
    violations = []

    def produce(offset: int):
        for i in range(offset, total, 2):
            store.put("d1", i, DeploymentEvent(index=i, description=str(i)))

    def read():
        while not done.is_set():
            if store.is_complete("d1", 0, 99):
                events = store.extract("d1", 0, 99)
                if [e.index for e in events] != list(range(100)):
                    violations.append(len(events))

    reader = threading.Thread(target=read)
    reader.start()
    producers = [threading.Thread(target=produce, args=(o,)) for o in (1, 0)]
    for t in producers:
        t.start()
    for t in producers:
        t.join()
    done.set()
    reader.join()

    assert violations == []
    assert store.is_complete("d1", 0, total - 1)


def test_many_deployments_written_concurrently():
    store = EventSequenceStore()
    deployments = [f"d{i}" for i in range(10)]

    def produce(deployment_id: str):
        for i in range(200):
            store.put(deployment_id, i, DeploymentEvent(index=i, description=deployment_id))

    threads = [threading.Thread(target=produce, args=(d,)) for d in deployments]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert store.deployment_ids() == sorted(deployments)
    for d in deployments:
        assert store.is_complete(d, 0, 199)
        assert {e.description for e in store.extract(d, 0, 199)} == {d}
