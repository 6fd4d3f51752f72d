"""
Tests for the non-blocking range poller.
"""

import sys

from deploy_events.core.events import DeploymentEvent
from deploy_events.log.store import EventSequenceStore
from deploy_events.poll import Complete, Incomplete, RangePoller


def _store_with(indices, deployment_id="d1"):
    store = EventSequenceStore()
    for i in indices:
        store.put(deployment_id, i, DeploymentEvent(index=i, description=f"e{i}"))
    return store


def test_poll_complete_returns_events():
    poller = RangePoller(_store_with(range(5)))

    result = poller.poll("d1", 1, 3)

    assert isinstance(result, Complete)
    assert result.complete
    assert [e.index for e in result.events] == [1, 2, 3]


def test_poll_incomplete_reports_progress():
    poller = RangePoller(_store_with([0, 1, 3]))

    result = poller.poll("d1", 0, 4, max_wait=5.0, correlation_id="req-1")

    assert isinstance(result, Incomplete)
    assert not result.complete
    assert result.present == 3
    assert result.missing == 2
    assert result.max_wait == 5.0


def test_poll_unknown_deployment_is_incomplete():
    result = RangePoller(EventSequenceStore()).poll("nope", 0, 0)

    assert isinstance(result, Incomplete)
    assert result.present == 0


def test_poll_degenerate_range_is_complete_and_empty():
    result = RangePoller(EventSequenceStore()).poll("nope", 5, 3)

    assert isinstance(result, Complete)
    assert result.events == ()


def test_poll_becomes_complete_when_gap_fills():
    store = _store_with([0, 2])
    poller = RangePoller(store)
    assert not poller.poll("d1", 0, 2).complete

    store.put("d1", 1, DeploymentEvent(index=1, description="e1"))

    assert poller.poll("d1", 0, 2).complete


def test_poll_far_end_bound_is_incomplete():
    """Asking for everything up to sys.maxsize reports progress instead of raising."""
    poller = RangePoller(_store_with(range(3)))

    result = poller.poll("d1", 0, sys.maxsize)

    assert isinstance(result, Incomplete)
    assert result.present == 3
    assert result.missing == sys.maxsize + 1 - 3
