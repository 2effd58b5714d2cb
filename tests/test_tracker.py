"""Tests for the acquisition tracker."""

import asyncio

import pytest

from pokedex_tracker.models import ACQUIRED, ACQUIRING, NOT_ACQUIRED
from pokedex_tracker.tracker import AcquisitionTracker


@pytest.fixture
def events():
    return []


@pytest.fixture
def tracker(events):
    t = AcquisitionTracker(acquire_delay_ms=10)
    t.subscribe(lambda e: events.append((e.entry_id, e.status)))
    return t


async def test_initial_status(tracker):
    assert tracker.status(1) == NOT_ACQUIRED
    assert tracker.acquired == frozenset()
    assert tracker.in_progress == frozenset()


async def test_initiate_returns_immediately(tracker):
    assert tracker.initiate_acquire(5) is True
    assert tracker.status(5) == ACQUIRING
    assert tracker.in_progress == {5}
    assert 5 not in tracker.acquired
    await tracker.wait_idle()
    await tracker.aclose()


async def test_completion_moves_to_acquired(tracker, events):
    tracker.initiate_acquire(5)
    await tracker.wait_idle()
    assert tracker.status(5) == ACQUIRED
    assert tracker.acquired == {5}
    assert tracker.in_progress == frozenset()
    assert events == [(5, ACQUIRING), (5, ACQUIRED)]


async def test_duplicate_initiation_is_noop(tracker, events):
    assert tracker.initiate_acquire(5) is True
    assert tracker.initiate_acquire(5) is False
    await tracker.wait_idle()
    assert tracker.acquired_in_order == (5,)
    assert [e for e in events if e[1] == ACQUIRED] == [(5, ACQUIRED)]


async def test_acquired_entry_cannot_be_reacquired(tracker, events):
    tracker.initiate_acquire(5)
    await tracker.wait_idle()
    assert tracker.initiate_acquire(5) is False
    assert tracker.status(5) == ACQUIRED
    assert len(events) == 2


@pytest.mark.parametrize("order", [(1, 2), (2, 1)])
async def test_concurrent_acquisitions_complete_independently(order):
    tracker = AcquisitionTracker(acquire_delay_ms=10)
    for i in order:
        tracker.initiate_acquire(i)
    assert tracker.in_progress == {1, 2}
    await tracker.wait_idle()
    assert tracker.acquired == {1, 2}
    assert tracker.in_progress == frozenset()
    assert sorted(tracker.acquired_in_order) == [1, 2]


async def test_in_progress_tracks_every_outstanding_entry():
    tracker = AcquisitionTracker(acquire_delay_ms=50)
    tracker.initiate_acquire(1)
    await asyncio.sleep(0.01)
    tracker.initiate_acquire(2)
    assert tracker.in_progress == {1, 2}
    await tracker.wait_idle()
    assert tracker.in_progress == frozenset()


async def test_close_cancels_pending(events):
    tracker = AcquisitionTracker(acquire_delay_ms=50)
    tracker.subscribe(lambda e: events.append((e.entry_id, e.status)))
    tracker.initiate_acquire(3)
    await tracker.aclose()
    await asyncio.sleep(0.1)
    assert tracker.closed
    assert tracker.acquired == frozenset()
    assert tracker.in_progress == frozenset()
    assert events == [(3, ACQUIRING)]


async def test_context_manager_cancels_on_exit():
    async with AcquisitionTracker(acquire_delay_ms=50) as tracker:
        tracker.initiate_acquire(3)
    await asyncio.sleep(0.1)
    assert tracker.status(3) == NOT_ACQUIRED


async def test_close_keeps_completed_acquisitions(tracker):
    tracker.initiate_acquire(1)
    await tracker.wait_idle()
    await tracker.aclose()
    assert tracker.acquired == {1}


async def test_initiate_after_close_raises(tracker):
    await tracker.aclose()
    with pytest.raises(RuntimeError, match="closed"):
        tracker.initiate_acquire(1)


async def test_failing_listener_does_not_break_completion():
    tracker = AcquisitionTracker(acquire_delay_ms=0)

    def boom(event):
        raise ValueError("listener broke")

    tracker.subscribe(boom)
    tracker.initiate_acquire(9)
    await tracker.wait_idle()
    assert tracker.acquired == {9}


async def test_unsubscribe():
    tracker = AcquisitionTracker(acquire_delay_ms=0)
    seen = []
    unsubscribe = tracker.subscribe(seen.append)
    unsubscribe()
    tracker.initiate_acquire(1)
    await tracker.wait_idle()
    assert seen == []


def test_initiate_without_running_loop():
    tracker = AcquisitionTracker()
    with pytest.raises(RuntimeError):
        tracker.initiate_acquire(1)
    assert tracker.in_progress == frozenset()


async def test_acquired_in_order_follows_completion():
    tracker = AcquisitionTracker(acquire_delay_ms=0)
    tracker.initiate_acquire(2)
    await tracker.wait_idle()
    tracker.initiate_acquire(1)
    await tracker.wait_idle()
    assert tracker.acquired_in_order == (2, 1)


async def test_close_while_waiting_releases_waiter():
    tracker = AcquisitionTracker(acquire_delay_ms=500)
    tracker.initiate_acquire(3)
    waiter = asyncio.create_task(tracker.wait_idle())
    await asyncio.sleep(0.01)
    await tracker.aclose()
    await asyncio.wait_for(waiter, timeout=1.0)
    assert waiter.exception() is None
    assert tracker.acquired == frozenset()
