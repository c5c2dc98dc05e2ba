"""
Unit tests for PollerService and its lifecycle helpers.
"""

import asyncio
import logging
from unittest.mock import MagicMock

import pytest

from review_poller.poller import PollerService, launch_poller, stop_poller


class FakeRepository:
    """Counts update cycles; optionally fails on selected cycles."""

    def __init__(self, fail_on=(), hang=False):
        self.calls = 0
        self.fail_on = set(fail_on)
        self.hang = hang

    async def update_reviews(self):
        self.calls += 1
        if self.hang:
            await asyncio.sleep(3600)
        if self.calls in self.fail_on:
            raise RuntimeError(f"unexpected failure in cycle {self.calls}")


def test_interval_must_be_positive():
    """Test interval validation."""
    with pytest.raises(ValueError):
        PollerService(MagicMock(), 0)


def test_first_cycle_runs_immediately():
    """The first cycle does not wait for the interval."""
    repository = FakeRepository()
    poller = PollerService(repository, poll_interval_seconds=3600)

    async def scenario():
        task = launch_poller(poller)
        await asyncio.sleep(0.05)
        await stop_poller(task)

    asyncio.run(scenario())

    assert repository.calls == 1


def test_poller_repeats_on_interval():
    repository = FakeRepository()
    poller = PollerService(repository, poll_interval_seconds=0.01)

    async def scenario():
        task = launch_poller(poller)
        await asyncio.sleep(0.2)
        await stop_poller(task)

    asyncio.run(scenario())

    assert repository.calls >= 3
    assert poller.cycles_completed == repository.calls


def test_failed_cycle_does_not_stop_poller(caplog):
    """Unexpected cycle errors are logged and polling continues."""
    repository = FakeRepository(fail_on={1, 2})
    poller = PollerService(repository, poll_interval_seconds=0.01)

    async def scenario():
        task = launch_poller(poller)
        await asyncio.sleep(0.2)
        assert not task.done()
        await stop_poller(task)

    with caplog.at_level(logging.ERROR, logger="review_poller.poller"):
        asyncio.run(scenario())

    assert repository.calls >= 3
    assert poller.cycles_completed == repository.calls - 2
    assert sum("Poll cycle failed" in rec.getMessage() for rec in caplog.records) == 2


def test_start_reraises_cancellation():
    """Cancellation is re-raised so the owner can join the task."""
    poller = PollerService(FakeRepository(), poll_interval_seconds=3600)

    async def scenario():
        task = asyncio.create_task(poller.start())
        await asyncio.sleep(0.01)
        task.cancel()
        await task

    with pytest.raises(asyncio.CancelledError):
        asyncio.run(scenario())


def test_cancel_mid_cycle_stops_further_cycles(caplog):
    """Test cancelling the poller during an update."""
    repository = FakeRepository(hang=True)
    poller = PollerService(repository, poll_interval_seconds=0.01)

    async def scenario():
        task = launch_poller(poller)
        await asyncio.sleep(0.05)
        # Lifecycle hook must not raise
        await stop_poller(task)
        await asyncio.sleep(0.05)
        return task

    with caplog.at_level(logging.INFO, logger="review_poller.poller"):
        task = asyncio.run(scenario())

    assert task.cancelled()
    assert repository.calls == 1
    assert poller.cycles_completed == 0
    assert not any(rec.levelno >= logging.ERROR for rec in caplog.records)
    assert any("Polling service stopped" in rec.getMessage() for rec in caplog.records)


def test_run_once_reports_failure():
    """Test run_once return values."""
    poller = PollerService(FakeRepository(fail_on={1}), poll_interval_seconds=1)

    assert asyncio.run(poller.run_once()) is False
    assert asyncio.run(poller.run_once()) is True


def test_stop_poller_on_finished_task_is_noop():
    async def scenario():
        async def quick():
            return None

        task = asyncio.create_task(quick())
        await task
        await stop_poller(task)

    asyncio.run(scenario())


def test_self_cancelling_cycle_does_not_stop_poller(caplog):
    """Only a cancel of the poller task itself stops the loop."""
    class SelfCancellingRepository:
        def __init__(self):
            self.calls = 0

        async def update_reviews(self):
            self.calls += 1
            raise asyncio.CancelledError()

    repository = SelfCancellingRepository()
    poller = PollerService(repository, poll_interval_seconds=0.01)

    async def scenario():
        task = launch_poller(poller)
        await asyncio.sleep(0.2)
        still_running = not task.done()
        await stop_poller(task)
        return still_running

    with caplog.at_level(logging.ERROR, logger="review_poller.poller"):
        still_running = asyncio.run(scenario())

    assert still_running
    assert repository.calls >= 3
    assert poller.cycles_completed == 0
