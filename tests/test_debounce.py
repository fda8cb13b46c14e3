import asyncio
import logging

import pytest

from engine.debounce import DebouncedScheduler

DELAY = 0.02


def recorder(log, value):
    async def job():
        log.append(value)
        return value
    return job


@pytest.mark.asyncio
async def test_burst_collapses_into_last_job():
    log = []
    scheduler = DebouncedScheduler(DELAY)
    for i in range(10):
        scheduler.submit("text", recorder(log, i))
    assert log == []
    await asyncio.sleep(DELAY * 5)
    await scheduler.drain()
    assert log == [9]
    assert not scheduler.pending("text")


@pytest.mark.asyncio
async def test_keys_are_independent():
    log = []
    scheduler = DebouncedScheduler(DELAY)
    scheduler.submit("a", recorder(log, "a"))
    scheduler.submit("b", recorder(log, "b"))
    await asyncio.sleep(DELAY * 5)
    await scheduler.drain()
    assert sorted(log) == ["a", "b"]


@pytest.mark.asyncio
async def test_flush_runs_pending_job_now():
    log = []
    scheduler = DebouncedScheduler(10)
    scheduler.submit("text", recorder(log, "first"))
    scheduler.submit("text", recorder(log, "latest"))
    assert await scheduler.flush("text") == "latest"
    assert log == ["latest"]
    assert await scheduler.flush("text") is None


@pytest.mark.asyncio
async def test_discard_drops_pending_job():
    log = []
    scheduler = DebouncedScheduler(DELAY)
    scheduler.submit("text", recorder(log, "x"))
    assert scheduler.discard("text") is True
    await asyncio.sleep(DELAY * 5)
    assert log == []
    assert scheduler.discard("text") is False


@pytest.mark.asyncio
async def test_flush_all():
    log = []
    scheduler = DebouncedScheduler(10)
    scheduler.submit("a", recorder(log, "a"))
    scheduler.submit("b", recorder(log, "b"))
    await scheduler.flush_all()
    assert sorted(log) == ["a", "b"]
    assert scheduler.pending_keys == set()


@pytest.mark.asyncio
async def test_failed_job_is_logged(caplog):
    async def boom():
        raise RuntimeError("nope")

    scheduler = DebouncedScheduler(DELAY)
    with caplog.at_level(logging.ERROR, logger="engine.debounce"):
        scheduler.submit("x", boom)
        await asyncio.sleep(DELAY * 5)
        await scheduler.drain()
    assert "Debounced job failed" in caplog.text
