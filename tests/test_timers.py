import asyncio

import pytest
import pytest_asyncio

from tasktrack.scheduler.timers import TimerScheduler


@pytest_asyncio.fixture
async def timers():
    scheduler = TimerScheduler()
    scheduler.start()
    yield scheduler
    scheduler.stop()


def test_running_reflects_start_and_stop():
    timers = TimerScheduler()
    assert timers.running is False
    timers.stop()
    assert timers.running is False


def test_schedule_before_start_fails():
    with pytest.raises(RuntimeError):
        TimerScheduler().schedule("job", 1, print)


@pytest.mark.asyncio
async def test_job_runs_once_after_delay(timers):
    calls = []

    async def record(value):
        calls.append(value)

    assert timers.running is True
    timers.schedule("job", 0.05, record, "a")
    assert timers.pending("job") is True

    await asyncio.sleep(0.3)

    assert calls == ["a"]
    assert timers.pending("job") is False


@pytest.mark.asyncio
async def test_rescheduling_same_id_replaces(timers):
    calls = []

    async def record(value):
        calls.append(value)

    timers.schedule("job", 0.05, record, "first")
    timers.schedule("job", 0.05, record, "second")

    await asyncio.sleep(0.3)

    assert calls == ["second"]


@pytest.mark.asyncio
async def test_cancel(timers):
    calls = []

    async def record():
        calls.append(1)

    timers.schedule("job", 0.05, record)
    assert timers.cancel("job") is True
    assert timers.cancel("job") is False

    await asyncio.sleep(0.2)
    assert calls == []


@pytest.mark.asyncio
async def test_replacement_runs_while_earlier_run_is_in_progress(timers):
    started = []

    async def slow(value):
        started.append(value)
        await asyncio.sleep(0.3)

    timers.schedule("job", 0.05, slow, "first")
    await asyncio.sleep(0.15)
    timers.schedule("job", 0.05, slow, "second")

    await asyncio.sleep(0.3)

    assert started == ["first", "second"]
