"""Tests for the round countdown."""

import asyncio

import pytest

from debate_client.timer import RoundTimer


@pytest.fixture
def fast_sleep(monkeypatch: pytest.MonkeyPatch) -> None:
    real_sleep = asyncio.sleep

    async def no_wait(delay: float) -> None:
        await real_sleep(0)

    monkeypatch.setattr("debate_client.timer.asyncio.sleep", no_wait)


def test_countdown_ticks_to_zero_and_stops(fast_sleep: None) -> None:
    ticks: list[int] = []

    async def run() -> RoundTimer:
        timer = RoundTimer(duration=3, on_tick=ticks.append)
        timer.start()
        for _ in range(20):
            await asyncio.sleep(0)
        return timer

    timer = asyncio.run(run())

    assert ticks == [3, 2, 1, 0]
    assert timer.remaining == 0
    assert not timer.running


def test_restart_resets_to_full_duration(fast_sleep: None) -> None:
    ticks: list[int] = []

    async def run() -> None:
        timer = RoundTimer(duration=5, on_tick=ticks.append)
        timer.start()
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        timer.start()
        assert timer.remaining == 5
        timer.stop()

    asyncio.run(run())

    assert ticks[0] == 5
    assert ticks[-1] == 5
    assert ticks.count(5) == 2


def test_stop_halts_ticking(fast_sleep: None) -> None:
    ticks: list[int] = []

    async def run() -> RoundTimer:
        timer = RoundTimer(duration=10, on_tick=ticks.append)
        timer.start()
        timer.stop()
        for _ in range(5):
            await asyncio.sleep(0)
        return timer

    timer = asyncio.run(run())

    assert ticks == [10]
    assert not timer.running


@pytest.mark.parametrize(("seconds", "expected"), [(180, "03:00"), (65, "01:05"), (0, "00:00"), (-4, "00:00")])
def test_format_remaining(seconds: int, expected: str) -> None:
    assert RoundTimer.format_remaining(seconds) == expected
