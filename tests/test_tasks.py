"""Tests for the cancelling fan-out helper."""

import asyncio

import pytest

from vendaudit.utils.tasks import gather_or_cancel


def test_results_keep_input_order():
    async def value(n: int, delay: float) -> int:
        await asyncio.sleep(delay)
        return n

    result = asyncio.run(gather_or_cancel([value(1, 0.02), value(2, 0), value(3, 0.01)]))
    assert result == [1, 2, 3]


def test_empty_input():
    assert asyncio.run(gather_or_cancel([])) == []


def test_failure_cancels_and_awaits_siblings():
    finished = []
    cancelled = []

    async def slow(name: str) -> str:
        try:
            await asyncio.sleep(30)
        except asyncio.CancelledError:
            cancelled.append(name)
            raise
        finished.append(name)
        return name

    async def boom() -> str:
        await asyncio.sleep(0)
        raise RuntimeError("boom")

    async def run():
        with pytest.raises(RuntimeError, match="boom"):
            await gather_or_cancel([slow("x"), boom(), slow("y")])
        return [t for t in asyncio.all_tasks() if t is not asyncio.current_task()]

    leftovers = asyncio.run(run())
    assert leftovers == []
    assert sorted(cancelled) == ["x", "y"]
    assert finished == []
