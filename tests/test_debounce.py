import asyncio

from paperreview.forms.debounce import Debouncer


async def test_only_last_call_in_window_runs():
    calls = []

    async def record(value):
        calls.append(value)
        return value

    debounced = Debouncer(record, wait=0.03)
    first = debounced("a")
    second = debounced("b")

    assert await second == "b"
    assert first.cancelled()
    assert calls == ["b"]


async def test_running_call_is_not_cancelled():
    calls = []

    async def slow(value):
        await asyncio.sleep(0.03)
        calls.append(value)
        return value

    debounced = Debouncer(slow, wait=0.01)
    first = debounced("a")
    await asyncio.sleep(0.02)  # past the quiet period, now inside slow()
    second = debounced("b")

    assert await first == "a"
    assert await second == "b"
    assert calls == ["a", "b"]


async def test_cancel_drops_waiting_call():
    async def record(value):
        return value

    debounced = Debouncer(record, wait=0.05)
    task = debounced("a")

    debounced.cancel()
    await asyncio.sleep(0.01)

    assert task.cancelled()
