"""Tests for async_utils.run_sync."""

import threading

import pytest

from inspection_sync.core.async_utils import run_sync


def _sync_add(a: int, b: int) -> int:
    return a + b


async def test_run_sync_calls_function():
    result = await run_sync(_sync_add, 3, 4)
    assert result == 7


async def test_run_sync_passes_kwargs():
    def _kw_func(*, name: str) -> str:
        return f"hello {name}"

    result = await run_sync(_kw_func, name="world")
    assert result == "hello world"


async def test_run_sync_uses_worker_thread():
    main = threading.get_ident()
    worker = await run_sync(threading.get_ident)
    assert worker != main


async def test_run_sync_propagates_exceptions():
    def _fail():
        raise ValueError("nope")

    with pytest.raises(ValueError, match="nope"):
        await run_sync(_fail)
