"""
Capture orchestration: run one unit of work with stdio interception active.

Both entry points restore the streams and environment before the outcome
(result or exception) becomes visible to the caller. Exceptions are never
wrapped, and output recorded before a failure is discarded.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, TypeVar

from stdiocapture.interceptor import install
from stdiocapture.options import CaptureOptions
from stdiocapture.result import CaptureResult

T = TypeVar("T")

Options = CaptureOptions | Mapping[str, Any] | None


def capture_sync(fn: Callable[[], Any], options: Options = None) -> CaptureResult:
    """
    Capture stdout/stderr written while ``fn()`` runs.

    The capture window closes exactly when fn returns: anything fn schedules
    to run later (loop callbacks, timers) is not recorded.

    Args:
        fn: Zero-argument callable to run on the calling thread.
        options: Capture configuration (see normalize_options).

    Returns:
        CaptureResult with stdout, stderr and combined text.

    Raises:
        Whatever fn raises, unchanged, after the streams are restored.

    Example:
        result = capture_sync(lambda: print("hello"))
        assert result.stdout == "hello\\n"
    """
    with install(options) as interception:
        fn()
    return interception.result()


async def capture_async(
    fn: Callable[[], Awaitable[Any] | Any], options: Options = None
) -> CaptureResult:
    """
    Capture stdout/stderr written until ``fn()`` settles.

    fn may be a coroutine function, return any awaitable, or return a plain
    value (treated as already settled). A synchronous raise from fn takes
    the same path as a failed await.

    Interception stays installed while the awaitable is pending, so output
    from other tasks that run in the meantime is recorded too.

    Args:
        fn: Zero-argument callable.
        options: Capture configuration (see normalize_options).

    Returns:
        CaptureResult with stdout, stderr and combined text.

    Raises:
        Whatever fn raises or its awaitable fails with, unchanged, after the
        streams are restored.

    Example:
        async def work():
            print("hello")

        result = await capture_async(work)
    """
    with install(options) as interception:
        await to_awaitable(fn())
    return interception.result()


def to_awaitable(value: Awaitable[T] | T) -> Awaitable[T]:
    """
    Normalize a possibly-awaitable value into an awaitable.

    Awaitables (coroutines, futures, tasks, anything with ``__await__``)
    are returned as is; any other value is wrapped in a coroutine that
    returns it immediately.
    """
    if inspect.isawaitable(value):
        return value
    return _settled(value)


async def _settled(value: T) -> T:
    return value
