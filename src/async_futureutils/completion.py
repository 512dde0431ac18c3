"""
Completion registration for asynchronous result handles.

Every supported result family gets an adapter that attaches a normalized
continuation. The continuation is called exactly once with ``None`` when the
result succeeds, or with the error when it fails. A cancelled result is
reported as a ``CancelledError`` instance so callers can apply their own
cancellation policy.

Custom result types can be supported with :func:`register_completion_adapter`::

    @register_completion_adapter(MyPromise)
    def _(result, continuation):
        result.on_settled(lambda value, error: continuation(error))
"""

import asyncio
import concurrent.futures
import threading
from functools import singledispatch
from typing import Any, Callable, Optional, Protocol, Type, runtime_checkable

from cassandra.cluster import ResponseFuture

from .exceptions import UnsupportedResultError

Continuation = Callable[[Optional[BaseException]], None]


@runtime_checkable
class SupportsDoneCallback(Protocol):
    """Future-like objects in the style of ``concurrent.futures.Future``."""

    def add_done_callback(self, fn: Callable[[Any], object]) -> None:
        ...

    def exception(self) -> Optional[BaseException]:
        ...


@runtime_checkable
class SupportsCallbacks(Protocol):
    """Future-like objects in the style of the Cassandra driver's ``ResponseFuture``."""

    def add_callbacks(
        self, callback: Callable[..., object], errback: Callable[..., object]
    ) -> None:
        ...


class _OnceContinuation:
    """
    Guard a continuation so it runs at most once.

    The driver reports every fetched page through the same callback.
    """

    def __init__(self, continuation: Continuation):
        self._continuation = continuation
        self._fired = False
        self._lock = threading.Lock()

    def __call__(self, error: Optional[BaseException]) -> None:
        with self._lock:
            if self._fired:
                return
            self._fired = True
        self._continuation(error)


def _done_callback(
    continuation: Continuation, cancelled_error: Type[BaseException]
) -> Callable[[Any], None]:
    """Adapt a continuation to the ``add_done_callback(fn(future))`` convention."""

    def _on_done(future: Any) -> None:
        cancelled = getattr(future, "cancelled", None)
        if cancelled is not None and cancelled():
            continuation(cancelled_error())
        else:
            continuation(future.exception())

    return _on_done


def _add_driver_callbacks(result: Any, continuation: Continuation) -> None:
    result.add_callbacks(
        callback=lambda *args, **kwargs: continuation(None),
        errback=continuation,
    )


@singledispatch
def _register(result: Any, continuation: Continuation) -> None:
    # Structural fallback for result types without a registered adapter
    if isinstance(result, SupportsDoneCallback):
        result.add_done_callback(
            _done_callback(continuation, concurrent.futures.CancelledError)
        )
    elif isinstance(result, SupportsCallbacks):
        _add_driver_callbacks(result, continuation)
    else:
        raise UnsupportedResultError(result)


@_register.register(concurrent.futures.Future)
def _register_concurrent(result: concurrent.futures.Future, continuation: Continuation) -> None:
    # Runs on the completing thread, or right here if the future is already done
    result.add_done_callback(_done_callback(continuation, concurrent.futures.CancelledError))


@_register.register(asyncio.Future)
def _register_asyncio(result: asyncio.Future, continuation: Continuation) -> None:
    callback = _done_callback(continuation, asyncio.CancelledError)
    loop = result.get_loop()

    try:
        running_loop: Optional[asyncio.AbstractEventLoop] = asyncio.get_running_loop()
    except RuntimeError:
        running_loop = None

    if running_loop is loop or not loop.is_running():
        result.add_done_callback(callback)
    elif result.done():
        # A finished future no longer changes, read it from this thread
        callback(result)
    else:
        # asyncio futures are not thread-safe, hand the registration to their loop.
        # Like asyncio.wrap_future, this is lost if the loop is closed before it runs.
        loop.call_soon_threadsafe(result.add_done_callback, callback)


@_register.register(ResponseFuture)
def _register_response_future(result: ResponseFuture, continuation: Continuation) -> None:
    # The driver invokes the callbacks immediately if the response already arrived
    _add_driver_callbacks(result, continuation)


def add_completion_callback(result: Any, continuation: Continuation) -> None:
    """
    Register a one-shot completion continuation on an asynchronous result.

    Args:
        result: Any supported asynchronous result handle.
        continuation: Called once with ``None`` on success or with the error.

    Raises:
        UnsupportedResultError: If ``result`` does not support completion
            registration.
    """
    _register(result, _OnceContinuation(continuation))


def register_completion_adapter(cls: type) -> Callable[[Callable], Callable]:
    """
    Register an adapter teaching the library how to observe ``cls`` results.

    The adapter receives ``(result, continuation)`` and must arrange for
    ``continuation`` to be called with ``None`` or the error once ``result``
    resolves.
    """
    return _register.register(cls)
