"""
Pending Result - single-completion handle to an in-flight operation.

Backed by a ``concurrent.futures.Future`` so that it can be completed from a
connector's event loop thread and consumed from any thread: blocking callers
use ``wait()``, asyncio callers simply ``await`` it.
"""
from __future__ import annotations

import asyncio
from concurrent.futures import Future, InvalidStateError
from typing import Any, Callable, Generator, Generic, Optional, Tuple, Type, TypeVar, Union

T = TypeVar("T")
U = TypeVar("U")

ErrorTypes = Union[Type[BaseException], Tuple[Type[BaseException], ...]]


class PendingResult(Generic[T]):
    """
    Eventual outcome of one operation.

    Completes exactly once, either with a value or with an error. Attempts to
    complete it a second time raise ``InvalidStateError``.
    """

    def __init__(self, future: Optional[Future] = None):
        self._future: Future = future if future is not None else Future()

    @classmethod
    def completed(cls, value: T) -> "PendingResult[T]":
        pending: PendingResult[T] = cls()
        pending.set_result(value)
        return pending

    @classmethod
    def failed(cls, error: BaseException) -> "PendingResult[Any]":
        pending: PendingResult[Any] = cls()
        pending.set_exception(error)
        return pending

    @property
    def future(self) -> Future:
        """Underlying concurrent future"""
        return self._future

    def set_result(self, value: T) -> None:
        self._future.set_result(value)

    def set_exception(self, error: BaseException) -> None:
        self._future.set_exception(error)

    def done(self) -> bool:
        return self._future.done()

    def cancel(self) -> bool:
        """
        Best-effort cancellation. A request already handed to the server is not
        recalled; only the local handle stops waiting.
        """
        return self._future.cancel()

    def cancelled(self) -> bool:
        return self._future.cancelled()

    def wait(self, timeout: Optional[float] = None) -> T:
        """
        Block until the result is available or ``timeout`` seconds elapse.

        Raises:
            TimeoutError: If the timer fires first; the operation keeps running
            Exception: The failure the operation completed with
        """
        return self._future.result(timeout=timeout)

    def add_done_callback(self, callback: Callable[["PendingResult[T]"], Any]) -> None:
        """Run ``callback(self)`` once completed, immediately if already done"""
        self._future.add_done_callback(lambda _: callback(self))

    def map(self, fn: Callable[[T], U]) -> "PendingResult[U]":
        """Transform the value; errors raised by ``fn`` fail the new result"""
        return self.then(on_value=fn)

    def recover(self, error_types: ErrorTypes, fn: Callable[[BaseException], T]) -> "PendingResult[T]":
        """Turn matching failures into a value, other failures pass through"""
        def on_error(error: BaseException) -> T:
            if isinstance(error, error_types):
                return fn(error)
            raise error

        return self.then(on_error=on_error)

    def map_failure(self, fn: Callable[[BaseException], BaseException]) -> "PendingResult[T]":
        """Replace the failure with ``fn(error)``, values pass through"""
        def on_error(error: BaseException) -> T:
            raise fn(error)

        return self.then(on_error=on_error)

    def then(
        self,
        on_value: Optional[Callable[[Any], Any]] = None,
        on_error: Optional[Callable[[BaseException], Any]] = None,
    ) -> "PendingResult[Any]":
        """
        Chain handlers for the value and for the failure.

        The returned result completes only after the relevant handler ran; a
        handler that raises fails it. Cancelling the returned result cancels
        this one as well.
        """
        chained: PendingResult[Any] = PendingResult()

        def _complete(source: Future) -> None:
            if source.cancelled():
                chained.cancel()
                return
            error = source.exception()
            try:
                if error is None:
                    value = source.result()
                    result = on_value(value) if on_value else value
                elif on_error is not None:
                    result = on_error(error)
                else:
                    _settle(chained, error=error)
                    return
            except BaseException as exc:  # forwarded, never swallowed
                _settle(chained, error=exc)
                return
            _settle(chained, value=result)

        def _propagate_cancel(target: Future) -> None:
            if target.cancelled():
                self._future.cancel()

        self._future.add_done_callback(_complete)
        chained._future.add_done_callback(_propagate_cancel)
        return chained

    def __await__(self) -> Generator[Any, None, T]:
        return asyncio.wrap_future(self._future).__await__()

    def __repr__(self) -> str:
        if not self._future.done():
            state = "pending"
        elif self._future.cancelled():
            state = "cancelled"
        elif self._future.exception() is not None:
            state = f"failed: {self._future.exception()!r}"
        else:
            state = "completed"
        return f"PendingResult({state})"


def _settle(pending: PendingResult, value: Any = None, error: Optional[BaseException] = None) -> None:
    # a cancelled chained result has already reached its terminal state
    try:
        if error is not None:
            pending.set_exception(error)
        else:
            pending.set_result(value)
    except InvalidStateError:
        if not pending.cancelled():
            raise
