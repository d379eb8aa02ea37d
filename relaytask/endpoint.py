"""
Endpoints bridge callback-driven completion sources into a task chain.

An endpoint body runs when a Task composes it, registers the outside work,
and concludes with :meth:`AsyncEndpoint.success` or :meth:`AsyncEndpoint.fail`.
The two conclusions are routed differently:

- success writes the value into the composing Task's slot and does *not*
  resume it. The composer stays parked until the completion source resumes
  its handle directly (usually through a ``CompletionToken``).
- failure writes an ``EndpointFailed`` error into the composer's slot and
  hands control straight back to it, so the composer can run a fallback.

Typical use::

    @endpoint
    def submit_read(device, offset):
        composer = yield ComposerHandle()
        device.read(offset, callback=CompletionToken(composer).complete)
        return AsyncEndpoint.success(None)
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from functools import wraps
from typing import Any, Generic, ParamSpec, TypeVar

from relaytask.config import current_config
from relaytask.errors import CompositionError, EndpointFailed, IncompleteEndpointError
from relaytask.frame import Awaiter, Frame, Promise
from relaytask.handle import NULL_HANDLE, ExecutionHandle
from relaytask.result import Err, Ok, Result
from relaytask.task import TaskPromise, callable_name, build_generator

logger = logging.getLogger(__name__)

P = ParamSpec("P")
R = TypeVar("R")


@dataclass(frozen=True)
class Commit(Generic[R]):
    """How an endpoint body concluded."""

    success: bool
    value: R


class EndpointPromise(Promise):
    def __init__(self, name: str) -> None:
        self.name = name
        self.caller = NULL_HANDLE
        self.composer: TaskPromise | None = None
        self.outcome: bool | None = None
        self._wake_pending = False
        self._lock = threading.Lock()

    def check_start(self, frame: Frame) -> None:
        if not self.caller:
            raise CompositionError(f"Endpoint {self.name!r} must be composed by a task before it runs")

    def request_wake(self) -> bool:
        """Ask to resume the composer; before completion the wake is deferred."""
        with self._lock:
            if self.outcome is not None:
                return True
            self._wake_pending = True
            return False

    def on_complete(self, frame: Frame, result: Result[Any]) -> ExecutionHandle:
        caller = self.caller
        composer = self.composer
        assert composer is not None
        if isinstance(result, Ok) and isinstance(result.value, Commit) and result.value.success:
            # A completion source may already have written the real result.
            composer.slot.offer(Ok(result.value.value))
            with self._lock:
                self.outcome = True
                woken = self._wake_pending
            if woken:
                logger.debug("endpoint %s was signalled while running; resuming composer", self.name)
                return caller
            return NULL_HANDLE

        if isinstance(result, Ok) and isinstance(result.value, Commit):
            error: BaseException = EndpointFailed(result.value.value, self.name)
        elif isinstance(result, Ok):
            error = TypeError(
                f"Endpoint {self.name!r} must return AsyncEndpoint.success() or "
                f"AsyncEndpoint.fail(), got {type(result.value).__name__}"
            )
        else:
            error = result.error
        composer.slot.deliver(Err(error))
        with self._lock:
            self.outcome = False
        return caller


class EndpointAwaiter(Awaiter):
    def __init__(self, endpoint: AsyncEndpoint[Any]) -> None:
        self.endpoint = endpoint

    def suspend(self, handle: ExecutionHandle) -> ExecutionHandle:
        frame = handle._frame
        assert frame is not None
        if not isinstance(frame.promise, TaskPromise):
            raise CompositionError(
                f"Endpoint {self.endpoint.name!r} can only be composed by a task, not by {frame.name!r}"
            )
        promise = self.endpoint._promise
        if promise.caller:
            raise CompositionError(f"Endpoint {self.endpoint.name!r} is already composed")
        promise.caller = handle
        promise.composer = frame.promise
        return self.endpoint.handle

    def can_resume(self) -> bool:
        return self.endpoint._promise.request_wake()

    def resume_value(self) -> Result[Any]:
        composer = self.endpoint._promise.composer
        assert composer is not None
        return composer.slot.take()


class AsyncEndpoint(Generic[R]):
    """Owning wrapper around an endpoint frame. Starts when composed."""

    def __init__(self, frame: Frame, promise: EndpointPromise) -> None:
        self._frame = frame
        self._promise = promise
        self._closed = False

    @classmethod
    def create(cls, fn: Callable[..., Any], /, *args: Any, **kwargs: Any) -> AsyncEndpoint[Any]:
        name = callable_name(fn)
        promise = EndpointPromise(name)
        frame = Frame(build_generator(fn, args, kwargs), promise, name)
        return cls(frame, promise)

    @staticmethod
    def success(value: R) -> Commit[R]:
        return Commit(True, value)

    @staticmethod
    def fail(value: R) -> Commit[R]:
        return Commit(False, value)

    @property
    def name(self) -> str:
        return self._frame.name

    @property
    def handle(self) -> ExecutionHandle:
        return self._frame.handle

    def completed(self) -> bool:
        return self._promise.outcome is not None

    def succeeded(self) -> bool:
        if self._promise.outcome is None:
            raise IncompleteEndpointError(self.name, "read the outcome of")
        return self._promise.outcome

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        completed = self.completed()
        self._frame.destroy()
        if not completed:
            logger.error("endpoint %s was closed before it completed", self.name)
            if current_config().strict_endpoint_close:
                raise IncompleteEndpointError(self.name, "close")

    def awaiter(self) -> EndpointAwaiter:
        return EndpointAwaiter(self)

    def __enter__(self) -> AsyncEndpoint[R]:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"AsyncEndpoint({self.name!r}, state={self._frame.state.value})"


class EndpointFunction(Generic[P, R]):
    """Callable produced by :func:`endpoint`; each call creates an un-started endpoint."""

    def __init__(self, func: Callable[P, Any]) -> None:
        self.original_func = func
        wraps(func)(self)

    def __call__(self, *args: P.args, **kwargs: P.kwargs) -> AsyncEndpoint[R]:
        return AsyncEndpoint.create(self.original_func, *args, **kwargs)


def endpoint(func: Callable[P, Any]) -> EndpointFunction[P, Any]:
    return EndpointFunction(func)


__all__ = [
    "AsyncEndpoint",
    "Commit",
    "EndpointAwaiter",
    "EndpointFunction",
    "EndpointPromise",
    "endpoint",
]
