"""
Composable asynchronous values.

A Task wraps a generator-based computation. The computation starts as soon as
the Task is created and runs until it yields something it composes::

    @task
    def fetch_total(order_id: int):
        items = yield load_items(order_id)      # another Task
        return sum(item.price for item in items)

When a composed Task completes it hands control straight back to the frame
that composed it. A root Task with no composer returns control to whoever
resumed it last, and its outcome is read with ``completed()`` / ``result()``.
"""

from __future__ import annotations

import inspect
import logging
import threading
from collections.abc import Callable, Generator
from functools import wraps
from typing import Any, Generic, ParamSpec, TypeVar

from relaytask.errors import CompositionError, IncompleteTaskError
from relaytask.frame import Awaiter, Frame, Promise
from relaytask.handle import NULL_HANDLE, ExecutionHandle
from relaytask.result import Result
from relaytask.slot import ResultSlot

logger = logging.getLogger(__name__)

P = ParamSpec("P")
R = TypeVar("R")


def build_generator(fn: Callable[..., Any], args: tuple[Any, ...], kwargs: dict[str, Any]) -> Generator[Any, Any, Any]:
    """Wrap ``fn(*args, **kwargs)`` so that nothing runs until the first step.

    Plain functions complete on their first step with their return value;
    a function that raises completes with that error.
    """
    produced = fn(*args, **kwargs)
    if inspect.isgenerator(produced):
        return (yield from produced)
    return produced


def callable_name(fn: Callable[..., Any]) -> str:
    return getattr(fn, "__qualname__", None) or getattr(fn, "__name__", None) or repr(fn)


class TaskPromise(Promise):
    def __init__(self, name: str) -> None:
        self.name = name
        self.slot: ResultSlot[Any] = ResultSlot(name)
        self.caller = NULL_HANDLE
        self.destroy_requested = False
        self.finished = threading.Event()
        self.done_callbacks: list[Callable[[], None]] = []
        # Orders linking a composer against completion on another thread.
        self.link_lock = threading.Lock()

    def deliver(self, result: Result[Any]) -> None:
        self.slot.deliver(result)

    def has_pending_delivery(self) -> bool:
        return self.slot.filled and not self.slot.sealed

    def pending_delivery(self) -> Result[Any] | None:
        return self.slot.take_pending()

    def link(self, composer: ExecutionHandle) -> bool:
        """Record ``composer`` as the caller; False if the task already completed."""
        with self.link_lock:
            if self.slot.sealed:
                return False
            if self.caller:
                raise CompositionError(f"Task {self.name!r} is already composed by {self.caller!r}")
            self.caller = composer
            return True

    def add_done_callback(self, callback: Callable[[], None]) -> None:
        with self.link_lock:
            if not self.slot.sealed:
                self.done_callbacks.append(callback)
                return
        callback()

    def on_complete(self, frame: Frame, result: Result[Any]) -> ExecutionHandle:
        with self.link_lock:
            self.slot.seal(result)
            caller, self.caller = self.caller, NULL_HANDLE
            destroy = self.destroy_requested
            callbacks, self.done_callbacks = self.done_callbacks, []
        if destroy:
            logger.debug("task %s completed after its owner closed it; destroying frame", frame.name)
            frame.destroy()
        self.finished.set()
        for callback in callbacks:
            callback()
        return caller


class TaskAwaiter(Awaiter):
    def __init__(self, task: Task[Any]) -> None:
        self.task = task

    def is_ready(self) -> bool:
        return self.task.completed()

    def suspend(self, handle: ExecutionHandle) -> ExecutionHandle:
        if self.task._promise.link(handle):
            return NULL_HANDLE
        # Finished between is_ready() and link(): continue without parking.
        return handle

    def can_resume(self) -> bool:
        return self.task.completed()

    def resume_value(self) -> Result[Any]:
        return self.task._promise.slot.take()


class Task(Generic[R]):
    """Owning wrapper around one computation frame."""

    def __init__(self, frame: Frame, promise: TaskPromise) -> None:
        self._frame = frame
        self._promise = promise
        self._closed = False

    @classmethod
    def create(cls, fn: Callable[..., Any], /, *args: Any, **kwargs: Any) -> Task[Any]:
        """Build a Task for ``fn(*args, **kwargs)`` and run it to its first suspension."""
        name = callable_name(fn)
        promise = TaskPromise(name)
        frame = Frame(build_generator(fn, args, kwargs), promise, name)
        task = cls(frame, promise)
        frame.handle.resume()
        return task

    @property
    def name(self) -> str:
        return self._frame.name

    @property
    def handle(self) -> ExecutionHandle:
        return self._frame.handle

    def resume(self) -> None:
        self._frame.handle.resume()

    def completed(self) -> bool:
        return self._promise.slot.sealed

    def result(self) -> Result[R]:
        """Consume the final outcome. Allowed once, and only after completion."""
        if not self.completed():
            raise IncompleteTaskError(self.name)
        return self._promise.slot.take()

    def wait(self, timeout: float | None = None) -> bool:
        return self._promise.finished.wait(timeout)

    def add_done_callback(self, callback: Callable[[], None]) -> None:
        """Call ``callback()`` on the completing thread once the task completes.

        Runs immediately if the task already completed.
        """
        self._promise.add_done_callback(callback)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        promise = self._promise
        with promise.link_lock:
            finished = promise.slot.sealed
            if not finished:
                promise.destroy_requested = True
        if finished:
            self._frame.destroy()

    def awaiter(self) -> TaskAwaiter:
        return TaskAwaiter(self)

    def __enter__(self) -> Task[R]:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"Task({self.name!r}, state={self._frame.state.value})"


class TaskFunction(Generic[P, R]):
    """Callable produced by :func:`task`; each call creates and starts a new Task."""

    def __init__(self, func: Callable[P, Any]) -> None:
        self.original_func = func
        wraps(func)(self)

    def __call__(self, *args: P.args, **kwargs: P.kwargs) -> Task[R]:
        return Task.create(self.original_func, *args, **kwargs)


def task(func: Callable[P, Any]) -> TaskFunction[P, Any]:
    """Turn a generator function into a Task factory."""
    return TaskFunction(func)


__all__ = [
    "Task",
    "TaskAwaiter",
    "TaskFunction",
    "TaskPromise",
    "build_generator",
    "task",
]
