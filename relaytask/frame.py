from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Generator
from enum import Enum
from typing import Any

from relaytask.errors import CompositionError, ConcurrentResumeError
from relaytask.handle import NULL_HANDLE, ExecutionHandle
from relaytask.result import Err, Ok, Result

logger = logging.getLogger(__name__)

_frame_id_counter = itertools.count(1)


class FrameState(Enum):
    CREATED = "created"
    RUNNING = "running"
    SUSPENDED = "suspended"
    COMPLETED = "completed"
    DESTROYED = "destroyed"


class Awaiter:
    """What a frame parks on when it yields something composable.

    ``suspend`` receives the parking frame's handle and returns the handle that
    runs next: another frame, ``NULL_HANDLE`` to give control back to the
    frame's resumer, or the same handle to continue without suspending.

    An awaiter with ``accepts_early_wake`` set consumes a resume that arrived
    while the frame was still running: the frame continues instead of parking.
    """

    accepts_early_wake = False

    def is_ready(self) -> bool:
        return False

    def attach(self, handle: ExecutionHandle) -> None:
        """Called before the frame becomes resumable on this awaiter."""
        return None

    def suspend(self, handle: ExecutionHandle) -> ExecutionHandle:
        raise NotImplementedError

    def can_resume(self) -> bool:
        return True

    def resume_value(self) -> Result[Any]:
        raise NotImplementedError


class Promise:
    """Per-kind completion behaviour attached to a frame."""

    caller: ExecutionHandle = NULL_HANDLE

    def check_start(self, frame: Frame) -> None:
        return None

    def deliver(self, result: Result[Any]) -> None:
        raise CompositionError(f"{type(self).__name__} frames do not accept deliveries")

    def has_pending_delivery(self) -> bool:
        return False

    def pending_delivery(self) -> Result[Any] | None:
        return None

    def on_complete(self, frame: Frame, result: Result[Any]) -> ExecutionHandle:
        raise NotImplementedError


def as_awaiter(obj: Any) -> Awaiter:
    if isinstance(obj, Awaiter):
        return obj
    awaiter = getattr(obj, "awaiter", None)
    if callable(awaiter):
        result = awaiter()
        if isinstance(result, Awaiter):
            return result
    raise TypeError(
        f"Cannot compose {type(obj).__name__}; yield a Task, an AsyncEndpoint or a primitive"
    )


def _resume_value(awaiter: Awaiter) -> Result[Any]:
    try:
        return awaiter.resume_value()
    except Exception as exc:
        return Err(exc)


class Frame:
    """Explicit state machine around one computation's generator."""

    def __init__(self, generator: Generator[Any, Any, Any], promise: Promise, name: str) -> None:
        self.frame_id = next(_frame_id_counter)
        self.name = name
        self.generator = generator
        self.promise = promise
        self.state = FrameState.CREATED
        self.awaiting: Awaiter | None = None
        self.handle = ExecutionHandle(self)
        # Guards state changes between a resumer and the parking thread.
        self._state_lock = threading.Lock()
        self._wake_pending = False

    @property
    def finished(self) -> bool:
        return self.state in (FrameState.COMPLETED, FrameState.DESTROYED)

    def step(self) -> ExecutionHandle:
        """Run until this frame parks or completes; return the handle to run next."""
        with self._state_lock:
            state = self.state
            if state is FrameState.COMPLETED:
                logger.debug("resume of completed frame %s ignored", self.name)
                return NULL_HANDLE
            if state is FrameState.DESTROYED:
                logger.warning("resume of destroyed frame %s ignored", self.name)
                return NULL_HANDLE
            if state is FrameState.RUNNING:
                if not self.promise.has_pending_delivery():
                    raise ConcurrentResumeError(self.name)
                # Delivered before the frame parked: honoured at the next park point.
                self._wake_pending = True
                logger.debug("frame %s resumed while running; wake deferred", self.name)
                return NULL_HANDLE

            if state is FrameState.CREATED:
                self.promise.check_start(self)
                awaiter = None
            else:
                awaiter = self.awaiting
                assert awaiter is not None
                if not awaiter.can_resume():
                    logger.debug("frame %s is parked on an unfinished computation; resume ignored", self.name)
                    return NULL_HANDLE
                self.awaiting = None
            self.state = FrameState.RUNNING

        outcome: Result[Any] = Ok(None) if awaiter is None else _resume_value(awaiter)
        return self._advance(outcome)

    def _advance(self, outcome: Result[Any]) -> ExecutionHandle:
        while True:
            try:
                if isinstance(outcome, Err):
                    yielded = self.generator.throw(outcome.error)
                else:
                    yielded = self.generator.send(outcome.value)
            except StopIteration as stop:
                return self._complete(Ok(stop.value))
            except Exception as exc:
                return self._complete(Err(exc))

            try:
                awaiter = as_awaiter(yielded)
                if awaiter.is_ready():
                    outcome = _resume_value(awaiter)
                    continue
                awaiter.attach(self.handle)
                if self._park(awaiter):
                    target = awaiter.suspend(self.handle)
                else:
                    target = self.handle
            except Exception as exc:
                with self._state_lock:
                    self.awaiting = None
                    self.state = FrameState.RUNNING
                outcome = Err(exc)
                continue

            if target == self.handle:
                with self._state_lock:
                    self.awaiting = None
                    self.state = FrameState.RUNNING
                outcome = _resume_value(awaiter)
                continue
            return target

    def _park(self, awaiter: Awaiter) -> bool:
        """Publish the frame as suspended on ``awaiter``; False to continue instead."""
        with self._state_lock:
            if self._wake_pending:
                self._wake_pending = False
                if awaiter.accepts_early_wake:
                    return False
                logger.debug("frame %s dropped an early wake while parking on %r", self.name, awaiter)
            self.awaiting = awaiter
            self.state = FrameState.SUSPENDED
            return True

    def _complete(self, result: Result[Any]) -> ExecutionHandle:
        with self._state_lock:
            self.state = FrameState.COMPLETED
            self.awaiting = None
            self._wake_pending = False
        if isinstance(result, Err):
            logger.debug("frame %s completed with %r", self.name, result.error)
        return self.promise.on_complete(self, result)

    def destroy(self) -> None:
        if self.state is FrameState.DESTROYED:
            return
        self.generator.close()
        self.state = FrameState.DESTROYED

    def __repr__(self) -> str:
        return f"Frame({self.name!r}, id={self.frame_id}, state={self.state.value})"


__all__ = [
    "Awaiter",
    "Frame",
    "FrameState",
    "Promise",
    "as_awaiter",
]
