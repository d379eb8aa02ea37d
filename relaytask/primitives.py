"""
Primitive awaiters a computation can yield besides Tasks and endpoints.

``CurrentHandle`` and ``ComposerHandle`` never suspend: the frame continues
synchronously with the requested handle. ``WaitForResume`` is the explicit
point where a frame parks until something outside the chain resumes it.
"""

from __future__ import annotations

from typing import Any

from relaytask.frame import Awaiter, Frame, as_awaiter
from relaytask.handle import NULL_HANDLE, ExecutionHandle
from relaytask.result import Ok, Result


class CurrentHandle(Awaiter):
    """Evaluates to the running frame's own handle."""

    def __init__(self) -> None:
        self._handle = NULL_HANDLE

    def suspend(self, handle: ExecutionHandle) -> ExecutionHandle:
        self._handle = handle
        return handle

    def resume_value(self) -> Result[ExecutionHandle]:
        return Ok(self._handle)


class ComposerHandle(Awaiter):
    """Evaluates to the handle of whoever composed the running frame (may be null)."""

    def __init__(self) -> None:
        self._caller = NULL_HANDLE

    def suspend(self, handle: ExecutionHandle) -> ExecutionHandle:
        frame = handle._frame
        assert frame is not None
        self._caller = frame.promise.caller
        return handle

    def resume_value(self) -> Result[ExecutionHandle]:
        return Ok(self._caller)


class WaitForResume(Awaiter):
    """Park until the frame's handle is resumed from outside.

    Evaluates to whatever was delivered into the frame before the resume
    (raising it if it is an ``Err``), or ``None`` for a bare resume. A
    completion that arrived before the frame got here is not lost: the frame
    continues without parking.
    """

    accepts_early_wake = True

    def __init__(self) -> None:
        self._frame: Frame | None = None

    def attach(self, handle: ExecutionHandle) -> None:
        self._frame = handle._frame

    def suspend(self, handle: ExecutionHandle) -> ExecutionHandle:
        return NULL_HANDLE

    def resume_value(self) -> Result[Any]:
        assert self._frame is not None
        pending = self._frame.promise.pending_delivery()
        if pending is None:
            return Ok(None)
        return pending


class Safe(Awaiter):
    """Compose ``target`` and evaluate to its ``Result`` instead of raising."""

    def __init__(self, target: Any) -> None:
        self._inner = as_awaiter(target)
        self.accepts_early_wake = self._inner.accepts_early_wake

    def is_ready(self) -> bool:
        return self._inner.is_ready()

    def attach(self, handle: ExecutionHandle) -> None:
        self._inner.attach(handle)

    def suspend(self, handle: ExecutionHandle) -> ExecutionHandle:
        return self._inner.suspend(handle)

    def can_resume(self) -> bool:
        return self._inner.can_resume()

    def resume_value(self) -> Result[Result[Any]]:
        return Ok(self._inner.resume_value())


__all__ = [
    "ComposerHandle",
    "CurrentHandle",
    "Safe",
    "WaitForResume",
]
