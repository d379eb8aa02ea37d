from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from relaytask.config import current_config
from relaytask.errors import UsageError
from relaytask.result import Result

if TYPE_CHECKING:
    from relaytask.frame import Frame

logger = logging.getLogger(__name__)


@dataclass(frozen=True, repr=False)
class ExecutionHandle:
    """Non-owning reference to one computation frame.

    Handles compare equal when they refer to the same frame and can be copied
    or shared freely; they can resume a frame or deliver into it, never free
    it. ``NULL_HANDLE`` refers to nothing and is falsy.
    """

    _frame: Frame | None = None

    @property
    def address(self) -> int:
        return id(self._frame) if self._frame is not None else 0

    def done(self) -> bool:
        return self._frame is not None and self._frame.finished

    def resume(self) -> None:
        """Run this frame, and every frame it hands control to, until control returns here."""
        if self._frame is None:
            return
        run_transfers(self)

    def deliver(self, result: Result[Any]) -> None:
        if self._frame is None:
            raise UsageError("Cannot deliver a result through the null handle")
        self._frame.promise.deliver(result)

    def __bool__(self) -> bool:
        return self._frame is not None

    def __repr__(self) -> str:
        if self._frame is None:
            return "ExecutionHandle(null)"
        return f"ExecutionHandle({self._frame.name!r}, 0x{self.address:x})"


NULL_HANDLE = ExecutionHandle()


def run_transfers(start: ExecutionHandle) -> None:
    """Trampoline for symmetric control transfer.

    Each step runs one frame until it parks or completes and names the frame
    that runs next. A null result means control goes back to the caller of
    this function, so chained completions never grow the Python stack.
    """
    trace = current_config().trace_transfers
    current = start
    while current:
        frame = current._frame
        assert frame is not None
        target = frame.step()
        if trace:
            logger.debug("frame %s handed control to %r", frame.name, target)
        current = target


__all__ = ["ExecutionHandle", "NULL_HANDLE", "run_transfers"]
