from __future__ import annotations

import threading
from typing import Generic, TypeVar

from relaytask.errors import ResultAlreadyTakenError, SlotSealedError
from relaytask.result import Result

R = TypeVar("R")


class ResultSlot(Generic[R]):
    """Holds at most one tagged outcome for a task frame.

    Before the owning task completes the slot is an inbox: endpoints and
    external completion sources deliver into it, the latest delivery wins, and
    the frame consumes it when resumed. The task's own final result seals the
    slot; after that it can be read once and never written again.
    """

    __slots__ = ("_name", "_result", "_sealed", "_taken", "_lock")

    def __init__(self, name: str = "") -> None:
        self._name = name
        self._result: Result[R] | None = None
        self._sealed = False
        self._taken = False
        self._lock = threading.Lock()

    @property
    def filled(self) -> bool:
        return self._result is not None

    @property
    def sealed(self) -> bool:
        return self._sealed

    def deliver(self, result: Result[R]) -> None:
        with self._lock:
            if self._sealed:
                raise SlotSealedError(self._name)
            self._result = result

    def offer(self, result: Result[R]) -> bool:
        """Deliver only if nothing is waiting in the slot."""
        with self._lock:
            if self._sealed:
                raise SlotSealedError(self._name)
            if self._result is not None:
                return False
            self._result = result
            return True

    def seal(self, result: Result[R]) -> None:
        with self._lock:
            if self._sealed:
                raise SlotSealedError(self._name)
            self._result = result
            self._sealed = True

    def take(self) -> Result[R]:
        with self._lock:
            if self._result is None:
                if self._taken:
                    raise ResultAlreadyTakenError(self._name)
                raise LookupError(f"Result slot of {self._name!r} is empty")
            result, self._result = self._result, None
            if self._sealed:
                self._taken = True
            return result

    def take_pending(self) -> Result[R] | None:
        """Consume a delivery that arrived before completion, if any."""
        with self._lock:
            if self._sealed or self._result is None:
                return None
            result, self._result = self._result, None
            return result

    def __repr__(self) -> str:
        state = "sealed" if self._sealed else "open"
        return f"ResultSlot({self._name!r}, {state}, filled={self.filled})"


__all__ = ["ResultSlot"]
