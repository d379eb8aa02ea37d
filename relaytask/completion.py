"""
Completion tokens: the message a callback sends back into a task chain.

A token wraps a captured handle. Resolving it writes the outcome into the
target frame and then resumes that frame, in that order, exactly once, from
whichever thread the completion source runs on::

    @task
    def read_block(device, lba):
        me = yield CurrentHandle()
        device.submit(lba, on_done=CompletionToken(me, context=lba).complete)
        return (yield WaitForResume())
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Generic, TypeVar

from relaytask.errors import TokenAlreadyUsedError, UsageError
from relaytask.handle import ExecutionHandle
from relaytask.result import Err, Ok, Result

logger = logging.getLogger(__name__)

R = TypeVar("R")


class CompletionToken(Generic[R]):
    def __init__(self, handle: ExecutionHandle, context: Any = None) -> None:
        if not handle:
            raise UsageError("A completion token needs a non-null handle")
        self._handle = handle
        self.context = context
        self._used = False
        self._lock = threading.Lock()

    @property
    def handle(self) -> ExecutionHandle:
        return self._handle

    @property
    def used(self) -> bool:
        return self._used

    def resolve(self, result: Result[R]) -> None:
        with self._lock:
            if self._used:
                raise TokenAlreadyUsedError(self.context)
            self._used = True
        self._handle.deliver(result)
        logger.debug("completion token %r resolved on %s", self.context, threading.current_thread().name)
        self._handle.resume()

    def complete(self, value: R) -> None:
        self.resolve(Ok(value))

    def fail(self, error: BaseException) -> None:
        if not isinstance(error, BaseException):
            raise TypeError(f"error must be BaseException, got {type(error).__name__}")
        self.resolve(Err(error))

    def __repr__(self) -> str:
        state = "used" if self._used else "pending"
        return f"CompletionToken({self._handle!r}, context={self.context!r}, {state})"


__all__ = ["CompletionToken"]
