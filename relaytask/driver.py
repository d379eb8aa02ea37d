"""
Minimal driver for root tasks.

Creating a Task already runs it to its first suspension, so a driver only
needs to wait for the completion signal and collect the outcome.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, TypeVar

from relaytask.result import Result
from relaytask.task import Task

logger = logging.getLogger(__name__)

R = TypeVar("R")


def block_on(task: Task[R], timeout: float | None = None) -> Result[R]:
    """Block the calling thread until ``task`` completes and consume its result."""
    if not task.completed():
        logger.debug("waiting for %s", task.name)
    if not task.wait(timeout):
        raise TimeoutError(f"Task {task.name!r} did not complete within {timeout} seconds")
    return task.result()


def run(fn: Callable[..., Any], /, *args: Any, **kwargs: Any) -> Result[Any]:
    """Create a root task for ``fn``, wait for it, close it, and return its outcome."""
    with Task.create(fn, *args, **kwargs) as root:
        return block_on(root)


__all__ = ["block_on", "run"]
