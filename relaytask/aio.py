"""
asyncio integration.

``wait_async`` lets a coroutine wait for a root Task without blocking the
event loop. ``resolve_with_future`` turns an asyncio or ``concurrent.futures``
future into the completion source of a ``CompletionToken``::

    @endpoint
    def fetch(loop, url):
        composer = yield ComposerHandle()
        future = asyncio.run_coroutine_threadsafe(download(url), loop)
        resolve_with_future(CompletionToken(composer, context=url), future)
        return AsyncEndpoint.success(None)
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
from typing import Any, TypeVar

from relaytask.completion import CompletionToken
from relaytask.result import Result
from relaytask.task import Task

logger = logging.getLogger(__name__)

R = TypeVar("R")


async def wait_async(task: Task[R], timeout: float | None = None) -> Result[R]:
    """Await completion of ``task`` and consume its result.

    Raises ``asyncio.TimeoutError`` if ``timeout`` elapses first; the task
    keeps running and its result can still be read later.
    """
    loop = asyncio.get_running_loop()
    signal: asyncio.Future[None] = loop.create_future()

    def _set() -> None:
        if not signal.done():
            signal.set_result(None)

    def _on_done() -> None:
        if loop.is_closed():
            logger.warning("task %s completed after its event loop closed", task.name)
            return
        loop.call_soon_threadsafe(_set)

    task.add_done_callback(_on_done)
    await asyncio.wait_for(asyncio.shield(signal), timeout)
    return task.result()


def resolve_with_future(
    token: CompletionToken[Any],
    future: asyncio.Future[Any] | concurrent.futures.Future[Any],
) -> None:
    """Resolve ``token`` with the outcome of ``future`` once it is done.

    A cancelled future fails the token with ``CancelledError``. The token is
    resolved on whichever thread runs the future's done callbacks.
    """

    def _done(fut: Any) -> None:
        if fut.cancelled():
            if isinstance(fut, asyncio.Future):
                token.fail(asyncio.CancelledError())
            else:
                token.fail(concurrent.futures.CancelledError())
            return
        error = fut.exception()
        if error is not None:
            token.fail(error)
        else:
            token.complete(fut.result())

    future.add_done_callback(_done)


__all__ = ["resolve_with_future", "wait_async"]
