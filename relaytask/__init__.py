"""relaytask: nestable generator tasks with direct caller hand-off.

Tasks compose by yielding each other; a completing task resumes its composer
directly. Endpoints and completion tokens let callbacks on other threads
resume a specific frame.
"""

from relaytask.aio import resolve_with_future, wait_async
from relaytask.completion import CompletionToken
from relaytask.config import RuntimeConfig, configure, current_config
from relaytask.endpoint import AsyncEndpoint, Commit, endpoint
from relaytask.errors import (
    CompositionError,
    ConcurrentResumeError,
    EndpointFailed,
    IncompleteEndpointError,
    IncompleteTaskError,
    RelayTaskError,
    ResultAlreadyTakenError,
    SlotSealedError,
    TokenAlreadyUsedError,
    UsageError,
)
from relaytask.driver import block_on, run
from relaytask.handle import NULL_HANDLE, ExecutionHandle
from relaytask.primitives import ComposerHandle, CurrentHandle, Safe, WaitForResume
from relaytask.result import Err, Ok, Result
from relaytask.slot import ResultSlot
from relaytask.task import Task, task

__all__ = [
    "AsyncEndpoint",
    "Commit",
    "CompletionToken",
    "ComposerHandle",
    "CompositionError",
    "ConcurrentResumeError",
    "CurrentHandle",
    "EndpointFailed",
    "Err",
    "ExecutionHandle",
    "IncompleteEndpointError",
    "IncompleteTaskError",
    "NULL_HANDLE",
    "Ok",
    "RelayTaskError",
    "Result",
    "ResultAlreadyTakenError",
    "ResultSlot",
    "RuntimeConfig",
    "Safe",
    "SlotSealedError",
    "Task",
    "TokenAlreadyUsedError",
    "UsageError",
    "WaitForResume",
    "block_on",
    "configure",
    "current_config",
    "endpoint",
    "resolve_with_future",
    "run",
    "task",
    "wait_async",
]
