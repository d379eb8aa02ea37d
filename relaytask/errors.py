from __future__ import annotations

from typing import Any


class RelayTaskError(Exception):
    """Base class for every error raised by relaytask itself."""


class UsageError(RelayTaskError):
    """A precondition of the task protocol was violated by the caller."""


class IncompleteTaskError(UsageError):
    """Raised when a task's result is read before the task completed."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Task {name!r} has not completed; check completed() before result()")


class ResultAlreadyTakenError(UsageError):
    """Raised when a result slot is consumed a second time."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Result of {name!r} was already taken")


class SlotSealedError(UsageError):
    """Raised when writing into a slot that holds a final result."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Result slot of {name!r} is sealed; the task already completed")


class IncompleteEndpointError(UsageError):
    """Raised when an endpoint is closed or inspected before it completed."""

    def __init__(self, name: str, action: str) -> None:
        self.name = name
        self.action = action
        super().__init__(f"Cannot {action} endpoint {name!r} before it completed")


class CompositionError(UsageError):
    """Raised when a computation is composed in a way the protocol forbids."""


class ConcurrentResumeError(UsageError):
    """Raised when a frame is resumed while it is already running."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f"Frame {name!r} is already running; a handle must be resumed by one entity at a time"
        )


class TokenAlreadyUsedError(UsageError):
    """Raised when a completion token is resolved more than once."""

    def __init__(self, context: Any) -> None:
        self.context = context
        super().__init__(f"Completion token (context={context!r}) was already used")


class EndpointFailed(RelayTaskError):
    """The failure value an endpoint concluded with via ``AsyncEndpoint.fail``."""

    def __init__(self, value: Any, endpoint: str = "") -> None:
        self.value = value
        self.endpoint = endpoint
        where = f" {endpoint!r}" if endpoint else ""
        super().__init__(f"Endpoint{where} failed with {value!r}")


__all__ = [
    "CompositionError",
    "ConcurrentResumeError",
    "EndpointFailed",
    "IncompleteEndpointError",
    "IncompleteTaskError",
    "RelayTaskError",
    "ResultAlreadyTakenError",
    "SlotSealedError",
    "TokenAlreadyUsedError",
    "UsageError",
]
