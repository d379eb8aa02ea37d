"""
Shared fixtures for relaytask tests.

External completion sources are modelled as plain threads gated by events, so
each test decides exactly when the "callback" fires.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterator
from typing import Any

import pytest

from relaytask.config import configure

JOIN_TIMEOUT = 5.0


class ExternalSource:
    """Runs callbacks on dedicated threads once released."""

    def __init__(self) -> None:
        self.release = threading.Event()
        self.threads: list[threading.Thread] = []
        self.errors: list[BaseException] = []

    def submit(self, callback: Callable[[], Any], *, gated: bool = True) -> threading.Thread:
        def _run() -> None:
            if gated:
                self.release.wait(JOIN_TIMEOUT)
            try:
                callback()
            except BaseException as exc:
                self.errors.append(exc)

        thread = threading.Thread(target=_run, name=f"external-{len(self.threads)}")
        self.threads.append(thread)
        thread.start()
        return thread

    def join(self) -> None:
        for thread in self.threads:
            thread.join(JOIN_TIMEOUT)
            assert not thread.is_alive(), f"{thread.name} did not finish"
        if self.errors:
            raise self.errors[0]

    def fire(self) -> None:
        self.release.set()
        self.join()


@pytest.fixture
def external() -> Iterator[ExternalSource]:
    source = ExternalSource()
    yield source
    source.release.set()
    for thread in source.threads:
        thread.join(JOIN_TIMEOUT)


@pytest.fixture
def lenient_endpoint_close() -> Iterator[None]:
    previous = configure(strict_endpoint_close=False)
    yield
    configure(strict_endpoint_close=previous.strict_endpoint_close)
