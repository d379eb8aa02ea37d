"""
Completion propagation through nested task chains.

Each completed frame hands control straight to its composer through the
transfer loop, so every level of a chain resumes at the same Python stack
depth no matter how deep the chain is.
"""

import inspect
import threading

import pytest

from relaytask import CompletionToken, CurrentHandle, Ok, WaitForResume, task


def build_chain(depth, record):
    handles = []

    @task
    def leaf():
        handles.append((yield CurrentHandle()))
        value = yield WaitForResume()
        record.append(("leaf", len(inspect.stack(0)), threading.current_thread().name))
        return value

    @task
    def level(n):
        if n == 0:
            value = yield leaf()
        else:
            value = yield level(n - 1)
        record.append((n, len(inspect.stack(0)), threading.current_thread().name))
        return value + 1

    root = level(depth - 1)
    return root, handles[0]


@pytest.mark.parametrize("depth", [1, 5, 50])
def test_innermost_completion_resumes_every_ancestor_in_order(depth):
    record = []
    root, leaf_handle = build_chain(depth, record)
    assert not root.completed()
    assert record == []

    CompletionToken(leaf_handle).complete(0)

    assert root.completed()
    assert root.result() == Ok(depth)
    assert [entry[0] for entry in record] == ["leaf", *range(depth)]


@pytest.mark.parametrize("depth", [1, 5, 50])
def test_each_hop_runs_at_constant_stack_depth(depth):
    record = []
    _, leaf_handle = build_chain(depth, record)

    CompletionToken(leaf_handle).complete(0)

    assert len(record) == depth + 1
    stack_depths = {entry[1] for entry in record}
    assert len(stack_depths) == 1


def test_chain_completes_on_the_resuming_thread(external):
    record = []
    root, leaf_handle = build_chain(5, record)
    token = CompletionToken(leaf_handle)
    external.submit(lambda: token.complete(10))

    external.fire()

    assert root.wait(5)
    assert root.result() == Ok(15)
    assert {entry[2] for entry in record} == {"external-0"}
