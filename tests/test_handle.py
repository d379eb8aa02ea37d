import copy

import pytest

from relaytask import NULL_HANDLE, ExecutionHandle, Ok, Task, UsageError, WaitForResume, task


@task
def parked():
    return (yield WaitForResume())


class TestExecutionHandle:
    def test_null_handle_is_falsy_and_empty(self):
        assert not NULL_HANDLE
        assert NULL_HANDLE.address == 0
        assert NULL_HANDLE == ExecutionHandle()
        assert not NULL_HANDLE.done()
        assert repr(NULL_HANDLE) == "ExecutionHandle(null)"

    def test_copies_compare_equal_and_hash_alike(self):
        t = parked()
        duplicate = copy.copy(t.handle)

        assert duplicate == t.handle
        assert {t.handle, duplicate} == {t.handle}
        assert duplicate.address == t.handle.address != 0

    def test_handles_of_distinct_frames_differ(self):
        assert parked().handle != parked().handle

    def test_done_tracks_frame_completion(self):
        t = parked()
        handle = t.handle
        assert not handle.done()

        handle.resume()

        assert handle.done()
        assert t.result() == Ok(None)

    def test_done_stays_true_after_destruction(self):
        t = Task.create(lambda: 1)
        t.close()

        assert t.handle.done()

    def test_deliver_through_null_handle_raises(self):
        with pytest.raises(UsageError):
            NULL_HANDLE.deliver(Ok(1))

    def test_repr_names_the_frame(self):
        t = parked()

        assert "parked" in repr(t.handle)
