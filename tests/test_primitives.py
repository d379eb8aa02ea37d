import pytest

from relaytask import (
    NULL_HANDLE,
    ComposerHandle,
    CurrentHandle,
    Err,
    Ok,
    WaitForResume,
    task,
)


class TestCurrentHandle:
    def test_capture_does_not_suspend(self):
        events = []

        @task
        def body():
            events.append("before")
            handle = yield CurrentHandle()
            events.append("after")
            return handle

        t = body()

        assert events == ["before", "after"]
        assert t.completed()
        assert t.result() == Ok(t.handle)


class TestComposerHandle:
    def test_root_has_no_composer(self):
        @task
        def root():
            return (yield ComposerHandle())

        assert root().result() == Ok(NULL_HANDLE)

    def test_child_sees_its_composer(self):
        @task
        def child():
            return (yield ComposerHandle())

        @task
        def parent():
            me = yield CurrentHandle()
            composer = yield child()
            return me, composer

        me, composer = parent().result().unwrap()
        # The child ran to completion before parent composed it.
        assert composer == NULL_HANDLE
        assert me != NULL_HANDLE

    def test_parked_child_sees_its_composer_after_linking(self):
        seen = []

        @task
        def child():
            yield WaitForResume()
            seen.append((yield ComposerHandle()))
            return None

        @task
        def parent():
            c = child()
            seen.append(c.handle)
            yield c
            return None

        p = parent()
        seen[0].resume()

        assert seen[1] == p.handle
        assert p.completed()


class TestWaitForResume:
    def test_bare_resume_evaluates_to_none(self):
        @task
        def body():
            return (yield WaitForResume())

        t = body()
        t.resume()

        assert t.result() == Ok(None)

    def test_delivered_error_is_raised(self):
        @task
        def body():
            try:
                yield WaitForResume()
            except LookupError:
                return "raised"
            return "returned"

        t = body()
        t.handle.deliver(Err(LookupError("gone")))
        t.resume()

        assert t.result() == Ok("raised")

    @pytest.mark.parametrize("value", [0, "", None, [1, 2]])
    def test_delivered_value_is_returned(self, value):
        @task
        def body():
            return (yield WaitForResume())

        t = body()
        t.handle.deliver(Ok(value))
        t.resume()

        assert t.result() == Ok(value)
