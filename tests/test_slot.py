import pytest

from relaytask import Err, Ok, ResultAlreadyTakenError, ResultSlot, SlotSealedError


class TestResultSlot:
    def test_latest_delivery_wins_before_sealing(self):
        slot = ResultSlot("inbox")
        slot.deliver(Ok(1))
        slot.deliver(Ok(2))

        assert slot.take() == Ok(2)
        assert not slot.filled

    def test_offer_keeps_an_existing_delivery(self):
        slot = ResultSlot("inbox")
        slot.deliver(Ok("external"))

        assert slot.offer(Ok("provisional")) is False
        assert slot.take() == Ok("external")

    def test_offer_fills_an_empty_slot(self):
        slot = ResultSlot("inbox")

        assert slot.offer(Ok("provisional")) is True
        assert slot.take() == Ok("provisional")

    def test_sealed_slot_rejects_writes(self):
        slot = ResultSlot("final")
        slot.seal(Ok(3))

        with pytest.raises(SlotSealedError):
            slot.deliver(Ok(4))
        with pytest.raises(SlotSealedError):
            slot.seal(Ok(5))

    def test_sealed_result_can_be_taken_once(self):
        slot = ResultSlot("final")
        slot.seal(Err(ValueError("x")))

        assert slot.take().is_err()
        with pytest.raises(ResultAlreadyTakenError):
            slot.take()

    def test_take_of_empty_open_slot_raises_lookup_error(self):
        with pytest.raises(LookupError):
            ResultSlot("empty").take()

    def test_take_pending_ignores_final_result(self):
        slot = ResultSlot("final")
        assert slot.take_pending() is None

        slot.deliver(Ok("early"))
        assert slot.take_pending() == Ok("early")

        slot.seal(Ok("final"))
        assert slot.take_pending() is None
        assert slot.take() == Ok("final")
