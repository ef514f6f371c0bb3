"""Unit tests for the WhatsApp inbound message handler."""

import threading
from unittest.mock import MagicMock

import pytest

from assistant.handler import (
    NON_TEXT_REPLY,
    RESET_REPLY,
    IncomingMessage,
    MessageHandler,
    customer_id_from_jid,
)

JID = "6281234567890@s.whatsapp.net"


def _make_handler(reply: str = "Halo Kak!"):
    engine = MagicMock()
    engine.answer.return_value = reply
    send = MagicMock()
    handler = MessageHandler(engine, send, fallback_reply="fallback!")
    return handler, engine, send


@pytest.mark.unit
def test_customer_id_strips_whatsapp_domain():
    assert customer_id_from_jid(JID) == "6281234567890"
    assert customer_id_from_jid("6281234567890") == "6281234567890"


@pytest.mark.unit
def test_text_message_is_answered_and_sent_back():
    handler, engine, send = _make_handler()

    result = handler.handle(IncomingMessage(message_id="m1", sender=JID, body="Halo"))

    assert result == "Halo Kak!"
    engine.answer.assert_called_once_with("Halo", customer_id="6281234567890")
    send.assert_called_once_with(JID, "Halo Kak!")


@pytest.mark.unit
@pytest.mark.parametrize(
    "message",
    [
        IncomingMessage(message_id="m1", sender=JID, body="Halo", from_me=True),
        IncomingMessage(message_id="m1", sender="status", body="Halo"),
        IncomingMessage(message_id="m1", sender="123@broadcast", body="Halo"),
        IncomingMessage(message_id="m1", sender="123@g.us", body="Halo", is_group=True),
    ],
    ids=["own", "status", "broadcast", "group"],
)
def test_messages_the_assistant_must_not_answer_are_skipped(message):
    handler, engine, send = _make_handler()

    assert handler.handle(message) is None
    engine.answer.assert_not_called()
    send.assert_not_called()


@pytest.mark.unit
def test_non_text_or_blank_message_gets_text_only_notice():
    handler, engine, send = _make_handler()

    handler.handle(IncomingMessage(message_id="m1", sender=JID, body="", type="image"))
    handler.handle(IncomingMessage(message_id="m2", sender=JID, body="   "))

    engine.answer.assert_not_called()
    assert send.call_count == 2
    send.assert_called_with(JID, NON_TEXT_REPLY)


@pytest.mark.unit
def test_reset_command_clears_conversation():
    handler, engine, send = _make_handler()

    handler.handle(IncomingMessage(message_id="m1", sender=JID, body="/reset"))

    engine.reset.assert_called_once_with("6281234567890")
    engine.answer.assert_not_called()
    send.assert_called_once_with(JID, RESET_REPLY)


@pytest.mark.unit
def test_engine_failure_sends_fallback_once():
    """
    Story: The model backend is down. The customer still gets the fallback
    reply, and a redelivery of the same message is not answered a second time.
    """
    handler, engine, send = _make_handler()
    engine.answer.side_effect = RuntimeError("groq down")

    assert handler.handle(IncomingMessage(message_id="m1", sender=JID, body="Halo")) == "fallback!"
    assert handler.handle(IncomingMessage(message_id="m1", sender=JID, body="Halo")) is None

    send.assert_called_once_with(JID, "fallback!")


@pytest.mark.unit
def test_redelivered_message_is_answered_once():
    """
    Story: WhatsApp redelivers message m1 after a reconnect, long after the
    first copy was answered. Only the first copy reaches the engine.
    """
    handler, engine, send = _make_handler()

    handler.handle(IncomingMessage(message_id="m1", sender=JID, body="Halo"))
    handler.handle(IncomingMessage(message_id="m2", sender=JID, body="Mau pesan"))
    assert handler.handle(IncomingMessage(message_id="m1", sender=JID, body="Halo")) is None

    assert engine.answer.call_count == 2
    assert send.call_count == 2


@pytest.mark.unit
def test_duplicate_delivery_while_in_flight_is_skipped():
    handler, engine, send = _make_handler()
    duplicate = IncomingMessage(message_id="m1", sender=JID, body="Halo")

    def answer_and_receive_duplicate(body, customer_id):
        assert handler.handle(duplicate) is None
        return "Halo Kak!"

    engine.answer.side_effect = answer_and_receive_duplicate

    handler.handle(IncomingMessage(message_id="m1", sender=JID, body="Halo"))

    assert engine.answer.call_count == 1
    send.assert_called_once_with(JID, "Halo Kak!")


@pytest.mark.unit
def test_oldest_message_ids_are_forgotten_past_the_limit():
    engine = MagicMock()
    engine.answer.return_value = "ok"
    handler = MessageHandler(engine, MagicMock(), recent_ids_limit=2)

    for message_id in ("m1", "m2", "m3"):
        handler.handle(IncomingMessage(message_id=message_id, sender=JID, body="Halo"))

    assert handler.handle(IncomingMessage(message_id="m3", sender=JID, body="Halo")) is None
    assert handler.handle(IncomingMessage(message_id="m1", sender=JID, body="Halo")) == "ok"
    assert engine.answer.call_count == 4


@pytest.mark.unit
def test_concurrent_deliveries_of_one_message_are_answered_once():
    handler, engine, send = _make_handler()
    release = threading.Event()

    def slow_answer(body, customer_id):
        release.wait(timeout=2)
        return "Halo Kak!"

    engine.answer.side_effect = slow_answer
    message = IncomingMessage(message_id="m1", sender=JID, body="Halo")
    threads = [threading.Thread(target=handler.handle, args=(message,)) for _ in range(5)]
    for t in threads:
        t.start()
    release.set()
    for t in threads:
        t.join(timeout=5)

    assert engine.answer.call_count == 1
    send.assert_called_once_with(JID, "Halo Kak!")
