"""WhatsApp inbound message handling.

Sits between the WhatsApp transport and the AssistantEngine: filters out
messages the assistant should not answer, answers each message id at most
once (WhatsApp redelivers on reconnect), and turns engine failures into a fallback reply so the
customer always hears back.
"""

import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable

from assistant.engine import AssistantEngine
from assistant.prompts import DEFAULT_FALLBACK

logger = logging.getLogger(__name__)

NON_TEXT_REPLY = (
    "Maaf Kak, saat ini saya hanya bisa membaca pesan teks. "
    "Silakan ketik pertanyaan atau pesanan Kakak ya. 😊"
)
RESET_REPLY = "Percakapan sudah direset. Ada yang bisa saya bantu? 😊"
RESET_COMMANDS = ("/reset", "reset")
RECENT_IDS_LIMIT = 1000


@dataclass
class IncomingMessage:
    message_id: str
    sender: str
    body: str
    type: str = "text"
    from_me: bool = False
    is_group: bool = False


def customer_id_from_jid(jid: str) -> str:
    """'6281234567890@s.whatsapp.net' -> '6281234567890'."""
    return jid.split("@", 1)[0]


class MessageHandler:
    def __init__(
        self,
        engine: AssistantEngine,
        send: Callable[[str, str], None],
        *,
        fallback_reply: str = DEFAULT_FALLBACK,
        non_text_reply: str = NON_TEXT_REPLY,
        reset_commands: tuple[str, ...] = RESET_COMMANDS,
        recent_ids_limit: int = RECENT_IDS_LIMIT,
    ):
        self._engine = engine
        self._send = send
        self._fallback_reply = fallback_reply
        self._non_text_reply = non_text_reply
        self._reset_commands = tuple(c.lower() for c in reset_commands)
        self._recent_ids: OrderedDict[str, None] = OrderedDict()
        self._recent_ids_limit = recent_ids_limit
        self._lock = threading.Lock()

    def _claim(self, message_id: str) -> bool:
        """Record message_id as handled; False if it was already seen recently."""
        with self._lock:
            if message_id in self._recent_ids:
                return False
            self._recent_ids[message_id] = None
            while len(self._recent_ids) > self._recent_ids_limit:
                self._recent_ids.popitem(last=False)
            return True

    def _should_skip(self, message: IncomingMessage) -> bool:
        if message.from_me:
            logger.debug("Skipping message from self")
            return True
        if message.sender == "status" or "broadcast" in message.sender:
            logger.debug("Skipping broadcast message")
            return True
        if message.is_group:
            logger.debug("Skipping group message from %s", message.sender)
            return True
        if not self._claim(message.message_id):
            logger.debug("Skipping duplicate message %s", message.message_id)
            return True
        return False

    def handle(self, message: IncomingMessage) -> str | None:
        """Reply to one inbound message; returns the text sent, or None if skipped."""
        if self._should_skip(message):
            return None

        customer_id = customer_id_from_jid(message.sender)
        if message.type != "text" or not message.body.strip():
            reply = self._non_text_reply
        elif message.body.strip().lower() in self._reset_commands:
            self._engine.reset(customer_id)
            reply = RESET_REPLY
        else:
            try:
                reply = self._engine.answer(message.body, customer_id=customer_id)
            except Exception:
                logger.exception("Error answering message %s from %s", message.message_id, customer_id)
                reply = self._fallback_reply

        self._send(message.sender, reply)
        logger.info(
            "Message processed: from=%s length=%d reply_length=%d",
            customer_id, len(message.body), len(reply),
        )
        return reply
