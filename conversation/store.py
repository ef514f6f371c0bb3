"""In-memory conversation store with bounded history and idle eviction.

One ConversationContext per customer id. Contexts are created lazily on
first access, mutated by message appends and metadata merges, and removed
either explicitly (delete) or by sweep_idle once they have been idle past
the threshold. Nothing survives a process restart.
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Literal, Mapping, Protocol

logger = logging.getLogger(__name__)

MAX_MESSAGES = 20
IDLE_THRESHOLD = timedelta(hours=24)

Role = Literal["user", "assistant"]


def utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


@dataclass
class ConversationContext:
    customer_id: str
    messages: list[dict] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    last_activity: datetime = field(default_factory=utcnow)


class ConversationStore(Protocol):
    def get_or_create(self, customer_id: str) -> ConversationContext: ...
    def append_message(self, customer_id: str, role: Role, content: str) -> ConversationContext: ...
    def merge_metadata(self, customer_id: str, partial: Mapping[str, Any]) -> None: ...
    def delete(self, customer_id: str) -> None: ...
    def active_count(self) -> int: ...
    def sweep_idle(self, now: datetime | None = None, idle_threshold: timedelta | None = None) -> int: ...


class InMemoryConversationStore:
    """Process-local store keyed by customer id.

    Returned contexts are the live objects held by the store; callers that
    want to change history should go through append_message so the cap is
    enforced.
    """

    def __init__(
        self,
        max_messages: int = MAX_MESSAGES,
        idle_threshold: timedelta = IDLE_THRESHOLD,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        if max_messages < 1:
            raise ValueError(f"max_messages must be at least 1, got {max_messages}")
        if idle_threshold <= timedelta(0):
            raise ValueError(f"idle_threshold must be positive, got {idle_threshold}")
        self.max_messages = max_messages
        self.idle_threshold = idle_threshold
        self._clock = clock
        self._data: dict[str, ConversationContext] = {}
        # Sweeps may fire from a timer thread.
        self._lock = threading.RLock()

    def _touch(self, ctx: ConversationContext) -> None:
        now = self._clock()
        # Never move backwards, even if the clock does.
        if now > ctx.last_activity:
            ctx.last_activity = now

    def get_or_create(self, customer_id: str) -> ConversationContext:
        with self._lock:
            ctx = self._data.get(customer_id)
            if ctx is None:
                ctx = ConversationContext(customer_id=customer_id, last_activity=self._clock())
                self._data[customer_id] = ctx
                logger.debug("Conversation created for %s", customer_id)
            else:
                self._touch(ctx)
            return ctx

    def append_message(self, customer_id: str, role: Role, content: str) -> ConversationContext:
        with self._lock:
            ctx = self.get_or_create(customer_id)
            ctx.messages.append({"role": role, "content": content})
            if len(ctx.messages) > self.max_messages:
                ctx.messages = ctx.messages[-self.max_messages:]
            self._touch(ctx)
            return ctx

    def merge_metadata(self, customer_id: str, partial: Mapping[str, Any]) -> None:
        with self._lock:
            ctx = self.get_or_create(customer_id)
            ctx.metadata = {**ctx.metadata, **partial}

    def delete(self, customer_id: str) -> None:
        with self._lock:
            if self._data.pop(customer_id, None) is not None:
                logger.info("Conversation cleared for %s", customer_id)

    def active_count(self) -> int:
        with self._lock:
            return len(self._data)

    def sweep_idle(self, now: datetime | None = None, idle_threshold: timedelta | None = None) -> int:
        """Drop every context idle for longer than the threshold.

        Both arguments default to the store's clock and configured
        threshold. Returns the number of contexts removed.
        """
        now = now or self._clock()
        cutoff = now - (idle_threshold if idle_threshold is not None else self.idle_threshold)
        with self._lock:
            stale = [cid for cid, ctx in self._data.items() if ctx.last_activity < cutoff]
            for cid in stale:
                del self._data[cid]
            return len(stale)
