from conversation.store import (
    IDLE_THRESHOLD,
    MAX_MESSAGES,
    ConversationContext,
    ConversationStore,
    InMemoryConversationStore,
)
from conversation.sweeper import IdleSweeper

__all__ = [
    "IDLE_THRESHOLD",
    "MAX_MESSAGES",
    "ConversationContext",
    "ConversationStore",
    "InMemoryConversationStore",
    "IdleSweeper",
]
