from assistant.engine import AssistantEngine
from assistant.handler import IncomingMessage, MessageHandler
from assistant.hours import BusinessHours
from assistant.prompts import BusinessProfile, build_system_prompt

__all__ = [
    "AssistantEngine",
    "BusinessHours",
    "BusinessProfile",
    "IncomingMessage",
    "MessageHandler",
    "build_system_prompt",
]
