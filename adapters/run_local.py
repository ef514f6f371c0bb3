"""Local terminal chat: type as a WhatsApp customer, get assistant replies."""

import logging
import os
from itertools import count

from assistant.engine import AssistantEngine
from assistant.handler import IncomingMessage, MessageHandler
from business import BusinessConfig, business_from_env, load_business
from clients.discord import DiscordWebhookClient
from conversation.store import InMemoryConversationStore
from conversation.sweeper import IdleSweeper
from env import require_env
from escalation import DiscordEscalation

LOCAL_SENDER = "6280000000000@s.whatsapp.net"


def configure_logging() -> None:
    level = getattr(logging, os.getenv("LOG_LEVEL", "ERROR").upper(), logging.ERROR)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def load_config() -> BusinessConfig:
    """BUSINESS_CONFIG YAML when set, otherwise plain environment variables."""
    config_path = os.environ.get("BUSINESS_CONFIG", "")
    if config_path:
        return load_business(config_path)
    require_env()
    return business_from_env()


def build_engine(business: BusinessConfig) -> AssistantEngine:
    escalation = None
    if business.admin_webhook_url:
        client = DiscordWebhookClient(business.admin_webhook_url, business.admin_role_id)
        escalation = DiscordEscalation(client, message_prefix=f"[{business.profile.name}]")

    store = InMemoryConversationStore(
        max_messages=business.max_messages,
        idle_threshold=business.idle_threshold,
    )
    return AssistantEngine(
        api_key=business.groq_api_key,
        profile=business.profile,
        store=store,
        escalation=escalation,
        hours=business.hours,
        catalog=business.catalog,
        model=business.model,
    )


def main() -> None:
    configure_logging()
    business = load_config()
    engine = build_engine(business)
    sweeper = IdleSweeper(engine.store, idle_threshold=business.idle_threshold)
    handler = MessageHandler(
        engine,
        send=lambda to, text: print(f"Bot: {text}\n"),
        fallback_reply=business.profile.fallback_reply,
    )
    ids = count(1)

    sweeper.start()
    print(f"{business.profile.name}. Type 'quit' or 'exit' to stop, '/reset' to start over.\n")
    try:
        while True:
            try:
                user_input = input("You: ").strip()
            except (EOFError, KeyboardInterrupt):
                print("\nBye.")
                break
            if not user_input:
                continue
            if user_input.lower() in ("quit", "exit", "q"):
                print("Bye.")
                break
            handler.handle(IncomingMessage(message_id=f"local-{next(ids)}", sender=LOCAL_SENDER, body=user_input))
    finally:
        sweeper.stop()


if __name__ == "__main__":
    main()
