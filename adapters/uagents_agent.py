"""Uagents chat protocol adapter: receives messages, calls the assistant engine, sweeps idle conversations."""

from datetime import datetime, timezone
from uuid import uuid4

from uagents import Context, Protocol, Agent
from uagents_core.contrib.protocols.chat import (
    ChatAcknowledgement,
    ChatMessage,
    EndSessionContent,
    TextContent,
    chat_protocol_spec,
)

from assistant.engine import AssistantEngine
from conversation.sweeper import SWEEP_INTERVAL_SECONDS, IdleSweeper


def create_agent(
    agent_seed: str,
    engine: AssistantEngine,
    sweeper: IdleSweeper,
    *,
    fallback_reply: str,
    name: str = "shop-assistant",
    port: int = 8001,
    sweep_interval: float = SWEEP_INTERVAL_SECONDS,
):
    """Build and return a uagents Agent that answers through the engine.

    The agent's interval scheduler drives the idle sweep, so the sweeper's
    own timer is never started here.
    """
    agent = Agent(
        name=name,
        seed=agent_seed,
        port=port,
        mailbox=True,
        publish_agent_details=True,
    )
    protocol = Protocol(spec=chat_protocol_spec)

    @protocol.on_message(ChatMessage)
    async def handle_message(ctx: Context, sender: str, msg: ChatMessage):
        await ctx.send(
            sender,
            ChatAcknowledgement(timestamp=datetime.now(tz=timezone.utc), acknowledged_msg_id=msg.msg_id),
        )

        text = ""
        for item in msg.content:
            if isinstance(item, TextContent):
                text += item.text

        response = fallback_reply
        try:
            response = engine.answer(text, customer_id=sender)
        except Exception:
            ctx.logger.exception("Error querying assistant engine")

        await ctx.send(
            sender,
            ChatMessage(
                timestamp=datetime.now(tz=timezone.utc),
                msg_id=uuid4(),
                content=[
                    TextContent(type="text", text=response),
                    EndSessionContent(type="end-session"),
                ],
            ),
        )

    @protocol.on_message(ChatAcknowledgement)
    async def handle_ack(ctx: Context, sender: str, msg: ChatAcknowledgement):
        pass

    @agent.on_interval(period=sweep_interval)
    async def sweep_idle_conversations(ctx: Context):
        removed = sweeper.run_once()
        if removed:
            ctx.logger.info(f"Idle sweep removed {removed} conversation(s)")

    agent.include(protocol, publish_manifest=True)
    return agent


def main() -> None:
    """Entrypoint: load config, wire layers, run the agent."""
    from adapters.run_local import build_engine, configure_logging, load_config

    configure_logging()
    business = load_config()
    if not business.agent_seed:
        raise SystemExit("An agent seed is required to run the uagents adapter (AGENT_SEED_PHRASE).")
    engine = build_engine(business)
    sweeper = IdleSweeper(engine.store, idle_threshold=business.idle_threshold)
    agent = create_agent(
        agent_seed=business.agent_seed,
        engine=engine,
        sweeper=sweeper,
        fallback_reply=business.profile.fallback_reply,
        name=business.business_id,
    )
    agent.run()


if __name__ == "__main__":
    main()
