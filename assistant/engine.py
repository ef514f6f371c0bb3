"""Assistant engine: tool-calling LLM loop over a customer's conversation.

Purpose
-------
The engine is the single place that owns "reply to this customer message".
Callers (WhatsApp message handler, uagents agent, terminal chat) pass in a
message and a customer id and get back the reply to send. History,
product search, address checks, order submission and admin hand-off
happen inside.

Interface contract
------------------
- **Input:** one message (string) + customer_id (string).
- **Output:** one message (string). Model/transport errors propagate so the
  caller can send its own fallback.
"""

import functools
import json
import logging
import time

from openai import OpenAI

from assistant.hours import BusinessHours
from assistant.prompts import BusinessProfile, build_system_prompt
from conversation.store import ConversationContext, ConversationStore, InMemoryConversationStore
from escalation.base_escalation import BaseEscalation
from orders.address import address_confirmation_message, missing_customer_info, validate_address
from orders.catalog import ProductCatalog, format_rupiah

logger = logging.getLogger(__name__)

GROQ_BASE_URL = "https://api.groq.com/openai/v1"
DEFAULT_MODEL = "llama-3.3-70b-versatile"
MAX_STEPS = 3


def _truncate(s: str, max_len: int = 400) -> str:
    if not isinstance(s, str):
        s = str(s)
    return s[:max_len] + "..." if len(s) > max_len else s


def log_tool_call(fn):
    """Decorator: log tool name, truncated args, result, and duration for every tool call."""
    @functools.wraps(fn)
    def wrapper(self, *args, **kwargs):
        name = fn.__name__
        safe_args = [_truncate(repr(a), 200) for a in args]
        safe_kw = {k: _truncate(repr(v), 200) for k, v in kwargs.items()}
        logger.info("Tool call: %s args=%s kwargs=%s", name, safe_args, safe_kw)
        start = time.perf_counter()
        try:
            result = fn(self, *args, **kwargs)
            elapsed = time.perf_counter() - start
            logger.info("Tool %s returned in %.3fs: %s", name, elapsed, _truncate(result))
            return result
        except Exception as e:
            elapsed = time.perf_counter() - start
            logger.exception("Tool %s failed after %.3fs: %s", name, elapsed, e)
            raise
    return wrapper


_TOOLS = [
    {
        "type": "function",
        "function": {
            "name": "search_products",
            "description": (
                "Search the shop's product catalog by product name, need or symptom "
                "(Indonesian or English), optionally within one category. Call this "
                "before recommending a product or quoting a price; only mention "
                "products and prices this tool returns."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "query": {"type": "string", "description": "What the customer is looking for."},
                    "category": {
                        "type": "string",
                        "description": "Optional category to list instead of searching, e.g. 'digestive_health'.",
                    },
                },
                "required": ["query"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "check_address",
            "description": (
                "Check whether a shipping address is complete enough for delivery. "
                "Call this whenever the customer sends or corrects their address. "
                "If details are missing, the result is a message for the customer: "
                "relay it and wait for the corrected address."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "address": {
                        "type": "string",
                        "description": "The full address exactly as the customer wrote it.",
                    }
                },
                "required": ["address"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "submit_order",
            "description": (
                "Submit the customer's order to the shop admins once the name, "
                "WhatsApp number, full address and ordered items are known. "
                "The result says whether the order was accepted or which details "
                "are still missing; tell the customer accordingly."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "customer_name": {"type": "string", "description": "Customer's full name."},
                    "phone": {
                        "type": "string",
                        "description": "WhatsApp number for the order. Leave empty to use the sender's number.",
                    },
                    "address": {"type": "string", "description": "Full shipping address."},
                    "items": {
                        "type": "string",
                        "description": "Ordered products with quantities, e.g. '2x Hotto Purto'.",
                    },
                },
                "required": ["customer_name", "address", "items"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "request_human",
            "description": (
                "Hand the conversation to a human admin. Call this ONCE when the "
                "customer asks for a person, complains, or needs something you "
                "cannot handle. IMPORTANT: the return value of this tool IS the "
                "message to show the customer; do not call any other tool after it."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "reason": {"type": "string", "description": "Short reason for the hand-off."}
                },
                "required": ["reason"],
            },
        },
    },
]

HANDOFF_REPLY = (
    "Baik Kak, saya sudah meneruskan percakapan ini ke admin kami. "
    "Admin akan segera menghubungi Kakak di WhatsApp ini. 🙏"
)


class AssistantEngine:
    """Handles a customer message and returns a single reply.

    Conversation state (history + metadata) lives in a ConversationStore
    shared with whoever constructed the engine, so the host can sweep idle
    conversations on its own schedule.
    """

    def __init__(
        self,
        api_key: str,
        profile: BusinessProfile | None = None,
        store: ConversationStore | None = None,
        escalation: BaseEscalation | None = None,
        *,
        hours: BusinessHours | None = None,
        catalog: ProductCatalog | None = None,
        model: str = DEFAULT_MODEL,
        base_url: str = GROQ_BASE_URL,
        max_tokens: int = 1024,
        temperature: float = 0.7,
    ):
        self._client = OpenAI(api_key=api_key, base_url=base_url)
        self._profile = profile or BusinessProfile()
        self._store = store or InMemoryConversationStore()
        self._escalation = escalation
        self._hours = hours
        self._catalog = catalog or ProductCatalog()
        self._model = model or DEFAULT_MODEL
        self._max_tokens = max_tokens
        self._temperature = temperature

    @property
    def store(self) -> ConversationStore:
        return self._store

    def answer(self, message: str, customer_id: str) -> str:
        """Record the customer's message, run the model, record and return the reply."""
        ctx = self._store.append_message(customer_id, "user", message)
        reply = self._run_tools_loop(customer_id, ctx)
        self._store.append_message(customer_id, "assistant", reply)
        return reply

    def reset(self, customer_id: str) -> None:
        self._store.delete(customer_id)

    def _build_system_prompt(self, ctx: ConversationContext) -> str:
        hours_status = self._hours.status() if self._hours else None
        return build_system_prompt(self._profile, ctx.metadata, hours_status)

    def _run_tools_loop(self, customer_id: str, ctx: ConversationContext) -> str:
        messages = [
            {"role": "system", "content": self._build_system_prompt(ctx)},
            *ctx.messages,
        ]

        reply = self._profile.fallback_reply
        finished = False
        logger.info(
            "Tool loop starting for %s: %s", customer_id, _truncate(ctx.messages[-1]["content"], 120)
        )

        for step in range(MAX_STEPS):
            logger.info("Step %d: calling model (messages=%d)", step + 1, len(messages))
            response = self._client.chat.completions.create(
                model=self._model,
                messages=messages,
                tools=_TOOLS,
                tool_choice="auto",
                max_tokens=self._max_tokens,
                temperature=self._temperature,
            )
            msg = response.choices[0].message

            if not msg.tool_calls:
                reply = msg.content or self._profile.fallback_reply
                finished = True
                break

            logger.info("Step %d: model requested tools: %s", step + 1, [tc.function.name for tc in msg.tool_calls])
            messages.append(msg)

            terminal_reply = None
            for tool_call in msg.tool_calls:
                tool_name = tool_call.function.name
                args = json.loads(tool_call.function.arguments or "{}")

                if tool_name == "search_products":
                    result = self._tool_search_products(args.get("query", ""), args.get("category", ""))
                elif tool_name == "check_address":
                    result = self._tool_check_address(customer_id, args.get("address", ""))
                elif tool_name == "submit_order":
                    result = self._tool_submit_order(
                        customer_id,
                        args.get("customer_name", ""),
                        args.get("phone", ""),
                        args.get("address", ""),
                        args.get("items", ""),
                    )
                elif tool_name == "request_human":
                    result = self._tool_request_human(customer_id, args.get("reason", ""))
                    terminal_reply = HANDOFF_REPLY
                else:
                    result = f"Unknown tool: {tool_name}"

                messages.append({
                    "role": "tool",
                    "tool_call_id": tool_call.id,
                    "content": result,
                })

            if terminal_reply is not None:
                reply = terminal_reply
                finished = True
                break

        if finished:
            logger.info("Tool loop finished for %s with reply: %s", customer_id, _truncate(reply, 150))
        else:
            logger.warning("Tool loop hit max steps (%d) for %s; using fallback reply", MAX_STEPS, customer_id)
        return reply

    @log_tool_call
    def _tool_check_address(self, customer_id: str, address: str) -> str:
        validation = validate_address(address)
        self._store.merge_metadata(customer_id, {"address": address, "address_complete": validation.is_valid})
        if validation.is_valid:
            return "The address is complete."
        return address_confirmation_message(validation, address)

    @log_tool_call
    def _tool_search_products(self, query: str, category: str = "") -> str:
        if not len(self._catalog):
            return "No product catalog is configured. Do not quote products or prices; offer request_human instead."
        products = self._catalog.by_category(category) if category else self._catalog.search(query)
        if not products:
            return (
                "No matching products. Available categories: "
                + ", ".join(self._catalog.categories())
                + ". Do not invent products."
            )
        return "\n".join(p.describe() for p in products)

    @log_tool_call
    def _tool_submit_order(self, customer_id: str, name: str, phone: str, address: str, items: str) -> str:
        missing = missing_customer_info(name, phone, address, fallback_phone=customer_id)
        if not items.strip():
            missing.append("Produk yang dipesan")
        if missing:
            return "Order not submitted. Still missing: " + ", ".join(missing)

        lines = []
        if len(self._catalog):
            lines, unknown = self._catalog.parse_items(items)
            if unknown:
                return (
                    "Order not submitted. These items are not in the catalog: "
                    + ", ".join(unknown)
                    + ". Call search_products and confirm the exact product with the customer."
                )
            sold_out = [line.product.name for line in lines if not line.product.in_stock]
            if sold_out:
                return "Order not submitted. Out of stock: " + ", ".join(sold_out)

        order = {
            "customer_name": name.strip(),
            "phone": phone.strip() or customer_id,
            "address": address.strip(),
            "items": items.strip(),
        }
        if lines:
            order["items"] = ", ".join(f"{line.quantity}x {line.product.name}" for line in lines)
            order["lines"] = [
                {"product_id": line.product.id, "quantity": line.quantity, "subtotal": line.subtotal}
                for line in lines
            ]
            order["total"] = sum(line.subtotal for line in lines)
        self._store.merge_metadata(customer_id, {"order": order, "order_status": "submitted"})

        details = {
            "Name": order["customer_name"],
            "Phone": order["phone"],
            "Address": order["address"],
            "Items": order["items"],
        }
        if "total" in order:
            details["Total (excl. shipping)"] = format_rupiah(order["total"])

        if self._escalation is None:
            logger.info("Order submitted for %s (no admin notifier configured)", customer_id)
            return "Order recorded. The shop will confirm the total and shipping cost shortly."

        return self._escalation.escalate(customer_id, "New order received", details)

    @log_tool_call
    def _tool_request_human(self, customer_id: str, reason: str) -> str:
        self._store.merge_metadata(customer_id, {"handoff_requested": True})
        if self._escalation is None:
            logger.info("Hand-off requested by %s (no admin notifier configured)", customer_id)
            return "Hand-off recorded."
        user_msgs = [m["content"] for m in self._store.get_or_create(customer_id).messages if m["role"] == "user"]
        last_message = user_msgs[-1] if user_msgs else ""
        return self._escalation.escalate(
            customer_id,
            f"Customer asked for a human: {reason}" if reason else "Customer asked for a human",
            {"Last message": _truncate(last_message, 500)},
        )
