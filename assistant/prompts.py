"""System prompt construction for the shop assistant."""

from dataclasses import dataclass
from typing import Any, Mapping

from assistant.hours import HoursStatus

SECTOR_PROMPTS = {
    "health": "You are a knowledgeable health consultant who provides general wellness advice and product recommendations.",
    "ecommerce": "You are a helpful sales assistant who helps customers find products and complete purchases.",
    "education": "You are an educational assistant who helps students learn and provides study guidance.",
    "finance": "You are a financial advisor assistant who provides general financial guidance and service information.",
    "hospitality": "You are a hospitality assistant who helps with bookings, recommendations, and customer service.",
    "retail": "You are a retail assistant who helps customers find products and provides shopping assistance.",
    "general": "You are a versatile AI assistant who helps with various customer inquiries and requests.",
}

DEFAULT_FALLBACK = "Maaf, ada kendala saat memproses pesan Anda. Silakan coba lagi atau hubungi kami langsung. 🙏"


@dataclass
class BusinessProfile:
    name: str = "AI Assistant"
    sector: str = "general"
    role: str = "customer service assistant"
    personality: str = "helpful and professional"
    phone: str = ""
    address: str = ""
    custom_prompt: str = ""
    fallback_reply: str = DEFAULT_FALLBACK

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any] | None) -> "BusinessProfile":
        if not raw:
            return cls()
        known = {k: str(v) for k, v in raw.items() if k in cls.__dataclass_fields__}
        return cls(**known)


def _order_state_lines(metadata: Mapping[str, Any]) -> list[str]:
    lines = []
    if metadata.get("address"):
        state = "complete" if metadata.get("address_complete") else "incomplete"
        lines.append(f"- Address on file ({state}): {metadata['address']}")
    if metadata.get("order_status"):
        lines.append(f"- Order status: {metadata['order_status']}")
    if metadata.get("handoff_requested"):
        lines.append("- The customer asked for a human; an admin has been notified.")
    return lines


def build_system_prompt(
    profile: BusinessProfile,
    metadata: Mapping[str, Any] | None = None,
    hours_status: HoursStatus | None = None,
) -> str:
    base = SECTOR_PROMPTS.get(profile.sector, SECTOR_PROMPTS["general"])
    location = profile.address or "not specified"

    prompt = (
        f"{base}\n\n"
        f"Your role: {profile.role}\n"
        f"Your personality: {profile.personality}\n"
        f"Business: {profile.name}\n"
        f"Location: {location}\n\n"
        "Communication Guidelines:\n"
        "- Be helpful, friendly, and professional\n"
        "- Respond in the user's language (detect from their message)\n"
        "- Keep responses concise; this is a WhatsApp chat\n"
        "- Ask clarifying questions when needed\n"
        "- Guide users through processes step by step\n\n"
        "Products:\n"
        "- Only recommend products and quote prices returned by search_products; never invent them.\n\n"
        "Taking orders:\n"
        "- Collect the customer's full name, WhatsApp number and full shipping address.\n"
        "- When the customer gives an address, call check_address and relay any "
        "missing details it reports before continuing.\n"
        "- Once name, number, address and items are known, call submit_order.\n"
        "- If the customer wants to talk to a person, or you cannot help, call request_human.\n\n"
        f"Important: Always maintain a {profile.personality} tone while being a {profile.role}."
    )

    if hours_status is not None:
        prompt += f"\n\n{hours_status.describe()}"

    state = _order_state_lines(metadata or {})
    if state:
        prompt += "\n\nKnown about this customer:\n" + "\n".join(state)

    if profile.custom_prompt:
        prompt += f"\n\nCustom Instructions:\n{profile.custom_prompt}"
    return prompt
