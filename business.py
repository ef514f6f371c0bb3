"""Business config loader.

Each shop has a YAML file under businesses/ that declares non-secret config
(profile, hours, product catalog, conversation limits) inline and references secret values
by env var name. Call load_business() with the path from the
BUSINESS_CONFIG environment variable, or business_from_env() to run on
plain environment variables.

Usage:
    business = load_business(os.environ.get("BUSINESS_CONFIG", ""))
"""

import os
import sys
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path

import yaml

from assistant.hours import BusinessHours
from assistant.prompts import BusinessProfile
from conversation.store import IDLE_THRESHOLD, MAX_MESSAGES
from orders.catalog import ProductCatalog
from env import config


@dataclass
class BusinessConfig:
    business_id: str
    groq_api_key: str
    profile: BusinessProfile = field(default_factory=BusinessProfile)
    hours: BusinessHours = field(default_factory=BusinessHours)
    catalog: ProductCatalog = field(default_factory=ProductCatalog)
    model: str = ""
    agent_seed: str = ""
    admin_webhook_url: str = ""
    admin_role_id: str = ""
    max_messages: int = MAX_MESSAGES
    idle_threshold: timedelta = IDLE_THRESHOLD


def _check_limits(max_messages: int, idle_hours: float, source: str) -> None:
    if max_messages < 1:
        sys.exit(f"Conversation max_messages must be at least 1, got {max_messages} ({source})")
    if idle_hours <= 0:
        sys.exit(f"Conversation idle_hours must be positive, got {idle_hours} ({source})")


def load_business(config_path: str) -> BusinessConfig:
    """Load and validate a business config from a YAML file.

    Secrets are never stored in the YAML; the YAML holds the env var *name*
    and this function resolves the actual value from the environment. Exits
    with a clear error message if BUSINESS_CONFIG is unset, the file is
    missing, or a required env var is not set. The admin webhook is
    optional: without it escalations are only logged.
    """
    if not config_path:
        sys.exit("BUSINESS_CONFIG environment variable is not set.")

    path = Path(config_path)
    if not path.exists():
        sys.exit(f"Business config file not found: {path}")

    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    def _env(key_name: str, required: bool = True) -> str:
        val = (os.environ.get(key_name) or "").strip() if key_name else ""
        if required and not val:
            sys.exit(f"Missing required env var '{key_name}' (referenced in {path})")
        return val

    env = raw.get("env", {})
    admin = raw.get("admin", {}).get("discord_webhook", {})
    conv = raw.get("conversation", {})
    max_messages = int(conv.get("max_messages", MAX_MESSAGES))
    idle_hours = float(conv.get("idle_hours", IDLE_THRESHOLD.total_seconds() / 3600))
    _check_limits(max_messages, idle_hours, str(path))

    return BusinessConfig(
        business_id=raw["business_id"],
        groq_api_key=_env(env["groq_api_key_env_key"]),
        profile=BusinessProfile.from_mapping(raw.get("profile")),
        hours=BusinessHours.from_mapping(raw.get("hours")),
        catalog=ProductCatalog.from_list(raw.get("products")),
        model=raw.get("llm", {}).get("model", ""),
        agent_seed=_env(env.get("agent_seed_env_key", ""), required=False),
        admin_webhook_url=_env(admin.get("webhook_url_env_key", ""), required=False),
        admin_role_id=str(admin.get("mention_role_id", "")),
        max_messages=max_messages,
        idle_threshold=timedelta(hours=idle_hours),
    )


def business_from_env() -> BusinessConfig:
    """Build a BusinessConfig from environment variables only (see env.py)."""
    _check_limits(config.CONVERSATION_MAX_MESSAGES, config.CONVERSATION_IDLE_HOURS, "environment")
    return BusinessConfig(
        business_id="default",
        groq_api_key=config.GROQ_API_KEY,
        profile=BusinessProfile(name=config.BUSINESS_NAME, sector=config.BUSINESS_SECTOR),
        model=config.GROQ_MODEL,
        agent_seed=config.AGENT_SEED_PHRASE,
        admin_webhook_url=config.ADMIN_WEBHOOK_URL,
        admin_role_id=config.ADMIN_ROLE_ID,
        max_messages=config.CONVERSATION_MAX_MESSAGES,
        idle_threshold=timedelta(hours=config.CONVERSATION_IDLE_HOURS),
    )
