"""
Startup guard and lazy accessors for environment configuration.
Used when no business YAML is given: validates required vars before the
app runs so failures happen at launch instead of on the first model call.
"""
import os
import sys

from dotenv import load_dotenv

load_dotenv()

# Keep in sync with .env.example.
REQUIRED = [
    "GROQ_API_KEY",
]


def require_env() -> None:
    """Check that all required environment variables are set and non-empty.
    On failure: print missing vars and exit with code 1."""
    missing = [name for name in REQUIRED if not (os.getenv(name) or "").strip()]
    if not missing:
        return
    print("Missing required environment variables:", file=sys.stderr)
    for name in missing:
        print(f"  - {name}", file=sys.stderr)
    print(
        "Set them in your environment or in a .env file (see .env.example).",
        file=sys.stderr,
    )
    sys.exit(1)


def _int_env(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    try:
        return int(raw) if raw else default
    except ValueError:
        print(f"Ignoring non-integer {name}={raw!r}; using {default}", file=sys.stderr)
        return default


class _Config:
    """Reads from os.environ on every access, so tests can patch the environment."""

    @property
    def GROQ_API_KEY(self) -> str:
        return os.getenv("GROQ_API_KEY", "")

    @property
    def GROQ_MODEL(self) -> str:
        return os.getenv("GROQ_MODEL", "")

    @property
    def AGENT_SEED_PHRASE(self) -> str:
        return os.getenv("AGENT_SEED_PHRASE", "")

    @property
    def ADMIN_WEBHOOK_URL(self) -> str:
        return os.getenv("ADMIN_WEBHOOK_URL", "")

    @property
    def ADMIN_ROLE_ID(self) -> str:
        return os.getenv("ADMIN_ROLE_ID", "")

    @property
    def BUSINESS_NAME(self) -> str:
        return os.getenv("BUSINESS_NAME", "AI Assistant")

    @property
    def BUSINESS_SECTOR(self) -> str:
        return os.getenv("BUSINESS_SECTOR", "general")

    @property
    def CONVERSATION_MAX_MESSAGES(self) -> int:
        return _int_env("CONVERSATION_MAX_MESSAGES", 20)

    @property
    def CONVERSATION_IDLE_HOURS(self) -> int:
        return _int_env("CONVERSATION_IDLE_HOURS", 24)

    @property
    def LOG_LEVEL(self) -> str:
        return os.getenv("LOG_LEVEL", "INFO")


config = _Config()
