"""Unit tests for business config loading."""

import os
from datetime import timedelta
from unittest.mock import patch

import pytest

from business import business_from_env, load_business

YAML = """
business_id: toko-sehat
profile:
  name: Toko Sehat
  sector: health
hours:
  weekdays:
    start: "08:00"
    end: "17:00"
llm:
  model: llama-3.1-8b-instant
conversation:
  max_messages: 10
  idle_hours: 6
env:
  groq_api_key_env_key: SHOP_GROQ_KEY
admin:
  discord_webhook:
    webhook_url_env_key: SHOP_WEBHOOK
    mention_role_id: 42
"""


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "shop.yaml"
    path.write_text(YAML)
    return path


@pytest.mark.unit
def test_load_business_resolves_secrets_from_env(config_file):
    env = {"SHOP_GROQ_KEY": "gsk-test", "SHOP_WEBHOOK": "https://discord.com/api/webhooks/x"}
    with patch.dict(os.environ, env):
        business = load_business(str(config_file))

    assert business.business_id == "toko-sehat"
    assert business.groq_api_key == "gsk-test"
    assert business.profile.name == "Toko Sehat"
    assert business.hours.weekday_start == "08:00"
    assert business.model == "llama-3.1-8b-instant"
    assert business.admin_webhook_url == "https://discord.com/api/webhooks/x"
    assert business.admin_role_id == "42"
    assert business.max_messages == 10
    assert business.idle_threshold == timedelta(hours=6)


@pytest.mark.unit
def test_admin_webhook_is_optional(config_file):
    with patch.dict(os.environ, {"SHOP_GROQ_KEY": "gsk-test"}):
        os.environ.pop("SHOP_WEBHOOK", None)
        business = load_business(str(config_file))
    assert business.admin_webhook_url == ""


@pytest.mark.unit
def test_missing_secret_exits(config_file):
    with patch.dict(os.environ, {}, clear=True):
        with pytest.raises(SystemExit, match="SHOP_GROQ_KEY"):
            load_business(str(config_file))


@pytest.mark.unit
def test_unset_or_missing_path_exits(tmp_path):
    with pytest.raises(SystemExit, match="BUSINESS_CONFIG"):
        load_business("")
    with pytest.raises(SystemExit, match="not found"):
        load_business(str(tmp_path / "nope.yaml"))


@pytest.mark.unit
def test_business_from_env_uses_defaults():
    with patch.dict(os.environ, {"GROQ_API_KEY": "gsk-env"}, clear=True):
        business = business_from_env()

    assert business.groq_api_key == "gsk-env"
    assert business.profile.name == "AI Assistant"
    assert business.max_messages == 20
    assert business.idle_threshold == timedelta(hours=24)


@pytest.mark.unit
def test_business_from_env_reads_conversation_limits():
    env = {"GROQ_API_KEY": "gsk-env", "CONVERSATION_MAX_MESSAGES": "8", "CONVERSATION_IDLE_HOURS": "2"}
    with patch.dict(os.environ, env, clear=True):
        business = business_from_env()

    assert business.max_messages == 8
    assert business.idle_threshold == timedelta(hours=2)


@pytest.mark.unit
def test_products_block_loads_into_catalog(tmp_path):
    path = tmp_path / "shop.yaml"
    path.write_text(YAML + """
products:
  - id: hotto-purto
    name: Hotto Purto
    price: 285000
    category: digestive_health
    aliases: [Purto]
""")
    with patch.dict(os.environ, {"SHOP_GROQ_KEY": "gsk-test"}):
        business = load_business(str(path))

    assert len(business.catalog) == 1
    product = business.catalog.get("hotto-purto")
    assert product.price == 285000
    assert product.aliases == ["purto"]


@pytest.mark.unit
def test_missing_products_block_gives_empty_catalog(config_file):
    with patch.dict(os.environ, {"SHOP_GROQ_KEY": "gsk-test"}):
        business = load_business(str(config_file))
    assert len(business.catalog) == 0


@pytest.mark.unit
@pytest.mark.parametrize("limits, match", [
    ("max_messages: 0", "max_messages"),
    ("max_messages: -3", "max_messages"),
    ("idle_hours: 0", "idle_hours"),
])
def test_non_positive_conversation_limits_in_yaml_exit(tmp_path, limits, match):
    path = tmp_path / "shop.yaml"
    path.write_text(YAML.replace("  max_messages: 10\n  idle_hours: 6\n", f"  {limits}\n"))
    with patch.dict(os.environ, {"SHOP_GROQ_KEY": "gsk-test"}):
        with pytest.raises(SystemExit, match=match):
            load_business(str(path))


@pytest.mark.unit
def test_zero_max_messages_in_env_exits():
    env = {"GROQ_API_KEY": "gsk-env", "CONVERSATION_MAX_MESSAGES": "0"}
    with patch.dict(os.environ, env, clear=True):
        with pytest.raises(SystemExit, match="max_messages"):
            business_from_env()


@pytest.mark.unit
def test_shipped_example_config_loads():
    """The example business file in the repo parses with a populated catalog."""
    path = os.path.join(os.path.dirname(__file__), "..", "..", "businesses", "example.yaml")
    with patch.dict(os.environ, {"GROQ_API_KEY": "gsk-test"}):
        business = load_business(path)

    assert business.business_id == "toko-sehat-batam"
    assert business.catalog.get("hotto-purto") is not None
    assert not business.catalog.get("mganik-superblend").in_stock
