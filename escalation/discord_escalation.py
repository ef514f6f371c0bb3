"""Discord escalation: notifies the shop admins via webhook."""

import logging
from typing import Mapping

from clients.discord import DiscordWebhookClient
from escalation.base_escalation import BaseEscalation

logger = logging.getLogger(__name__)


class DiscordEscalation(BaseEscalation):
    """Escalates by posting an embed to the admin Discord channel."""

    def __init__(self, client: DiscordWebhookClient, message_prefix: str = ""):
        self._client = client
        self._message_prefix = message_prefix

    def escalate(
        self,
        customer_id: str,
        summary: str,
        details: Mapping[str, str] | None = None,
    ) -> str:
        description = " ".join(p for p in [self._message_prefix, summary] if p)
        fields = {"Customer": customer_id, **(details or {})}

        try:
            response = self._client.send(description, fields=fields, title="Customer needs attention")
            if response.status_code in (200, 204):
                logger.info(
                    "Admin escalation for %s succeeded (status %d)", customer_id, response.status_code
                )
                return "Admins notified successfully. A team member will follow up with the customer shortly."
            logger.warning(
                "Admin escalation for %s returned unexpected status %d", customer_id, response.status_code
            )
            return (
                f"Notifying the admins returned an unexpected status ({response.status_code}). "
                "Ask the customer to contact the shop directly if nobody follows up."
            )
        except Exception as e:
            logger.exception("Admin escalation for %s failed: %s", customer_id, e)
            return (
                "Failed to notify the admins due to a technical error. "
                "Ask the customer to contact the shop directly."
            )
