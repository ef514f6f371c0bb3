"""Discord webhook wrapper used to reach the shop admins."""

from typing import Mapping

from discord_webhook import DiscordEmbed, DiscordWebhook

DEFAULT_USERNAME = "Shop Assistant"
EMBED_COLOR = "25d366"


class DiscordWebhookClient:
    def __init__(self, webhook_url: str, role_id: str = "", username: str = DEFAULT_USERNAME):
        self.webhook_url = webhook_url
        self.role_id = role_id
        self.username = username

    def send(
        self,
        message: str,
        fields: Mapping[str, str] | None = None,
        title: str | None = None,
    ):
        """Post a message; with fields or a title it is sent as an embed."""
        if self.role_id:
            mention = f"<@&{self.role_id}>"
            allowed_mentions = {"roles": [self.role_id]}
        else:
            mention = ""
            allowed_mentions = {"parse": []}

        if not fields and not title:
            content = f"{mention} {message}" if mention else message
            webhook = DiscordWebhook(
                url=self.webhook_url,
                username=self.username,
                content=content,
                allowed_mentions=allowed_mentions,
            )
            return webhook.execute()

        webhook = DiscordWebhook(
            url=self.webhook_url,
            username=self.username,
            content=mention,
            allowed_mentions=allowed_mentions,
        )
        embed = DiscordEmbed(title=title or "Notification", description=message, color=EMBED_COLOR)
        for name, value in (fields or {}).items():
            embed.add_embed_field(name=name, value=str(value) or "-", inline=False)
        embed.set_timestamp()
        webhook.add_embed(embed)
        return webhook.execute()
