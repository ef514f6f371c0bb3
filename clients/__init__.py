from clients.discord import DiscordWebhookClient

__all__ = ["DiscordWebhookClient"]
