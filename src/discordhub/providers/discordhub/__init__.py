"""DiscordHub provider package."""

from discordhub.providers.discordhub.auth import ApiKeyAuth
from discordhub.providers.discordhub.client import DHClient

__all__ = ["ApiKeyAuth", "DHClient"]
