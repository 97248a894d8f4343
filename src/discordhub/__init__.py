"""Async client for the DiscordHub points and ranking API."""

from discordhub.core.models import ExchangeOutcome, UserExpLevel
from discordhub.core.results import Ok, Rejected, Result, TransportFailed
from discordhub.providers.discordhub import ApiKeyAuth, DHClient
from discordhub.services.economy_service import EconomyService

__all__ = [
    "ApiKeyAuth",
    "DHClient",
    "EconomyService",
    "ExchangeOutcome",
    "Ok",
    "Rejected",
    "Result",
    "TransportFailed",
    "UserExpLevel",
]
