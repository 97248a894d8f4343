"""Where DHClient gets its API key from.

DiscordHub authenticates every call with one static key sent in the
``X-API-KEY`` header.  The client only sees the headers produced here,
never the environment variable or credentials file behind them.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass
class AuthCredentials:
    """Headers that identify the caller to DiscordHub.

    Attributes:
        headers: Sent unchanged with each request, normally just
            ``{"X-API-KEY": <key>}``.
    """

    headers: dict[str, str] = field(default_factory=dict)


class AuthProvider(ABC):
    """Resolves the API key for :meth:`DHClient.from_auth`.

    ``ApiKeyAuth`` is the implementation shipped with the package::

        client = DHClient.from_auth(ApiKeyAuth())
    """

    @abstractmethod
    def get_credentials(self) -> AuthCredentials:
        """Look up the key and wrap it in request headers.

        Raises:
            AuthenticationRequiredError: If no key is configured.
        """

    @abstractmethod
    def is_authenticated(self) -> bool:
        """Report whether a key is configured, without raising."""
