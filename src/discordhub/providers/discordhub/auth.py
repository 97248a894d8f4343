"""DiscordHub API-key authentication.

The service authenticates every request with a static key sent in the
``X-API-KEY`` header.  :class:`ApiKeyAuth` resolves that key from, in
order (first match wins):

1. The value passed to the constructor.
2. The ``DISCORDHUB_API_KEY`` environment variable.
3. The key stored in ``~/.config/discordhub/credentials.json``.
"""

import os

from discordhub.auth.credentials import credentials_path, load as _load_stored
from discordhub.auth.interfaces import AuthCredentials, AuthProvider
from discordhub.core.exceptions import AuthenticationRequiredError

API_KEY_HEADER = "X-API-KEY"

_ENV_API_KEY = "DISCORDHUB_API_KEY"


class ApiKeyAuth(AuthProvider):
    """Resolves the DiscordHub API key from multiple sources."""

    def __init__(self, api_key: str | None = None):
        """Initialise the auth provider.

        Args:
            api_key: The API key.  When provided, the environment and the
                stored file are skipped.
        """
        self._api_key = api_key

    def get_credentials(self) -> AuthCredentials:
        """Return the API key as an ``X-API-KEY`` header.

        Raises:
            AuthenticationRequiredError: If no key is configured anywhere.
        """
        key = self._resolve()
        if key is None:
            raise AuthenticationRequiredError(
                "DiscordHub API key not found. "
                "Run 'dhub auth setup' or set DISCORDHUB_API_KEY."
            )
        return AuthCredentials(headers={API_KEY_HEADER: key})

    def is_authenticated(self) -> bool:
        return self._resolve() is not None

    def credential_source(self) -> str:
        """Return a human-readable description of where the key came from.

        Returns:
            ``"constructor"``, ``"environment variable"``, the credentials
            file path, or ``"not configured"``.
        """
        if self._api_key:
            return "constructor"
        if os.getenv(_ENV_API_KEY):
            return f"environment variable ({_ENV_API_KEY})"
        if _load_stored():
            return str(credentials_path())
        return "not configured"

    def _resolve(self) -> str | None:
        return self._api_key or os.getenv(_ENV_API_KEY) or _load_stored()
