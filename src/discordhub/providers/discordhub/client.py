"""DiscordHub provider speaking the service's HTTPS/JSON API."""

import json
import logging
import os
import warnings
from typing import Any

import aiohttp

from discordhub.auth.interfaces import AuthProvider
from discordhub.core.events import ErrorEvent, ErrorHandler
from discordhub.core.exceptions import (
    AuthenticationRequiredError,
    ClientClosedError,
    MalformedResponseError,
)
from discordhub.core.interfaces import EconomyProvider
from discordhub.core.models import UserExpLevel
from discordhub.core.results import Ok, Rejected
from discordhub.providers.discordhub.auth import API_KEY_HEADER, ApiKeyAuth
from discordhub.providers.discordhub.endpoints import ENDPOINTS

logger = logging.getLogger(__name__)

_ENV_BASE_URL = "DISCORDHUB_BASE_URL"


class DHClient(EconomyProvider):
    """Asynchronous client for the DiscordHub points and ranking API.

    Every public operation performs exactly one HTTP request (except
    :meth:`exchange_points`, which performs two).  When the service answers
    with a non-success status, its ``message`` is broadcast to the handlers
    subscribed on :attr:`errored` and the operation returns ``None``;
    nothing is raised.  Callers that do not subscribe can still detect the
    failure by checking for ``None``, but lose the message text; use
    :class:`~discordhub.services.economy_service.EconomyService` to get it
    back as a value.

    Transport failures (:class:`aiohttp.ClientError`, timeouts) propagate
    unchanged.  A body that is not valid JSON, or that lacks the field an
    operation reads, raises
    :class:`~discordhub.core.exceptions.MalformedResponseError`.

    The client owns its :class:`aiohttp.ClientSession` unless one is
    injected, and releases it in :meth:`close`.  Use it as an async
    context manager::

        async with DHClient(api_key) as client:
            balance = await client.get_balance(user_id, guild_id)
    """

    BASE_URL = "https://discordhub.com/api"

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = BASE_URL,
        session: aiohttp.ClientSession | None = None,
    ):
        """Initialise the client.  No network I/O happens here.

        Args:
            api_key: The DiscordHub API key sent as ``X-API-KEY``.
            base_url: The API root.  Override only to target a test server.
            session: An externally managed session.  When given, the client
                uses it as-is and never closes it.
        """
        self._api_key = api_key
        self.base_url = base_url.rstrip("/")
        self._headers = {API_KEY_HEADER: api_key}
        self._session = session
        self._owns_session = session is None
        self._closed = False
        self.errored = ErrorEvent()

    @classmethod
    def from_auth(cls, auth: AuthProvider, **kwargs: Any) -> "DHClient":
        """Build a client from an :class:`AuthProvider`.

        Args:
            auth: Provider whose credentials include an ``X-API-KEY`` header.
            **kwargs: Passed verbatim to the constructor.

        Raises:
            AuthenticationRequiredError: If the provider has no API key.
        """
        api_key = auth.get_credentials().headers.get(API_KEY_HEADER)
        if not api_key:
            raise AuthenticationRequiredError(
                f"Credentials carry no {API_KEY_HEADER} header."
            )
        return cls(api_key, **kwargs)

    @classmethod
    def from_env(cls, api_key: str | None = None) -> "DHClient":
        """Build a client from the environment.

        The key is resolved by :class:`ApiKeyAuth`; the base URL comes from
        ``DISCORDHUB_BASE_URL`` when set.
        """
        return cls.from_auth(
            ApiKeyAuth(api_key),
            base_url=os.getenv(_ENV_BASE_URL) or cls.BASE_URL,
        )

    @property
    def api_key(self) -> str:
        return self._api_key

    @property
    def closed(self) -> bool:
        return self._closed

    def on_error(self, handler: ErrorHandler) -> ErrorHandler:
        """Subscribe ``handler`` to service error messages (decorator-friendly)."""
        return self.errored.subscribe(handler)

    # -------------------------
    # Points
    # -------------------------

    async def give_points(
        self, user_id: int, guild_id: int, amount: int
    ) -> int | None:
        """Add points to a user.

        Returns:
            The user's new balance, or ``None`` if the service rejected
            the call.
        """
        return await self._call(
            "give_points", user_id=user_id, server_id=guild_id, amount=amount
        )

    async def remove_points(
        self, user_id: int, guild_id: int, amount: int
    ) -> int | None:
        """Remove points from a user.

        Returns:
            The user's new balance, or ``None`` if the service rejected
            the call.
        """
        return await self._call(
            "remove_points", user_id=user_id, server_id=guild_id, amount=amount
        )

    async def get_balance(self, user_id: int, guild_id: int) -> int | None:
        """Return a user's points balance, or ``None`` on rejection."""
        return await self._call(
            "get_balance", user_id=user_id, server_id=guild_id
        )

    async def exchange_points(
        self, take_from: int, give_to: int, guild_id: int, amount: int
    ) -> None:
        """Move points from ``take_from`` to ``give_to``.

        Removal completes before the grant starts.  The two calls are
        independent: the grant is attempted even if the removal was
        rejected, and a rejected grant does not restore the removed
        points.  Each step reports its own failure on :attr:`errored`.
        The transfer is not atomic.
        """
        await self.remove_points(take_from, guild_id, amount)
        await self.give_points(give_to, guild_id, amount)

    # -------------------------
    # Shop
    # -------------------------

    async def give_item(
        self, user_id: int, guild_id: int, item_id: int
    ) -> bool:
        """Grant a shop item to a user.

        Args:
            user_id: The target user.
            guild_id: The guild whose shop sells the item.
            item_id: The DiscordHub item ID (not the Discord role ID).

        Returns:
            ``True`` when the service's message starts with
            ``"Successfully"``.  Any other message on a success status is
            ``False`` without a notification; a failure status notifies
            and returns ``False``.
        """
        granted = await self._call(
            "give_item", user_id=user_id, server_id=guild_id, item_id=item_id
        )
        return bool(granted)

    # -------------------------
    # Ranking
    # -------------------------

    async def give_exp(
        self, user_id: int, guild_id: int, amount: int
    ) -> int | None:
        """Add experience to a user; returns the new total or ``None``."""
        return await self._call(
            "give_exp", user_id=user_id, server_id=guild_id, amount=amount
        )

    async def remove_exp(
        self, user_id: int, guild_id: int, amount: int
    ) -> int | None:
        """Remove experience from a user; returns the new total or ``None``."""
        return await self._call(
            "remove_exp", user_id=user_id, server_id=guild_id, amount=amount
        )

    async def get_exp_info(
        self, user_id: int, guild_id: int
    ) -> UserExpLevel | None:
        """Return the user's level, experience and level progress."""
        return await self._call(
            "get_exp_info", user_id=user_id, server_id=guild_id
        )

    async def get_all_users(self, guild_id: int) -> str | None:
        """Return the raw body of the guild user listing.

        .. deprecated::
            The endpoint is non-functional on the live service and only
            answers with errors.  Kept for compatibility.
        """
        warnings.warn(
            "get_all_users targets an endpoint that only returns errors",
            DeprecationWarning,
            stacklevel=2,
        )
        return await self._call("get_all_users", server_id=guild_id)

    # -------------------------
    # Requests
    # -------------------------

    async def request(self, operation: str, **params: int) -> Ok | Rejected:
        """Perform one operation and return its tagged outcome.

        The error channel is not involved: a rejection is returned as a
        :class:`~discordhub.core.results.Rejected` value.

        Args:
            operation: A key of
                :data:`~discordhub.providers.discordhub.endpoints.ENDPOINTS`
                (e.g. ``"give_points"``).
            **params: The endpoint's query parameters as integers.

        Returns:
            :class:`Ok` with the extracted value on a 2xx status, otherwise
            :class:`Rejected` with the service message.

        Raises:
            ValueError: If ``operation`` is unknown or a parameter is out of
                range.
            TypeError: If a parameter is missing or not an ``int``.
            ClientClosedError: If :meth:`close` has been called.
            MalformedResponseError: If the body cannot be decoded.
            aiohttp.ClientError: On transport failure.
        """
        endpoint = ENDPOINTS.get(operation)
        if endpoint is None:
            raise ValueError(f"Unknown DiscordHub operation: {operation!r}")
        query = endpoint.query(**params)
        session = self._get_session()

        logger.debug("%s %s %s", endpoint.method, endpoint.path, query)
        async with session.request(
            endpoint.method,
            f"{self.base_url}{endpoint.path}",
            params=query,
            headers=self._headers,
        ) as response:
            status = response.status
            body = await response.read()

        text = self._text(body, status)

        if 200 <= status < 300:
            payload = text if endpoint.raw else self._decode(text, status)
            try:
                return Ok(endpoint.extract(payload))
            except (KeyError, TypeError, ValueError) as e:
                raise MalformedResponseError(
                    f"Unexpected {endpoint.path} response: {e}", status, text
                ) from e

        message = self._error_message(self._decode(text, status), status, text)
        logger.warning(
            "DiscordHub rejected %s (HTTP %s): %s", endpoint.path, status, message
        )
        return Rejected(message, status)

    async def _call(self, operation: str, **params: int) -> Any:
        result = await self.request(operation, **params)
        if isinstance(result, Rejected):
            await self.errored.emit(result.message)
        return result.value_or_none()

    def _get_session(self) -> aiohttp.ClientSession:
        if self._closed:
            raise ClientClosedError("DHClient has been closed")
        if self._session is None:
            self._session = aiohttp.ClientSession()
        return self._session

    @staticmethod
    def _text(body: bytes, status: int) -> str:
        try:
            return body.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedResponseError(
                f"Response body is not UTF-8 (HTTP {status})",
                status,
                body.decode("utf-8", "replace"),
            ) from e

    @staticmethod
    def _decode(text: str, status: int) -> Any:
        try:
            return json.loads(text)
        except ValueError as e:
            raise MalformedResponseError(
                f"Response body is not JSON (HTTP {status})", status, text
            ) from e

    @staticmethod
    def _error_message(data: Any, status: int, text: str) -> str:
        message = data.get("message") if isinstance(data, dict) else None
        if message is None:
            raise MalformedResponseError(
                f"Error response carries no message (HTTP {status})",
                status,
                text,
            )
        return str(message)

    # -------------------------
    # Lifecycle
    # -------------------------

    async def close(self) -> None:
        """Release the owned HTTP session.  Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        if self._owns_session and self._session is not None:
            await self._session.close()

    async def __aenter__(self) -> "DHClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
