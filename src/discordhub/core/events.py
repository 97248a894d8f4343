"""Broadcast channel used by the client to report rejected calls."""

import inspect
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

ErrorHandler = Callable[[str], Awaitable[None] | None]


class ErrorEvent:
    """Ordered list of handlers notified with a service error message.

    Handlers may be plain functions or coroutine functions.  On
    :meth:`emit` every handler runs in subscription order, and coroutine
    handlers are awaited before the next one starts.  An exception raised
    by a handler propagates to the caller of :meth:`emit`.

    Example usage::

        client = DHClient(api_key)

        @client.on_error
        async def report(message: str) -> None:
            await channel.send(message)
    """

    def __init__(self) -> None:
        self._handlers: list[ErrorHandler] = []

    def subscribe(self, handler: ErrorHandler) -> ErrorHandler:
        """Register ``handler`` and return it (usable as a decorator)."""
        self._handlers.append(handler)
        return handler

    def unsubscribe(self, handler: ErrorHandler) -> None:
        """Remove a previously registered handler.

        Raises:
            ValueError: If ``handler`` was never subscribed.
        """
        self._handlers.remove(handler)

    def __len__(self) -> int:
        return len(self._handlers)

    async def emit(self, message: str) -> None:
        """Deliver ``message`` to every handler.

        With no handlers registered the message is dropped.
        """
        if not self._handlers:
            logger.debug("No error handler subscribed; dropping %r", message)
            return
        for handler in list(self._handlers):
            outcome = handler(message)
            if inspect.isawaitable(outcome):
                await outcome
