"""Service layer returning tagged results for every economy operation."""

import asyncio
import logging

import aiohttp

from discordhub.core.interfaces import EconomyProvider
from discordhub.core.models import ExchangeOutcome, UserExpLevel
from discordhub.core.results import Result, TransportFailed

logger = logging.getLogger(__name__)


class EconomyService:
    """Exposes the provider's operations as :data:`Result` values.

    Each method returns :class:`~discordhub.core.results.Ok`,
    :class:`~discordhub.core.results.Rejected` (with the service message)
    or :class:`~discordhub.core.results.TransportFailed` (with the
    original exception), so callers can tell "the service said no" from
    "the service could not be reached" without subscribing to anything.
    Malformed response bodies still raise
    :class:`~discordhub.core.exceptions.MalformedResponseError`.
    """

    def __init__(self, provider: EconomyProvider):
        """Initialise the service.

        Args:
            provider: A concrete implementation of :class:`EconomyProvider`.
        """
        self.provider = provider

    async def give_points(
        self, user_id: int, guild_id: int, amount: int
    ) -> Result[int]:
        """Add points; ``Ok`` carries the new balance."""
        return await self._run(
            "give_points", user_id=user_id, server_id=guild_id, amount=amount
        )

    async def remove_points(
        self, user_id: int, guild_id: int, amount: int
    ) -> Result[int]:
        """Remove points; ``Ok`` carries the new balance."""
        return await self._run(
            "remove_points", user_id=user_id, server_id=guild_id, amount=amount
        )

    async def get_balance(self, user_id: int, guild_id: int) -> Result[int]:
        return await self._run(
            "get_balance", user_id=user_id, server_id=guild_id
        )

    async def exchange_points(
        self, take_from: int, give_to: int, guild_id: int, amount: int
    ) -> ExchangeOutcome:
        """Move points from ``take_from`` to ``give_to``.

        The grant is only attempted once the removal has succeeded.  If the
        grant then fails, the outcome is marked
        :attr:`~discordhub.core.models.ExchangeOutcome.partial`: the points
        are gone from the source and no compensating call is made.

        Args:
            take_from: The user losing the points.
            give_to: The user receiving the points.
            guild_id: The guild both balances belong to.
            amount: The number of points moved.

        Returns:
            An :class:`ExchangeOutcome` holding both step results.
        """
        removed = await self.remove_points(take_from, guild_id, amount)
        if not removed.ok:
            return ExchangeOutcome(removed=removed, given=None)

        given = await self.give_points(give_to, guild_id, amount)
        if not given.ok:
            logger.error(
                "Exchange in guild %d left %d points removed from %d but "
                "not granted to %d: %s",
                guild_id,
                amount,
                take_from,
                give_to,
                given.message,
            )
        return ExchangeOutcome(removed=removed, given=given)

    async def give_item(
        self, user_id: int, guild_id: int, item_id: int
    ) -> Result[bool]:
        """Grant a shop item.

        ``Ok(False)`` means the service answered successfully but did not
        grant the item; it is not a rejection.
        """
        return await self._run(
            "give_item", user_id=user_id, server_id=guild_id, item_id=item_id
        )

    async def give_exp(
        self, user_id: int, guild_id: int, amount: int
    ) -> Result[int]:
        return await self._run(
            "give_exp", user_id=user_id, server_id=guild_id, amount=amount
        )

    async def remove_exp(
        self, user_id: int, guild_id: int, amount: int
    ) -> Result[int]:
        return await self._run(
            "remove_exp", user_id=user_id, server_id=guild_id, amount=amount
        )

    async def get_exp_info(
        self, user_id: int, guild_id: int
    ) -> Result[UserExpLevel]:
        return await self._run(
            "get_exp_info", user_id=user_id, server_id=guild_id
        )

    async def _run(self, operation: str, **params: int) -> Result:
        try:
            return await self.provider.request(operation, **params)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning("DiscordHub %s failed in transport: %r", operation, e)
            return TransportFailed(e)
