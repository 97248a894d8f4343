"""Abstract interface for points and experience providers."""

from abc import ABC, abstractmethod

from discordhub.core.models import UserExpLevel
from discordhub.core.results import Ok, Rejected


class EconomyProvider(ABC):
    """Abstract base class for guild economy API providers.

    The service layer depends exclusively on this abstraction, never on
    a concrete HTTP client.  Every method is a coroutine performing one
    remote call; failures reported by the service are signalled with a
    ``None`` (or ``False``) return value rather than an exception.
    """

    @abstractmethod
    async def give_points(
        self, user_id: int, guild_id: int, amount: int
    ) -> int | None:
        """Add points to a user's balance.

        Args:
            user_id: The target user's identifier.
            guild_id: The guild the balance belongs to.
            amount: The number of points to add.

        Returns:
            The new balance, or ``None`` if the service rejected the call.
        """

    @abstractmethod
    async def remove_points(
        self, user_id: int, guild_id: int, amount: int
    ) -> int | None:
        """Remove points from a user's balance.

        Args:
            user_id: The target user's identifier.
            guild_id: The guild the balance belongs to.
            amount: The number of points to remove.

        Returns:
            The new balance, or ``None`` if the service rejected the call.
        """

    @abstractmethod
    async def get_balance(self, user_id: int, guild_id: int) -> int | None:
        """Return a user's current points balance.

        Args:
            user_id: The target user's identifier.
            guild_id: The guild the balance belongs to.

        Returns:
            The balance, or ``None`` if the service rejected the call.
        """

    @abstractmethod
    async def exchange_points(
        self, take_from: int, give_to: int, guild_id: int, amount: int
    ) -> None:
        """Move points from one user to another.

        Args:
            take_from: The user losing the points.
            give_to: The user receiving the points.
            guild_id: The guild both balances belong to.
            amount: The number of points moved.
        """

    @abstractmethod
    async def give_item(
        self, user_id: int, guild_id: int, item_id: int
    ) -> bool:
        """Grant a shop item to a user.

        Args:
            user_id: The target user's identifier.
            guild_id: The guild whose shop sells the item.
            item_id: The provider's item identifier (not a Discord role ID).

        Returns:
            ``True`` if the item was granted.
        """

    @abstractmethod
    async def give_exp(
        self, user_id: int, guild_id: int, amount: int
    ) -> int | None:
        """Add experience to a user.

        Returns:
            The user's new experience total, or ``None`` on rejection.
        """

    @abstractmethod
    async def remove_exp(
        self, user_id: int, guild_id: int, amount: int
    ) -> int | None:
        """Remove experience from a user.

        Returns:
            The user's new experience total, or ``None`` on rejection.
        """

    @abstractmethod
    async def get_exp_info(
        self, user_id: int, guild_id: int
    ) -> UserExpLevel | None:
        """Return a user's level, total experience and level progress.

        Returns:
            A :class:`UserExpLevel` snapshot, or ``None`` on rejection.
        """

    @abstractmethod
    async def request(self, operation: str, **params: int) -> Ok | Rejected:
        """Perform one named operation and return its tagged outcome.

        Unlike the convenience methods above, a service rejection is
        returned as :class:`Rejected` instead of being signalled with
        ``None``.

        Args:
            operation: The operation name (e.g. ``"give_points"``).
            **params: The operation's query parameters (``user_id``,
                ``server_id``, ``amount``, ``item_id``).

        Returns:
            :class:`Ok` with the typed payload, or :class:`Rejected`.
        """
