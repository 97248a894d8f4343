"""Data model dataclasses returned by the DiscordHub provider."""

from dataclasses import dataclass
from typing import Any

from discordhub.core.results import Result


# ----------------------
# Experience
# ----------------------


@dataclass(frozen=True)
class UserExpLevel:
    """Snapshot of a user's ranking progress in a guild."""

    level: int
    total_exp: int
    """Experience accumulated since the user joined the ranking."""

    exp_percent: int
    """Completion percentage (0–100) of the current level."""

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> "UserExpLevel":
        """Build a record from the ``/ranking/user/info`` response body.

        Args:
            data: The decoded JSON object.

        Returns:
            A :class:`UserExpLevel` instance.

        Raises:
            KeyError: If one of ``lvl``, ``total_exp`` or ``exp_percent``
                is missing.
            ValueError: If a field is not an integer.
        """
        return cls(
            level=as_uint(data["lvl"]),
            total_exp=as_uint(data["total_exp"]),
            exp_percent=as_uint(data["exp_percent"]),
        )


def as_uint(value: Any) -> int:
    """Return a JSON number as a non-negative integer.

    Integral floats such as ``5.0`` are accepted; bools, fractions,
    strings and negative numbers are not.

    Raises:
        ValueError: If ``value`` is not an unsigned integer.
    """
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    # bool is an int subclass but never a valid counter.
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"expected an unsigned integer, got {value!r}")
    return value


# ----------------------
# Exchange
# ----------------------


@dataclass(frozen=True)
class ExchangeOutcome:
    """Result of moving points from one user to another.

    The transfer is two independent service calls, so it can stop half
    way.  ``given`` is ``None`` when the grant was never attempted because
    the removal did not succeed.
    """

    removed: Result[int]
    given: Result[int] | None

    @property
    def ok(self) -> bool:
        """``True`` when both the removal and the grant succeeded."""
        return self.removed.ok and self.given is not None and self.given.ok

    @property
    def partial(self) -> bool:
        """``True`` when points left the source but never reached the target."""
        return self.removed.ok and (self.given is None or not self.given.ok)
