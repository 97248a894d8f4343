"""Wire-level description of every DiscordHub operation.

Each :class:`Endpoint` pairs an HTTP method and resource path with the
query parameters it takes and the function that turns a successful JSON
body into the operation's typed value.  The client walks this table for
every call, so no endpoint-specific request code lives anywhere else.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from discordhub.core.models import UserExpLevel, as_uint

_UINT64_MAX = 2**64 - 1
_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1

# Extractors receive the response text already decoded as JSON, or the
# raw text for endpoints marked ``raw``.
Extractor = Callable[[Any], Any]


def _uint_field(name: str) -> Extractor:
    def extract(data: Any) -> int:
        return as_uint(data[name])

    extract.__name__ = f"extract_{name}"
    return extract


def _granted(data: Any) -> bool:
    message = data["message"]
    if not isinstance(message, str):
        raise ValueError(f"'message' is not a string: {message!r}")
    return message.startswith("Successfully")


def _raw_text(text: str) -> str:
    return text


@dataclass(frozen=True)
class Endpoint:
    """A single remote operation."""

    method: str
    path: str
    params: tuple[str, ...]
    extract: Extractor
    raw: bool = False
    """When ``True`` the success body is handed over undecoded."""

    def query(self, **values: int) -> dict[str, str]:
        """Render keyword arguments as the endpoint's query string.

        Args:
            **values: One integer per name in :attr:`params`.

        Returns:
            A mapping of query parameter names to decimal strings.

        Raises:
            TypeError: If a parameter is missing, unexpected or not an int.
            ValueError: If an identifier is outside the unsigned 64-bit range
                or an amount outside the signed 32-bit range.
        """
        if set(values) != set(self.params):
            raise TypeError(
                f"{self.path} takes {', '.join(self.params)}; "
                f"got {', '.join(sorted(values)) or 'nothing'}"
            )
        rendered: dict[str, str] = {}
        for name in self.params:
            value = values[name]
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"{name} must be an int, got {value!r}")
            if name == "amount":
                low, high = _INT32_MIN, _INT32_MAX
            else:
                low, high = 0, _UINT64_MAX
            if not low <= value <= high:
                raise ValueError(f"{name}={value} is out of range")
            rendered[name] = str(value)
        return rendered


_USER = ("user_id", "server_id")
_USER_AMOUNT = ("user_id", "server_id", "amount")

ENDPOINTS: dict[str, Endpoint] = {
    "give_points": Endpoint(
        "POST", "/points/add", _USER_AMOUNT, _uint_field("points")
    ),
    "remove_points": Endpoint(
        "POST", "/points/remove", _USER_AMOUNT, _uint_field("points")
    ),
    "get_balance": Endpoint(
        "GET", "/points/balance", _USER, _uint_field("points")
    ),
    "give_item": Endpoint(
        "POST", "/item/give", ("user_id", "server_id", "item_id"), _granted
    ),
    "give_exp": Endpoint(
        "POST", "/ranking/exp/add", _USER_AMOUNT, _uint_field("exp")
    ),
    "remove_exp": Endpoint(
        "POST", "/ranking/exp/remove", _USER_AMOUNT, _uint_field("exp")
    ),
    "get_exp_info": Endpoint(
        "GET", "/ranking/user/info", _USER, UserExpLevel.from_payload
    ),
    # Documented upstream as non-functional; it only ever returns errors.
    "get_all_users": Endpoint(
        "POST", "/ranking/user/all/ids", ("server_id",), _raw_text, raw=True
    ),
}
