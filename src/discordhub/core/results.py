"""Tagged results for service calls.

Every operation ends in exactly one of three shapes:

* :class:`Ok`: the service accepted the call; ``value`` holds the payload.
* :class:`Rejected`: the service answered with a non-success status and
  an explanatory ``message``.
* :class:`TransportFailed`: the request never produced an answer (DNS,
  refused connection, timeout).  ``cause`` is the original exception.
"""

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from discordhub.core.exceptions import ServiceRejectedError, TransportError

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """A successful call."""

    value: T

    @property
    def ok(self) -> bool:
        return True

    def value_or_none(self) -> T:
        return self.value

    def unwrap(self) -> T:
        """Return the payload."""
        return self.value


@dataclass(frozen=True)
class Rejected:
    """A call the service refused."""

    message: str
    status: int

    @property
    def ok(self) -> bool:
        return False

    def value_or_none(self) -> None:
        return None

    def unwrap(self):
        """Raise :class:`ServiceRejectedError` with the service message."""
        raise ServiceRejectedError(self.message, self.status)


@dataclass(frozen=True)
class TransportFailed:
    """A call that failed before the service could answer."""

    cause: BaseException

    @property
    def ok(self) -> bool:
        return False

    @property
    def message(self) -> str:
        return str(self.cause) or type(self.cause).__name__

    def value_or_none(self) -> None:
        return None

    def unwrap(self):
        """Raise :class:`TransportError` chained to the original cause."""
        raise TransportError(self.message) from self.cause


Result = Union[Ok[T], Rejected, TransportFailed]
"""Any outcome of a service call carrying a payload of type ``T``."""
