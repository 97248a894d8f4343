"""Domain exceptions for the discordhub library."""


class DiscordHubError(Exception):
    """Base class for all discordhub library exceptions."""


class AuthenticationRequiredError(DiscordHubError):
    """Raised when no API key can be resolved for the client.

    The auth provider raises this exception when neither the constructor,
    the environment nor the credentials file supplies a key.  The caller
    (CLI or application) is responsible for telling the user how to
    configure one.
    """


class ClientClosedError(DiscordHubError):
    """Raised when a request is issued on a client that has been closed."""


class MalformedResponseError(DiscordHubError):
    """Raised when the service answers with a body the client cannot decode.

    Covers bodies that are not JSON as well as JSON documents lacking the
    field an operation reads.

    Attributes:
        status: HTTP status code of the offending response.
        body: The raw response text.
    """

    def __init__(self, message: str, status: int, body: str):
        super().__init__(message)
        self.status = status
        self.body = body


class ServiceRejectedError(DiscordHubError):
    """Raised when unwrapping a result the service rejected.

    Attributes:
        status: HTTP status code returned by the service.
    """

    def __init__(self, message: str, status: int):
        super().__init__(message)
        self.status = status


class TransportError(DiscordHubError):
    """Raised when unwrapping a result whose request never got an answer."""
