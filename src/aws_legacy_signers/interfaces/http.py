from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from .._http import AWSRequest, Fields


class HTTPResponse(Protocol):
    """The parts of a response the service clients classify on."""

    @property
    def status(self) -> int: ...

    @property
    def fields(self) -> "Fields": ...

    @property
    def body(self) -> bytes: ...


class HTTPTransport(Protocol):
    """Sends a signed request and returns the response.

    Connection handling, timeouts and retries belong to the implementation.
    """

    def send(self, request: "AWSRequest") -> HTTPResponse: ...
