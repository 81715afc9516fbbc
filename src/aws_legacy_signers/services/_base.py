from collections.abc import Callable
from dataclasses import dataclass, field, replace
import logging
from typing import Generic, TypeAlias, TypeVar

from .._http import URI, AWSRequest, AWSRequestBuilder, Fields
from ..exceptions import ValidationError
from ..interfaces.http import HTTPResponse, HTTPTransport
from ..interfaces.identity import Identity
from ..signers import Signer, SigningProperties

logger = logging.getLogger(__name__)

T = TypeVar("T")

HTTPS = "https://"


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T


@dataclass(frozen=True)
class TransportFailure:
    """The response status didn't match what the operation expects."""

    status_code: int
    body: bytes = b""
    fields: Fields = field(default_factory=Fields)


Result: TypeAlias = Success[T] | TransportFailure


def _validate_nothing() -> None:
    pass


def _prepare_nothing(builder: AWSRequestBuilder) -> None:
    pass


def _no_value(response: HTTPResponse) -> None:
    return None


def response_body(response: HTTPResponse) -> bytes:
    return response.body


@dataclass(frozen=True, kw_only=True)
class Operation(Generic[T]):
    """One service call, as three plain functions run in a fixed order.

    :param method: HTTP method.
    :param expected_status: The only status treated as success.
    :param destination: Request path, or a complete URL that already names its
        host (e.g. an SQS queue URL).
    :param resource: Virtual host subdomain, usually an S3 bucket name.
    :param validate: Precondition checks. Raise ValidationError to abort.
    :param prepare: Adds headers, parameters and body to the request builder.
    :param success: Turns a matching response into the operation's value.
    """

    method: str
    expected_status: int
    destination: str = "/"
    resource: str | None = None
    validate: Callable[[], None] = _validate_nothing
    prepare: Callable[[AWSRequestBuilder], None] = _prepare_nothing
    success: Callable[[HTTPResponse], T] = _no_value  # type: ignore[assignment]


def normalize_endpoint(endpoint: str) -> URI:
    """Parse a service endpoint. Only https endpoints are allowed."""
    if not endpoint:
        raise ValidationError("The service endpoint cannot be empty.")
    if endpoint.startswith(HTTPS):
        endpoint = endpoint[len(HTTPS) :]
    elif "://" in endpoint:
        raise ValidationError(
            f"AWS endpoints must use {HTTPS} but received: {endpoint}"
        )
    uri = URI.from_string(f"{HTTPS}{endpoint.rstrip('/')}")
    if not uri.host:
        raise ValidationError(f"Invalid service endpoint: {endpoint}")
    return uri


class AWSService:
    """Runs operations through validate, prepare, sign and dispatch."""

    def __init__(
        self,
        *,
        signer: Signer,
        identity: Identity,
        endpoint: str,
        transport: HTTPTransport,
    ):
        self._signer = signer
        self._identity = identity
        self._endpoint = normalize_endpoint(endpoint)
        self._transport = transport

    @property
    def signer(self) -> Signer:
        return self._signer

    @property
    def endpoint(self) -> URI:
        return self._endpoint

    def prepare_request(
        self,
        operation: Operation[T],
        *,
        signing_properties: SigningProperties | None = None,
    ) -> AWSRequest:
        """Validate, build and sign the request for ``operation``."""
        operation.validate()
        builder = AWSRequestBuilder(
            operation.method, operation.destination, resource=operation.resource
        )
        operation.prepare(builder)
        request = builder.build()
        request = replace(request, destination=self._final_destination(request))
        return self._signer.sign(
            request=request,
            identity=self._identity,
            signing_properties=signing_properties,
        )

    def execute(
        self,
        operation: Operation[T],
        *,
        signing_properties: SigningProperties | None = None,
    ) -> Result[T]:
        request = self.prepare_request(
            operation, signing_properties=signing_properties
        )
        logger.debug("Sending %s %s", request.method, request.destination)
        response = self._transport.send(request)
        if response.status == operation.expected_status:
            return Success(operation.success(response))
        logger.warning(
            "%s %s returned status %s, expected %s",
            request.method,
            request.destination,
            response.status,
            operation.expected_status,
        )
        return TransportFailure(
            status_code=response.status, body=response.body, fields=response.fields
        )

    def _final_destination(self, request: AWSRequest) -> URI:
        destination = request.destination
        # A complete URL is trusted as given.
        if destination.host:
            return destination
        host = self._endpoint.host
        if request.resource is not None:
            host = f"{request.resource}.{host}"
        return URI(
            scheme="https",
            host=host,
            port=self._endpoint.port,
            path=destination.path,
            query=destination.query,
        )
