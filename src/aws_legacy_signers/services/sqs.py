from collections.abc import Callable
import re
from typing import TYPE_CHECKING

from .._http import URI, AWSRequestBuilder
from ..exceptions import ValidationError
from ..interfaces.http import HTTPTransport
from ..interfaces.identity import Identity
from ..signers import QuerySigner
from ._base import AWSService, Operation, Result, response_body
from .regions import SQSRegion

if TYPE_CHECKING:
    from ..config import SignerSettings

# Visibility timeouts can be at most 12 hours.
SQS_MAX_VISIBILITY_TIMEOUT = 43200
SQS_MAX_LONG_POLL_WAIT_SECONDS = 20
SQS_MAX_MESSAGES_PER_REQUEST = 10

SQS_ACTION_PARAM = "Action"
SQS_QUEUE_NAME_PARAM = "QueueName"
SQS_QUEUE_NAME_PREFIX_PARAM = "QueueNamePrefix"
SQS_MESSAGE_BODY_PARAM = "MessageBody"
SQS_RECEIPT_HANDLE_PARAM = "ReceiptHandle"
SQS_VISIBILITY_TIMEOUT_PARAM = "VisibilityTimeout"
SQS_WAIT_TIME_SECONDS_PARAM = "WaitTimeSeconds"
SQS_MAX_MESSAGES_PARAM = "MaxNumberOfMessages"

SQS_ACTION_LIST_QUEUES = "ListQueues"
SQS_ACTION_CREATE_QUEUE = "CreateQueue"
SQS_ACTION_DELETE_QUEUE = "DeleteQueue"
SQS_ACTION_SEND_MESSAGE = "SendMessage"
SQS_ACTION_RECEIVE_MESSAGE = "ReceiveMessage"
SQS_ACTION_DELETE_MESSAGE = "DeleteMessage"
SQS_ACTION_CHANGE_VISIBILITY = "ChangeMessageVisibility"

# Alphanumerics, hyphens and underscores, 1 to 80 characters.
VALID_QUEUE_NAME = re.compile(r"[A-Za-z0-9_\-]{1,80}")


def is_valid_queue_name(queue_name: str) -> bool:
    return VALID_QUEUE_NAME.fullmatch(queue_name) is not None


def validate_queue_name(queue_name: str | None) -> None:
    if queue_name is None:
        raise ValidationError("Queue name cannot be None.")
    if not is_valid_queue_name(queue_name):
        raise ValidationError(
            f"Invalid queue name {queue_name!r}, did not match expected "
            "queue name pattern."
        )


def validate_queue_url(queue_url: str | None) -> None:
    if not queue_url:
        raise ValidationError("Queue URL cannot be empty.")
    if not URI.from_string(queue_url).host:
        raise ValidationError(f"Queue URL must be absolute: {queue_url!r}")
    if not queue_url.lower().startswith("https://"):
        raise ValidationError(f"Queue URL must use https://: {queue_url!r}")


def check_bound(name: str, value: int, *, lower: int, upper: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be an integer, got {value!r}.")
    if not lower <= value <= upper:
        raise ValidationError(
            f"{name} must be between {lower} and {upper}, got {value}."
        )


class SQSClient:
    """Message queue calls signed with the query API Signature Version 2.

    Successful calls return the raw XML response body.
    """

    def __init__(
        self,
        *,
        identity: Identity,
        transport: HTTPTransport,
        region: SQSRegion = SQSRegion.DEFAULT,
        signer: QuerySigner | None = None,
    ):
        self._service = AWSService(
            signer=signer or QuerySigner(),
            identity=identity,
            endpoint=region.api_endpoint,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls, settings: "SignerSettings", transport: HTTPTransport
    ) -> "SQSClient":
        return cls(
            identity=settings.identity(),
            transport=transport,
            region=settings.sqs_region,
        )

    @property
    def service(self) -> AWSService:
        return self._service

    def _post(
        self,
        action: str,
        *,
        queue_url: str | None = None,
        needs_queue_url: bool = True,
        validate: Callable[[], None] | None = None,
        params: tuple[tuple[str, str | None], ...] = (),
    ) -> Result[bytes]:
        def prepare(builder: AWSRequestBuilder) -> None:
            builder.add_parameter(SQS_ACTION_PARAM, action)
            for name, value in params:
                builder.add_parameter(name, value, optional=True)

        def validate_all() -> None:
            if needs_queue_url:
                validate_queue_url(queue_url)
            if validate is not None:
                validate()

        return self._service.execute(
            Operation(
                method="POST",
                expected_status=200,
                destination=queue_url or "/",
                validate=validate_all,
                prepare=prepare,
                success=response_body,
            )
        )

    def list_queues(self, prefix: str | None = None) -> Result[bytes]:
        return self._post(
            SQS_ACTION_LIST_QUEUES,
            needs_queue_url=False,
            params=((SQS_QUEUE_NAME_PREFIX_PARAM, prefix),),
        )

    def create_queue(
        self, queue_name: str, default_visibility_timeout: int | None = None
    ) -> Result[bytes]:
        def validate() -> None:
            validate_queue_name(queue_name)
            if default_visibility_timeout is not None:
                check_bound(
                    SQS_VISIBILITY_TIMEOUT_PARAM,
                    default_visibility_timeout,
                    lower=0,
                    upper=SQS_MAX_VISIBILITY_TIMEOUT,
                )

        params: tuple[tuple[str, str | None], ...] = (
            (SQS_QUEUE_NAME_PARAM, queue_name),
        )
        if default_visibility_timeout is not None:
            params += (
                ("Attribute.1.Name", SQS_VISIBILITY_TIMEOUT_PARAM),
                ("Attribute.1.Value", str(default_visibility_timeout)),
            )
        return self._post(
            SQS_ACTION_CREATE_QUEUE,
            needs_queue_url=False,
            validate=validate,
            params=params,
        )

    def delete_queue(self, queue_url: str) -> Result[bytes]:
        return self._post(SQS_ACTION_DELETE_QUEUE, queue_url=queue_url)

    def send_message(self, queue_url: str, message: str) -> Result[bytes]:
        def validate() -> None:
            if message is None:
                raise ValidationError("Message body cannot be None.")

        return self._post(
            SQS_ACTION_SEND_MESSAGE,
            queue_url=queue_url,
            validate=validate,
            params=((SQS_MESSAGE_BODY_PARAM, message),),
        )

    def receive_message(
        self,
        queue_url: str,
        wait_time_seconds: int | None = None,
        max_number_of_messages: int | None = None,
    ) -> Result[bytes]:
        """Receive messages, long polling up to ``wait_time_seconds``."""

        def validate() -> None:
            if wait_time_seconds is not None:
                check_bound(
                    SQS_WAIT_TIME_SECONDS_PARAM,
                    wait_time_seconds,
                    lower=0,
                    upper=SQS_MAX_LONG_POLL_WAIT_SECONDS,
                )
            if max_number_of_messages is not None:
                check_bound(
                    SQS_MAX_MESSAGES_PARAM,
                    max_number_of_messages,
                    lower=1,
                    upper=SQS_MAX_MESSAGES_PER_REQUEST,
                )

        return self._post(
            SQS_ACTION_RECEIVE_MESSAGE,
            queue_url=queue_url,
            validate=validate,
            params=(
                (SQS_WAIT_TIME_SECONDS_PARAM, _optional_str(wait_time_seconds)),
                (SQS_MAX_MESSAGES_PARAM, _optional_str(max_number_of_messages)),
            ),
        )

    def delete_message(self, queue_url: str, receipt_handle: str) -> Result[bytes]:
        return self._post(
            SQS_ACTION_DELETE_MESSAGE,
            queue_url=queue_url,
            validate=lambda: _require(receipt_handle, "Receipt handle"),
            params=((SQS_RECEIPT_HANDLE_PARAM, receipt_handle),),
        )

    def change_message_visibility(
        self, queue_url: str, receipt_handle: str, visibility_timeout: int
    ) -> Result[bytes]:
        def validate() -> None:
            _require(receipt_handle, "Receipt handle")
            check_bound(
                SQS_VISIBILITY_TIMEOUT_PARAM,
                visibility_timeout,
                lower=0,
                upper=SQS_MAX_VISIBILITY_TIMEOUT,
            )

        return self._post(
            SQS_ACTION_CHANGE_VISIBILITY,
            queue_url=queue_url,
            validate=validate,
            params=(
                (SQS_RECEIPT_HANDLE_PARAM, receipt_handle),
                (SQS_VISIBILITY_TIMEOUT_PARAM, str(visibility_timeout)),
            ),
        )


def _optional_str(value: int | None) -> str | None:
    return None if value is None else str(value)


def _require(value: str | None, label: str) -> None:
    if not value:
        raise ValidationError(f"{label} cannot be empty.")
