import base64
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
import re
from typing import TYPE_CHECKING

from .._http import AWSRequestBuilder
from ..exceptions import ValidationError
from ..interfaces.http import HTTPTransport
from ..interfaces.identity import Identity
from ..signers import AWS3Signer
from ._base import AWSService, Operation, Result, response_body
from .regions import SESRegion

if TYPE_CHECKING:
    from ..config import SignerSettings

SES_ACTION_PARAM = "Action"
SES_EMAIL_ADDRESS_PARAM = "EmailAddress"
SES_SOURCE_PARAM = "Source"
SES_DESTINATIONS_PARAM = "Destinations.member"
SES_DESTINATION_TO_PARAM = "Destination.ToAddresses.member"
SES_DESTINATION_CC_PARAM = "Destination.CcAddresses.member"
SES_DESTINATION_BCC_PARAM = "Destination.BccAddresses.member"
SES_REPLY_TO_PARAM = "ReplyToAddresses.member"
SES_RETURN_PATH_PARAM = "ReturnPath"
SES_SUBJECT_PARAM = "Message.Subject.Data"
SES_SUBJECT_CHARSET_PARAM = "Message.Subject.Charset"
SES_BODY_TEXT_PARAM = "Message.Body.Text.Data"
SES_BODY_TEXT_CHARSET_PARAM = "Message.Body.Text.Charset"
SES_BODY_HTML_PARAM = "Message.Body.Html.Data"
SES_BODY_HTML_CHARSET_PARAM = "Message.Body.Html.Charset"
SES_RAW_MESSAGE_DATA_PARAM = "RawMessage.Data"

SES_ACTION_SEND_EMAIL = "SendEmail"
SES_ACTION_SEND_RAW_EMAIL = "SendRawEmail"
SES_ACTION_VERIFY_EMAIL_ADDRESS = "VerifyEmailAddress"
SES_ACTION_DELETE_VERIFIED_EMAIL_ADDRESS = "DeleteVerifiedEmailAddress"
SES_ACTION_GET_SEND_QUOTA = "GetSendQuota"
SES_ACTION_GET_SEND_STATISTICS = "GetSendStatistics"
SES_ACTION_LIST_VERIFIED_EMAIL_ADDRESSES = "ListVerifiedEmailAddresses"

DEFAULT_CHARSET = "UTF-8"

VALID_EMAIL_ADDRESS = re.compile(
    r"[_A-Za-z0-9-]+(\.[_A-Za-z0-9-]+)*@"
    r"[A-Za-z0-9-]+(\.[A-Za-z0-9-]+)*(\.[A-Za-z]{2,4})"
)


def is_valid_email(email_address: str) -> bool:
    return VALID_EMAIL_ADDRESS.fullmatch(email_address) is not None


def validate_email(email_address: str | None, label: str = "Email address") -> None:
    if email_address is None:
        raise ValidationError(f"{label} cannot be None.")
    if not is_valid_email(email_address):
        raise ValidationError(
            f"Invalid {label.lower()} {email_address!r}, did not match "
            "expected email pattern."
        )


@dataclass(frozen=True)
class Content:
    data: str
    charset: str | None = DEFAULT_CHARSET


@dataclass(frozen=True)
class Body:
    text: Content | None = None
    html: Content | None = None


@dataclass(frozen=True)
class Message:
    subject: Content | None = None
    body: Body | None = None


@dataclass(frozen=True)
class Destination:
    to_addresses: tuple[str, ...] = ()
    cc_addresses: tuple[str, ...] = ()
    bcc_addresses: tuple[str, ...] = ()


def _add_members(
    builder: AWSRequestBuilder, prefix: str, values: Iterable[str]
) -> None:
    # Member lists are 1-indexed.
    for index, value in enumerate(values, start=1):
        builder.add_parameter(f"{prefix}.{index}", value, optional=True)


def _add_content(
    builder: AWSRequestBuilder,
    content: Content | None,
    data_param: str,
    charset_param: str,
) -> None:
    if content is None:
        return
    builder.add_parameter(data_param, content.data, optional=True)
    builder.add_parameter(charset_param, content.charset, optional=True)


class SESClient:
    """Email calls signed with the AWS3-HTTPS scheme.

    Successful calls return the raw XML response body.
    """

    def __init__(
        self,
        *,
        identity: Identity,
        transport: HTTPTransport,
        region: SESRegion = SESRegion.US_EAST,
        signer: AWS3Signer | None = None,
    ):
        self._service = AWSService(
            signer=signer or AWS3Signer(),
            identity=identity,
            endpoint=region.api_endpoint,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls, settings: "SignerSettings", transport: HTTPTransport
    ) -> "SESClient":
        return cls(
            identity=settings.identity(),
            transport=transport,
            region=settings.ses_region,
            signer=AWS3Signer(algorithm=settings.ses_algorithm),
        )

    @property
    def service(self) -> AWSService:
        return self._service

    def _post(
        self,
        action: str,
        *,
        validate: Callable[[], None] | None = None,
        prepare: Callable[[AWSRequestBuilder], None] | None = None,
    ) -> Result[bytes]:
        def validate_all() -> None:
            if validate is not None:
                validate()

        def prepare_all(builder: AWSRequestBuilder) -> None:
            builder.add_parameter(SES_ACTION_PARAM, action)
            if prepare is not None:
                prepare(builder)

        return self._service.execute(
            Operation(
                method="POST",
                expected_status=200,
                validate=validate_all,
                prepare=prepare_all,
                success=response_body,
            )
        )

    def verify_email_address(self, email_address: str) -> Result[bytes]:
        """Send a confirmation message to ``email_address``."""
        return self._post(
            SES_ACTION_VERIFY_EMAIL_ADDRESS,
            validate=lambda: validate_email(email_address),
            prepare=lambda builder: builder.add_parameter(
                SES_EMAIL_ADDRESS_PARAM, email_address
            ),
        )

    def delete_verified_email_address(self, email_address: str) -> Result[bytes]:
        return self._post(
            SES_ACTION_DELETE_VERIFIED_EMAIL_ADDRESS,
            validate=lambda: validate_email(email_address),
            prepare=lambda builder: builder.add_parameter(
                SES_EMAIL_ADDRESS_PARAM, email_address
            ),
        )

    def list_verified_email_addresses(self) -> Result[bytes]:
        return self._post(SES_ACTION_LIST_VERIFIED_EMAIL_ADDRESSES)

    def get_send_quota(self) -> Result[bytes]:
        return self._post(SES_ACTION_GET_SEND_QUOTA)

    def get_send_statistics(self) -> Result[bytes]:
        """Sending activity for the last two weeks, in 15 minute data points."""
        return self._post(SES_ACTION_GET_SEND_STATISTICS)

    def send_email(
        self,
        source: str,
        to: str,
        subject: str,
        body: str,
        return_path: str | None = None,
    ) -> Result[bytes]:
        """Send a plain text UTF-8 message to a single recipient."""
        return self.send_message(
            Destination(to_addresses=(to,)),
            Message(subject=Content(subject), body=Body(text=Content(body))),
            source,
            return_path=return_path,
        )

    def send_message(
        self,
        destination: Destination,
        message: Message,
        source: str,
        *,
        reply_to_addresses: Sequence[str] = (),
        return_path: str | None = None,
    ) -> Result[bytes]:
        def validate() -> None:
            if destination is None:
                raise ValidationError("Destination cannot be None.")
            if message is None:
                raise ValidationError("Message cannot be None.")
            validate_email(source, "From email address")

        def prepare(builder: AWSRequestBuilder) -> None:
            builder.add_parameter(SES_SOURCE_PARAM, source)
            _add_members(builder, SES_DESTINATION_TO_PARAM, destination.to_addresses)
            _add_members(builder, SES_DESTINATION_CC_PARAM, destination.cc_addresses)
            _add_members(
                builder, SES_DESTINATION_BCC_PARAM, destination.bcc_addresses
            )
            _add_content(
                builder, message.subject, SES_SUBJECT_PARAM, SES_SUBJECT_CHARSET_PARAM
            )
            if message.body is not None:
                _add_content(
                    builder,
                    message.body.text,
                    SES_BODY_TEXT_PARAM,
                    SES_BODY_TEXT_CHARSET_PARAM,
                )
                _add_content(
                    builder,
                    message.body.html,
                    SES_BODY_HTML_PARAM,
                    SES_BODY_HTML_CHARSET_PARAM,
                )
            _add_members(builder, SES_REPLY_TO_PARAM, reply_to_addresses)
            builder.add_parameter(SES_RETURN_PATH_PARAM, return_path, optional=True)

        return self._post(SES_ACTION_SEND_EMAIL, prepare=prepare, validate=validate)

    def send_raw_email(
        self,
        raw_message: bytes,
        source: str | None = None,
        destinations: Sequence[str] = (),
    ) -> Result[bytes]:
        """Send a caller-built MIME message.

        The message must already contain its headers; it is base64 encoded for
        transport.
        """

        def validate() -> None:
            if raw_message is None:
                raise ValidationError("Raw message cannot be None.")
            if source is not None:
                validate_email(source, "From email address")

        def prepare(builder: AWSRequestBuilder) -> None:
            builder.add_parameter(SES_SOURCE_PARAM, source, optional=True)
            _add_members(builder, SES_DESTINATIONS_PARAM, destinations)
            builder.add_parameter(
                SES_RAW_MESSAGE_DATA_PARAM,
                base64.b64encode(raw_message).decode("ascii"),
            )

        return self._post(SES_ACTION_SEND_RAW_EMAIL, prepare=prepare, validate=validate)
