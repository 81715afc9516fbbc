from dataclasses import dataclass
import re
from typing import TYPE_CHECKING, BinaryIO
from urllib.parse import quote, unquote

from .._http import AWSRequestBuilder, Fields
from ..exceptions import ValidationError
from ..interfaces.http import HTTPResponse, HTTPTransport
from ..interfaces.identity import Identity
from ..signers import S3Signer
from ._base import AWSService, Operation, Result, Success, response_body
from .regions import S3Region

if TYPE_CHECKING:
    from ..config import SignerSettings

S3_PARAM_MARKER = "marker"
S3_PARAM_PREFIX = "prefix"

STORAGE_CLASS = "x-amz-storage-class"
S3_VERSION_ID = "x-amz-version-id"
S3_REDUCED_REDUNDANCY = "REDUCED_REDUNDANCY"

CREATE_BUCKET_CONFIGURATION = (
    '<CreateBucketConfiguration xmlns="http://s3.amazonaws.com/doc/2006-03-01/">'
    "<LocationConstraint>{}</LocationConstraint>"
    "</CreateBucketConfiguration>"
)

# Lowercase letters, digits, periods, underscores and dashes, 3 to 255
# characters, starting and ending with a letter or digit.
VALID_BUCKET_NAME = re.compile(r"[a-z0-9][a-z0-9_.\-]{1,253}[a-z0-9]")


def is_valid_bucket_name(bucket_name: str) -> bool:
    return VALID_BUCKET_NAME.fullmatch(bucket_name) is not None


def validate_bucket_name(bucket_name: str | None) -> None:
    if bucket_name is None:
        raise ValidationError("Bucket name cannot be None.")
    if not is_valid_bucket_name(bucket_name):
        raise ValidationError(
            f"Invalid bucket name {bucket_name!r}, did not match expected "
            "bucket name pattern."
        )


def to_path_string(*segments: str) -> str:
    """Join key segments into one path, URL-encoding each segment.

    Empty segments are dropped, so ``("accounts", "", "silly/path+dog")``
    becomes ``"accounts/silly%2Fpath%2Bdog"``.
    """
    return "/".join(quote(segment, safe="") for segment in segments if segment)


def from_path_string(path: str) -> list[str]:
    """Inverse of :func:`to_path_string`."""
    return [unquote(segment) for segment in path.split("/") if segment]


def append_key_to_path(key: str, *segments: str) -> tuple[str, ...]:
    return (*segments, key)


def _object_path(*segments: str) -> str:
    # The whole path string is a single key on the wire.
    if not segments:
        return "/"
    return f"/{quote(to_path_string(*segments), safe='')}"


@dataclass(frozen=True)
class PutObjectResult:
    etag: str | None
    version_id: str | None


def _put_object_result(response: HTTPResponse) -> PutObjectResult:
    return PutObjectResult(
        etag=response.fields.get_first("ETag"),
        version_id=response.fields.get_first(S3_VERSION_ID),
    )


class S3Client:
    """Object storage calls signed with the S3 REST scheme.

    Response bodies (listings and the like) are returned as raw bytes for the
    caller to unmarshal.
    """

    def __init__(
        self,
        *,
        identity: Identity,
        transport: HTTPTransport,
        region: S3Region = S3Region.US_EAST,
        signer: S3Signer | None = None,
    ):
        self._region = region
        self._service = AWSService(
            signer=signer or S3Signer(),
            identity=identity,
            endpoint=region.api_endpoint,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls, settings: "SignerSettings", transport: HTTPTransport
    ) -> "S3Client":
        return cls(
            identity=settings.identity(),
            transport=transport,
            region=settings.s3_region,
        )

    @property
    def service(self) -> AWSService:
        return self._service

    def list_buckets(self) -> Result[bytes]:
        return self._service.execute(
            Operation(method="GET", expected_status=200, success=response_body)
        )

    def list_objects(
        self, bucket_name: str, *path: str, marker: str | None = None
    ) -> Result[bytes]:
        """List keys in a bucket, optionally under the prefix built from ``path``.

        Keys in the listing may be URL-encoded; :func:`from_path_string` turns
        them back into segments.
        """

        def prepare(builder: AWSRequestBuilder) -> None:
            builder.add_parameter(S3_PARAM_MARKER, marker, optional=True)
            if path:
                builder.add_parameter(S3_PARAM_PREFIX, to_path_string(*path))

        return self._service.execute(
            Operation(
                method="GET",
                expected_status=200,
                resource=bucket_name,
                validate=lambda: validate_bucket_name(bucket_name),
                prepare=prepare,
                success=response_body,
            )
        )

    def create_bucket(self, bucket_name: str) -> Result[str]:
        constraint = self._region.location_constraint

        def prepare(builder: AWSRequestBuilder) -> None:
            if constraint is not None:
                builder.set_body(
                    CREATE_BUCKET_CONFIGURATION.format(constraint).encode("utf-8")
                )

        return self._service.execute(
            Operation(
                method="PUT",
                expected_status=200,
                resource=bucket_name,
                validate=lambda: validate_bucket_name(bucket_name),
                prepare=prepare,
                success=lambda response: bucket_name,
            )
        )

    def delete_bucket(self, bucket_name: str) -> Result[None]:
        """Delete an empty bucket. Non-empty buckets fail with a 409."""
        return self._service.execute(
            Operation(
                method="DELETE",
                expected_status=204,
                resource=bucket_name,
                validate=lambda: validate_bucket_name(bucket_name),
            )
        )

    def put_object(
        self,
        bucket_name: str,
        data: bytes | BinaryIO,
        *path: str,
        content_type: str | None = None,
        reduced_redundancy: bool = False,
    ) -> Result[PutObjectResult]:
        def validate() -> None:
            validate_bucket_name(bucket_name)
            if data is None:
                raise ValidationError("Object data cannot be None.")

        def prepare(builder: AWSRequestBuilder) -> None:
            if reduced_redundancy:
                builder.set_header(STORAGE_CLASS, S3_REDUCED_REDUNDANCY)
            if content_type is not None:
                builder.set_header("Content-Type", content_type)
            builder.set_body(data if isinstance(data, bytes) else data.read())

        return self._service.execute(
            Operation(
                method="PUT",
                expected_status=200,
                destination=_object_path(*path),
                resource=bucket_name,
                validate=validate,
                prepare=prepare,
                success=_put_object_result,
            )
        )

    def delete_object(self, bucket_name: str, *path: str) -> Result[None]:
        return self._service.execute(
            Operation(
                method="DELETE",
                expected_status=204,
                destination=_object_path(*path),
                resource=bucket_name,
                validate=lambda: validate_bucket_name(bucket_name),
            )
        )

    def get_object(self, bucket_name: str, *path: str) -> Result[bytes]:
        """Fetch an object, holding the whole body in memory."""
        return self._service.execute(
            Operation(
                method="GET",
                expected_status=200,
                destination=_object_path(*path),
                resource=bucket_name,
                validate=lambda: validate_bucket_name(bucket_name),
                success=response_body,
            )
        )

    def get_object_into(
        self, bucket_name: str, destination: BinaryIO, *path: str
    ) -> Result[Fields]:
        """Copy an object into ``destination`` and return the response headers."""

        def success(response: HTTPResponse) -> Fields:
            destination.write(response.body)
            return response.fields

        return self._service.execute(
            Operation(
                method="GET",
                expected_status=200,
                destination=_object_path(*path),
                resource=bucket_name,
                validate=lambda: validate_bucket_name(bucket_name),
                success=success,
            )
        )

    def object_exists(self, bucket_name: str, *path: str) -> bool:
        result = self._service.execute(
            Operation(
                method="HEAD",
                expected_status=200,
                destination=_object_path(*path),
                resource=bucket_name,
                validate=lambda: validate_bucket_name(bucket_name),
            )
        )
        return isinstance(result, Success)
