from dataclasses import replace
import datetime
from email.utils import format_datetime
from enum import Enum
import logging
from typing import TypedDict

from ._hmac import SigningAlgorithm, resolve_algorithm, sign_with_identity
from ._http import (
    AWSRequest,
    Field,
    Parameter,
    encode_parameters,
    sort_parameters,
)
from .exceptions import SigningError, ValidationError
from .interfaces.identity import Identity

logger = logging.getLogger(__name__)

AMAZON_HEADER_PREFIX: str = "x-amz-"
AMAZON_ALTERNATE_DATE: str = "x-amz-date"
X_AMZN_AUTHORIZATION: str = "X-Amzn-Authorization"
FORM_URLENCODED: str = "application/x-www-form-urlencoded"

# Only these query parameters take part in the S3 string to sign. They must
# stay in sorted order.
S3_SIGNED_SUBRESOURCES: tuple[str, ...] = (
    "acl",
    "torrent",
    "logging",
    "location",
    "policy",
    "requestPayment",
    "versioning",
    "versions",
    "versionId",
    "notification",
)

SIGV2_DEFAULT_API_VERSION: str = "2012-11-05"
SIGV2_SIGNATURE_VERSION: str = "2"
SIGV2_TIMESTAMP_FORMAT: str = "%Y-%m-%dT%H:%M:%SZ"

# Set by the signer; caller copies of these are dropped before signing.
SIGV2_AUTH_PARAMETERS: frozenset[str] = frozenset(
    (
        "AWSAccessKeyId",
        "Version",
        "SignatureVersion",
        "Timestamp",
        "SignatureMethod",
        "Signature",
    )
)

AWS3_HTTPS: str = "AWS3-HTTPS"


class SignatureScheme(Enum):
    """The closed set of legacy signing schemes."""

    S3_REST = "s3-rest"
    QUERY_V2 = "query-v2"
    AWS3_HTTPS = "aws3-https"


# The first entry is the scheme's default algorithm.
SUPPORTED_ALGORITHMS: dict[SignatureScheme, tuple[SigningAlgorithm, ...]] = {
    SignatureScheme.S3_REST: (SigningAlgorithm.HMAC_SHA1,),
    SignatureScheme.QUERY_V2: (SigningAlgorithm.HMAC_SHA256,),
    SignatureScheme.AWS3_HTTPS: (
        SigningAlgorithm.HMAC_SHA256,
        SigningAlgorithm.HMAC_SHA1,
    ),
}


class SigningProperties(TypedDict, total=False):
    date: datetime.datetime
    api_version: str


def _check_algorithm(
    scheme: SignatureScheme, algorithm: SigningAlgorithm | str | None
) -> SigningAlgorithm:
    supported = SUPPORTED_ALGORITHMS[scheme]
    if algorithm is None:
        return supported[0]
    resolved = resolve_algorithm(algorithm)
    if resolved not in supported:
        raise SigningError(
            f"{resolved} is not supported by the {scheme.value} signing scheme. "
            f"Expected one of: {', '.join(supported)}."
        )
    return resolved


def _validate_identity(*, identity: Identity) -> None:
    """Perform runtime checks before attempting signing."""
    if not isinstance(identity, Identity):
        raise ValidationError(
            "Received unexpected value for identity parameter. Expected "
            f"AWSCredentialIdentity but received {type(identity)}."
        )


def _normalize_signing_properties(
    *, signing_properties: SigningProperties | None
) -> SigningProperties:
    # Create copy of signing properties to avoid mutating the original.
    # The date is captured here once and every timestamp the signer writes
    # is derived from it.
    new_signing_properties = SigningProperties(**(signing_properties or {}))
    date = new_signing_properties.get("date")
    if date is None:
        date = datetime.datetime.now(datetime.UTC)
    elif date.tzinfo is None:
        date = date.replace(tzinfo=datetime.UTC)
    new_signing_properties["date"] = date.astimezone(datetime.UTC)
    return new_signing_properties


def format_http_date(date: datetime.datetime) -> str:
    """RFC 1123 date as used in the ``Date`` header."""
    return format_datetime(date.astimezone(datetime.UTC), usegmt=True)


def _apply_required_fields(*, request: AWSRequest, http_date: str) -> AWSRequest:
    fields = request.fields.set_field(Field(name="Date", values=(http_date,)))
    # Only add a Content-Type if the caller didn't supply one.
    if "Content-Type" not in fields:
        fields = fields.with_field(
            Field(name="Content-Type", values=(FORM_URLENCODED,))
        )
    return replace(request, fields=fields)


class S3Signer:
    """
    Request signer for the S3 REST authentication scheme.

    The signature covers the method, a whitelisted set of headers, the
    canonical resource and the signed sub-resources, and travels in an
    ``Authorization: AWS <key>:<signature>`` header.
    """

    scheme = SignatureScheme.S3_REST

    def __init__(self, *, algorithm: SigningAlgorithm | str | None = None):
        self._algorithm = _check_algorithm(self.scheme, algorithm)

    @property
    def algorithm(self) -> SigningAlgorithm:
        return self._algorithm

    def sign(
        self,
        *,
        request: AWSRequest,
        identity: Identity,
        signing_properties: SigningProperties | None = None,
    ) -> AWSRequest:
        _validate_identity(identity=identity)
        new_signing_properties = _normalize_signing_properties(
            signing_properties=signing_properties
        )
        new_request = _apply_required_fields(
            request=request,
            http_date=format_http_date(new_signing_properties["date"]),
        )
        # Parameters go on the wire as query parameters, signed or not.
        new_request = replace(
            new_request,
            destination=new_request.destination.with_query_parameters(
                new_request.params
            ),
            params=(),
        )

        string_to_sign = self.string_to_sign(request=new_request)
        signature = sign_with_identity(identity, self._algorithm, string_to_sign)
        authorization = Field(
            name="Authorization",
            values=(f"AWS {identity.access_key_id}:{signature}",),
        )
        return replace(new_request, fields=new_request.fields.set_field(authorization))

    def string_to_sign(self, *, request: AWSRequest) -> str:
        string_to_sign = (
            f"{request.method}\n"
            f"{self._format_canonical_fields(request=request)}"
            f"{self._format_canonical_resource(request=request)}"
            f"{self._format_canonical_subresources(request=request)}"
        )
        logger.debug("S3 string to sign: %r", string_to_sign)
        return string_to_sign

    def _interesting_fields(self, *, request: AWSRequest) -> dict[str, str]:
        interesting: dict[str, str] = {}
        for field in request.fields:
            name = field.name.lower()
            # Only the first occurrence of a header is signed.
            if name in interesting:
                continue
            if name in ("content-type", "content-md5", "date") or name.startswith(
                AMAZON_HEADER_PREFIX
            ):
                interesting[name] = field.as_string()
        if AMAZON_ALTERNATE_DATE in interesting:
            interesting["date"] = ""
        # These always produce a line, even when absent.
        interesting.setdefault("content-type", "")
        interesting.setdefault("content-md5", "")
        return dict(sorted(interesting.items()))

    def _format_canonical_fields(self, *, request: AWSRequest) -> str:
        lines = []
        for name, value in self._interesting_fields(request=request).items():
            if name.startswith(AMAZON_HEADER_PREFIX):
                lines.append(f"{name}:{value}\n")
            else:
                lines.append(f"{value}\n")
        return "".join(lines)

    def _format_canonical_resource(self, *, request: AWSRequest) -> str:
        path = request.destination.path or "/"
        if request.resource is not None:
            return f"/{request.resource}{path}"
        return path

    def _format_canonical_subresources(self, *, request: AWSRequest) -> str:
        query = ""
        separator = "?"
        for name, value in sort_parameters(request.query_parameters()):
            if name not in S3_SIGNED_SUBRESOURCES:
                continue
            query += f"{separator}{name}"
            if value is not None:
                query += f"={value}"
            separator = "&"
        return query

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._algorithm})"


class QuerySigner:
    """
    Request signer for the query API Signature Version 2 scheme (e.g. SQS).

    Authentication parameters are merged into the request parameters, the
    sorted and encoded list is signed, and the signature is appended as one
    more parameter. The whole list becomes the form encoded body.
    """

    scheme = SignatureScheme.QUERY_V2

    def __init__(self, *, algorithm: SigningAlgorithm | str | None = None):
        self._algorithm = _check_algorithm(self.scheme, algorithm)

    @property
    def algorithm(self) -> SigningAlgorithm:
        return self._algorithm

    def sign(
        self,
        *,
        request: AWSRequest,
        identity: Identity,
        signing_properties: SigningProperties | None = None,
    ) -> AWSRequest:
        _validate_identity(identity=identity)
        new_signing_properties = _normalize_signing_properties(
            signing_properties=signing_properties
        )
        date = new_signing_properties["date"]
        new_request = _apply_required_fields(
            request=request, http_date=format_http_date(date)
        )

        params = self.signing_parameters(
            request=new_request,
            identity=identity,
            signing_properties=new_signing_properties,
        )
        string_to_sign = self.string_to_sign(request=new_request, params=params)
        signature = sign_with_identity(identity, self._algorithm, string_to_sign)
        signed_params = (*params, Parameter("Signature", signature))
        return replace(
            new_request,
            params=signed_params,
            body=encode_parameters(signed_params).encode("utf-8"),
        )

    def signing_parameters(
        self,
        *,
        request: AWSRequest,
        identity: Identity,
        signing_properties: SigningProperties,
    ) -> tuple[Parameter, ...]:
        """Merge the authentication parameters in and sort the result."""
        timestamp = signing_properties["date"].strftime(SIGV2_TIMESTAMP_FORMAT)
        auth_params = (
            Parameter("AWSAccessKeyId", identity.access_key_id),
            Parameter(
                "Version",
                signing_properties.get("api_version", SIGV2_DEFAULT_API_VERSION),
            ),
            Parameter("SignatureVersion", SIGV2_SIGNATURE_VERSION),
            Parameter("Timestamp", timestamp),
            Parameter("SignatureMethod", str(self._algorithm)),
        )
        caller_params = (
            p for p in request.params if p.name not in SIGV2_AUTH_PARAMETERS
        )
        return sort_parameters((*auth_params, *caller_params))

    def string_to_sign(
        self, *, request: AWSRequest, params: tuple[Parameter, ...]
    ) -> str:
        host = request.destination.host
        if not host:
            raise ValidationError(
                "Cannot sign a query API request without a destination host."
            )
        path = request.destination.path or "/"
        string_to_sign = (
            f"{request.method}\n"
            f"{host.lower()}\n"
            f"{path}\n"
            f"{escape_sigv2_query(encode_parameters(params))}"
        )
        logger.debug("Query API string to sign: %r", string_to_sign)
        return string_to_sign

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._algorithm})"


def escape_sigv2_query(encoded: str) -> str:
    """Turn form encoding into the RFC 3986 flavour the query API signs."""
    return encoded.replace("+", "%20").replace("*", "%2A").replace("%7E", "~")


class AWS3Signer:
    """
    Request signer for the AWS3-HTTPS scheme (e.g. SES).

    Only the ``Date`` header value is signed. Request parameters are form
    encoded into the body and are not covered by the signature.
    """

    scheme = SignatureScheme.AWS3_HTTPS

    def __init__(self, *, algorithm: SigningAlgorithm | str | None = None):
        self._algorithm = _check_algorithm(self.scheme, algorithm)

    @property
    def algorithm(self) -> SigningAlgorithm:
        return self._algorithm

    def sign(
        self,
        *,
        request: AWSRequest,
        identity: Identity,
        signing_properties: SigningProperties | None = None,
    ) -> AWSRequest:
        _validate_identity(identity=identity)
        new_signing_properties = _normalize_signing_properties(
            signing_properties=signing_properties
        )
        new_request = _apply_required_fields(
            request=request,
            http_date=format_http_date(new_signing_properties["date"]),
        )

        signature = sign_with_identity(
            identity, self._algorithm, self.string_to_sign(request=new_request)
        )
        authorization = self.generate_authorization_field(
            access_key_id=identity.access_key_id, signature=signature
        )
        new_request = replace(
            new_request, fields=new_request.fields.set_field(authorization)
        )
        if new_request.params:
            new_request = replace(
                new_request,
                body=encode_parameters(new_request.params).encode("utf-8"),
            )
        return new_request

    def string_to_sign(self, *, request: AWSRequest) -> str:
        date = request.fields.get_first("Date")
        if date is None:
            raise ValidationError("Cannot sign an AWS3 request without a Date.")
        return date

    def generate_authorization_field(
        self, *, access_key_id: str, signature: str
    ) -> Field:
        """Generate the `X-Amzn-Authorization` field"""
        auth_str = (
            f"{AWS3_HTTPS} AWSAccessKeyId={access_key_id}, "
            f"Algorithm={self._algorithm}, Signature={signature}"
        )
        return Field(name=X_AMZN_AUTHORIZATION, values=(auth_str,))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._algorithm})"


Signer = S3Signer | QuerySigner | AWS3Signer


def new_signer(
    scheme: SignatureScheme, algorithm: SigningAlgorithm | str | None = None
) -> Signer:
    """Build the signer for ``scheme``, rejecting unsupported algorithms."""
    match scheme:
        case SignatureScheme.S3_REST:
            return S3Signer(algorithm=algorithm)
        case SignatureScheme.QUERY_V2:
            return QuerySigner(algorithm=algorithm)
        case SignatureScheme.AWS3_HTTPS:
            return AWS3Signer(algorithm=algorithm)
    raise SigningError(f"Unknown signature scheme: {scheme!r}")


def sign_request(
    *,
    scheme: SignatureScheme,
    request: AWSRequest,
    identity: Identity,
    algorithm: SigningAlgorithm | str | None = None,
    signing_properties: SigningProperties | None = None,
) -> AWSRequest:
    """Sign ``request`` with the given scheme and algorithm pairing."""
    return new_signer(scheme, algorithm).sign(
        request=request,
        identity=identity,
        signing_properties=signing_properties,
    )
