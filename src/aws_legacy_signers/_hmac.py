import base64
from enum import StrEnum
from hashlib import sha1, sha256
import hmac

from .exceptions import SigningError
from .interfaces.identity import Identity


class SigningAlgorithm(StrEnum):
    """MAC constructions understood by the legacy signing schemes.

    Values are the names the services expect on the wire.
    """

    HMAC_SHA1 = "HmacSHA1"
    HMAC_SHA256 = "HmacSHA256"


_DIGESTS = {
    SigningAlgorithm.HMAC_SHA1: sha1,
    SigningAlgorithm.HMAC_SHA256: sha256,
}


def resolve_algorithm(algorithm: SigningAlgorithm | str) -> SigningAlgorithm:
    try:
        return SigningAlgorithm(algorithm)
    except ValueError as e:
        raise SigningError(f"Unsupported signing algorithm: {algorithm!r}") from e


def sign(secret: bytes, algorithm: SigningAlgorithm | str, value: str) -> str:
    """Compute an RFC 2104 HMAC of ``value`` and return it base64 encoded."""
    resolved = resolve_algorithm(algorithm)
    try:
        mac = hmac.new(
            key=secret, msg=value.encode("utf-8"), digestmod=_DIGESTS[resolved]
        )
    except (AttributeError, TypeError, ValueError) as e:
        raise SigningError(f"Failed to sign input (algorithm={resolved})") from e
    return base64.b64encode(mac.digest()).decode("ascii")


def sign_with_identity(
    identity: Identity, algorithm: SigningAlgorithm | str, value: str
) -> str:
    return sign(identity.secret_bytes, algorithm, value)
