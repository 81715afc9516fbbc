class BaseAWSSDKException(Exception):
    """Top-level exception to capture signer-related errors."""

    ...


class ValidationError(BaseAWSSDKException, ValueError):
    """Caller input was malformed or out of bounds.

    Raised before any request is signed or dispatched.
    """

    ...


class SigningError(BaseAWSSDKException):
    """The HMAC primitive could not be resolved or initialized."""

    ...
