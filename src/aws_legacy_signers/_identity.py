"""
Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
SPDX-License-Identifier: Apache-2.0
"""

from dataclasses import dataclass, field

from .exceptions import ValidationError
from .interfaces.identity import Identity

SECRET_DISPLAY_WIDTH = 10


def _abbreviate(value: str, width: int = SECRET_DISPLAY_WIDTH) -> str:
    if len(value) <= width:
        return value
    return f"{value[: width - 3]}..."


@dataclass(frozen=True, kw_only=True)
class AWSCredentialIdentity(Identity):
    access_key_id: str
    secret_access_key: str = field(repr=False)

    def __post_init__(self) -> None:
        if not self.access_key_id:
            raise ValidationError("AWS access key id cannot be empty.")
        if not self.secret_access_key:
            raise ValidationError("AWS secret access key cannot be empty.")

    @property
    def secret_bytes(self) -> bytes:
        """The secret as raw UTF-8 bytes, for keying the HMAC."""
        return self.secret_access_key.encode("utf-8")

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({self.access_key_id}, "
            f"{_abbreviate(self.secret_access_key)})"
        )

    __str__ = __repr__
