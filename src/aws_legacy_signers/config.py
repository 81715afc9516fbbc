"""
Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
SPDX-License-Identifier: Apache-2.0
"""

from enum import Enum
from typing import Any

from pydantic import Field, SecretStr, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ._hmac import SigningAlgorithm
from ._identity import AWSCredentialIdentity
from .exceptions import ValidationError
from .services.regions import S3Region, SESRegion, SQSRegion


class SignerSettings(BaseSettings):
    """
    Credentials and endpoints for the service clients.

    Values are loaded from environment variables prefixed with
    ``AWS_LEGACY_SIGNERS_`` or from a ``.env`` file.

    :param access_key_id: Public half of the credential pair.
    :param secret_access_key: Shared secret, never shown in reprs.
    :param s3_region: S3 region name, e.g. ``EU``.
    :param sqs_region: SQS region name, e.g. ``US_WEST_OREGON``.
    :param ses_region: SES region name.
    :param ses_algorithm: MAC used for the AWS3-HTTPS scheme.
    """

    model_config = SettingsConfigDict(
        env_prefix="AWS_LEGACY_SIGNERS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    access_key_id: str | None = Field(default=None, max_length=128)
    secret_access_key: SecretStr | None = Field(default=None)
    s3_region: S3Region = Field(default=S3Region.US_EAST)
    sqs_region: SQSRegion = Field(default=SQSRegion.DEFAULT)
    ses_region: SESRegion = Field(default=SESRegion.US_EAST)
    ses_algorithm: SigningAlgorithm = Field(default=SigningAlgorithm.HMAC_SHA256)

    @field_validator("s3_region", "sqs_region", "ses_region", mode="before")
    @classmethod
    def _region_by_name(cls, value: Any, info: ValidationInfo) -> Any:
        if not isinstance(value, str):
            return value
        region_type: type[Enum] = cls.model_fields[info.field_name].annotation
        try:
            return region_type[value.strip().upper()]
        except KeyError as e:
            names = ", ".join(region_type.__members__)
            raise ValueError(
                f"Unknown region {value!r}, expected one of: {names}"
            ) from e

    def identity(self) -> AWSCredentialIdentity:
        """Build the credential pair, failing if either half is unset."""
        if not self.access_key_id or self.secret_access_key is None:
            raise ValidationError(
                "Both access_key_id and secret_access_key must be configured."
            )
        return AWSCredentialIdentity(
            access_key_id=self.access_key_id,
            secret_access_key=self.secret_access_key.get_secret_value(),
        )
