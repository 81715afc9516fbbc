"""
Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
SPDX-License-Identifier: Apache-2.0

AWS Legacy Signers provides the pre-SigV4 request signing schemes: S3 REST
authentication, query API Signature Version 2 and AWS3-HTTPS, along with small
S3, SQS and SES clients built on top of them.
"""

from __future__ import annotations

from ._hmac import SigningAlgorithm
from ._http import (
    URI,
    AWSRequest,
    AWSRequestBuilder,
    Field,
    Fields,
    Parameter,
    sort_parameters,
)
from ._identity import AWSCredentialIdentity
from ._version import __version__
from .signers import (
    AWS3Signer,
    QuerySigner,
    S3Signer,
    SignatureScheme,
    SigningProperties,
    new_signer,
    sign_request,
)

LOGGER_NAME = "aws_legacy_signers"

__license__ = "Apache-2.0"
__version__ = __version__

__all__ = (
    "AWS3Signer",
    "AWSCredentialIdentity",
    "AWSRequest",
    "AWSRequestBuilder",
    "Field",
    "Fields",
    "LOGGER_NAME",
    "Parameter",
    "QuerySigner",
    "S3Signer",
    "SignatureScheme",
    "SigningAlgorithm",
    "SigningProperties",
    "URI",
    "new_signer",
    "sign_request",
    "sort_parameters",
)
