from ._base import (
    AWSService,
    Operation,
    Result,
    Success,
    TransportFailure,
    normalize_endpoint,
)
from .regions import S3Region, SESRegion, SQSRegion
from .s3 import S3Client
from .ses import SESClient
from .sqs import SQSClient

__all__ = (
    "AWSService",
    "Operation",
    "Result",
    "S3Client",
    "S3Region",
    "SESClient",
    "SESRegion",
    "SQSClient",
    "SQSRegion",
    "Success",
    "TransportFailure",
    "normalize_endpoint",
)
