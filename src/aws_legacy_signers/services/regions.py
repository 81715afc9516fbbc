from enum import Enum


class S3Region(Enum):
    """S3 endpoints.

    ``location_constraint`` is sent when creating a bucket outside the default
    region; ``None`` means the default (US Standard) region.
    """

    US_EAST = ("s3.amazonaws.com", None)
    US_WEST_OREGON = ("s3-us-west-2.amazonaws.com", "us-west-2")
    US_WEST_NORCAL = ("s3-us-west-1.amazonaws.com", "us-west-1")
    EU = ("s3-eu-west-1.amazonaws.com", "EU")
    ASIA_SINGAPORE = ("s3-ap-southeast-1.amazonaws.com", "ap-southeast-1")
    ASIA_SYDNEY = ("s3-ap-southeast-2.amazonaws.com", "ap-southeast-2")
    ASIA_TOKYO = ("s3-ap-northeast-1.amazonaws.com", "ap-northeast-1")
    SOUTH_AMERICA = ("s3-sa-east-1.amazonaws.com", "sa-east-1")

    def __init__(self, api_endpoint: str, location_constraint: str | None):
        self.api_endpoint = api_endpoint
        self.location_constraint = location_constraint


class SQSRegion(Enum):
    DEFAULT = "queue.amazonaws.com"
    US_EAST = "sqs.us-east-1.amazonaws.com"
    US_WEST_OREGON = "sqs.us-west-2.amazonaws.com"
    US_WEST_NORCAL = "sqs.us-west-1.amazonaws.com"
    EU = "sqs.eu-west-1.amazonaws.com"
    ASIA_SINGAPORE = "sqs.ap-southeast-1.amazonaws.com"
    ASIA_SYDNEY = "sqs.ap-southeast-2.amazonaws.com"
    ASIA_TOKYO = "sqs.ap-northeast-1.amazonaws.com"
    SOUTH_AMERICA = "sqs.sa-east-1.amazonaws.com"

    @property
    def api_endpoint(self) -> str:
        return self.value


class SESRegion(Enum):
    US_EAST = "email.us-east-1.amazonaws.com"
    US_WEST_OREGON = "email.us-west-2.amazonaws.com"
    EU = "email.eu-west-1.amazonaws.com"

    @property
    def api_endpoint(self) -> str:
        return self.value
