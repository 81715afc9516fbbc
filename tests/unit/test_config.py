import pydantic
import pytest

from aws_legacy_signers import SigningAlgorithm
from aws_legacy_signers.config import SignerSettings
from aws_legacy_signers.exceptions import ValidationError
from aws_legacy_signers.services import (
    S3Client,
    S3Region,
    SESClient,
    SESRegion,
    SQSClient,
    SQSRegion,
)


@pytest.fixture
def environment(monkeypatch):
    monkeypatch.setenv("AWS_LEGACY_SIGNERS_ACCESS_KEY_ID", "AKID")
    monkeypatch.setenv("AWS_LEGACY_SIGNERS_SECRET_ACCESS_KEY", "EXAMPLE1234SECRET")
    monkeypatch.setenv("AWS_LEGACY_SIGNERS_S3_REGION", "eu")
    monkeypatch.setenv("AWS_LEGACY_SIGNERS_SQS_REGION", "US_WEST_OREGON")
    monkeypatch.setenv("AWS_LEGACY_SIGNERS_SES_ALGORITHM", "HmacSHA1")


def test_defaults():
    settings = SignerSettings(_env_file=None)
    assert settings.access_key_id is None
    assert settings.s3_region is S3Region.US_EAST
    assert settings.sqs_region is SQSRegion.DEFAULT
    assert settings.ses_region is SESRegion.US_EAST
    assert settings.ses_algorithm is SigningAlgorithm.HMAC_SHA256


def test_from_environment(environment):
    settings = SignerSettings(_env_file=None)
    assert settings.s3_region is S3Region.EU
    assert settings.sqs_region is SQSRegion.US_WEST_OREGON
    assert settings.ses_algorithm is SigningAlgorithm.HMAC_SHA1
    assert "EXAMPLE1234SECRET" not in repr(settings)

    identity = settings.identity()
    assert identity.access_key_id == "AKID"
    assert identity.secret_access_key == "EXAMPLE1234SECRET"


def test_region_members_accepted():
    settings = SignerSettings(_env_file=None, ses_region=SESRegion.EU)
    assert settings.ses_region is SESRegion.EU


def test_unknown_region():
    with pytest.raises(pydantic.ValidationError, match="Unknown region"):
        SignerSettings(_env_file=None, s3_region="mars")


def test_identity_requires_credentials():
    with pytest.raises(ValidationError):
        SignerSettings(_env_file=None, access_key_id="AKID").identity()


def test_clients_from_settings(environment, transport):
    settings = SignerSettings(_env_file=None)

    S3Client.from_settings(settings, transport).list_buckets()
    assert transport.last_request.destination.host == "s3-eu-west-1.amazonaws.com"

    SQSClient.from_settings(settings, transport).list_queues()
    assert transport.last_request.destination.host == "sqs.us-west-2.amazonaws.com"

    ses = SESClient.from_settings(settings, transport)
    assert ses.service.signer.algorithm is SigningAlgorithm.HMAC_SHA1
    ses.get_send_quota()
    assert "Algorithm=HmacSHA1" in transport.last_request.fields.get_first(
        "X-Amzn-Authorization"
    )
