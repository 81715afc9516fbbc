from io import BytesIO

import pytest

from aws_legacy_signers import Field, Fields
from aws_legacy_signers.exceptions import ValidationError
from aws_legacy_signers.services import S3Client, S3Region, Success, TransportFailure
from aws_legacy_signers.services.s3 import (
    PutObjectResult,
    append_key_to_path,
    from_path_string,
    is_valid_bucket_name,
    to_path_string,
)


@pytest.fixture
def client(aws_identity, transport) -> S3Client:
    return S3Client(identity=aws_identity, transport=transport)


@pytest.mark.parametrize(
    "bucket_name, valid",
    [
        ("my-bucket.01", True),
        ("abc", True),
        ("a" * 255, True),
        ("MY_BUCKET", False),
        ("ab", False),
        ("a" * 256, False),
        ("-bucket", False),
        ("bucket-", False),
        ("my bucket", False),
    ],
)
def test_bucket_name_validation(bucket_name, valid):
    assert is_valid_bucket_name(bucket_name) is valid


class TestPathStrings:
    def test_to_path_string(self):
        assert (
            to_path_string("accounts", "", "silly/path+dog")
            == "accounts/silly%2Fpath%2Bdog"
        )

    def test_round_trip(self):
        segments = ("accounts", "silly/path+dog", "with space")
        assert from_path_string(to_path_string(*segments)) == list(segments)

    def test_empty(self):
        assert to_path_string() == ""
        assert from_path_string("") == []

    def test_append_key_to_path(self):
        assert append_key_to_path("cat.jpg", "photos", "2013") == (
            "photos",
            "2013",
            "cat.jpg",
        )


class TestS3Client:
    def test_list_buckets(self, client, transport):
        transport.response.body = b"<ListAllMyBucketsResult/>"
        assert client.list_buckets() == Success(b"<ListAllMyBucketsResult/>")
        request = transport.last_request
        assert request.method == "GET"
        assert request.destination.build() == "https://s3.amazonaws.com/"
        assert request.fields.get_first("Authorization").startswith("AWS AKID:")

    def test_list_objects(self, client, transport):
        client.list_objects("my-bucket", "photos", "2013", marker="m")
        request = transport.last_request
        assert request.destination.host == "my-bucket.s3.amazonaws.com"
        assert request.destination.query == "marker=m&prefix=photos%2F2013"

    def test_list_objects_without_prefix(self, client, transport):
        client.list_objects("my-bucket")
        assert transport.last_request.destination.query is None

    def test_invalid_bucket_sends_nothing(self, client, transport):
        with pytest.raises(ValidationError):
            client.list_objects("MY_BUCKET")
        with pytest.raises(ValidationError):
            client.get_object(None, "key")  # type: ignore[arg-type]
        assert transport.requests == []

    def test_create_bucket_default_region(self, client, transport):
        assert client.create_bucket("my-bucket") == Success("my-bucket")
        request = transport.last_request
        assert request.method == "PUT"
        assert request.body is None

    def test_create_bucket_with_location(self, aws_identity, transport):
        client = S3Client(
            identity=aws_identity, transport=transport, region=S3Region.EU
        )
        client.create_bucket("my-bucket")
        request = transport.last_request
        assert request.destination.host == "my-bucket.s3-eu-west-1.amazonaws.com"
        assert b"<LocationConstraint>EU</LocationConstraint>" in request.body

    def test_delete_bucket_expects_no_content(self, client, transport):
        transport.response.status = 204
        assert client.delete_bucket("my-bucket") == Success(None)
        transport.response.status = 200
        result = client.delete_bucket("my-bucket")
        assert isinstance(result, TransportFailure)
        assert result.status_code == 200

    def test_put_object(self, client, transport):
        transport.response.fields = Fields(
            [
                Field(name="ETag", values=('"abc"',)),
                Field(name="x-amz-version-id", values=("v1",)),
            ]
        )
        result = client.put_object(
            "my-bucket",
            b"data",
            "photos",
            "cat.jpg",
            content_type="image/jpeg",
            reduced_redundancy=True,
        )
        assert result == Success(PutObjectResult(etag='"abc"', version_id="v1"))
        request = transport.last_request
        assert request.destination.path == "/photos%2Fcat.jpg"
        assert request.body == b"data"
        assert request.fields.get_first("Content-Type") == "image/jpeg"
        assert request.fields.get_first("x-amz-storage-class") == "REDUCED_REDUNDANCY"

    def test_put_object_from_stream(self, client, transport):
        client.put_object("my-bucket", BytesIO(b"streamed"), "key")
        assert transport.last_request.body == b"streamed"

    def test_put_object_requires_data(self, client, transport):
        with pytest.raises(ValidationError):
            client.put_object("my-bucket", None, "key")  # type: ignore[arg-type]
        assert transport.requests == []

    def test_get_object(self, client, transport):
        transport.response.body = b"contents"
        assert client.get_object("my-bucket", "key") == Success(b"contents")
        assert transport.last_request.destination.build() == (
            "https://my-bucket.s3.amazonaws.com/key"
        )

    def test_get_object_into(self, client, transport):
        transport.response.body = b"contents"
        transport.response.fields = Fields(
            [Field(name="Content-Length", values=("8",))]
        )
        destination = BytesIO()
        result = client.get_object_into("my-bucket", destination, "key")
        assert isinstance(result, Success)
        assert result.value.get_first("content-length") == "8"
        assert destination.getvalue() == b"contents"

    def test_get_object_into_failure_writes_nothing(
        self, aws_identity, failing_transport
    ):
        client = S3Client(identity=aws_identity, transport=failing_transport)
        destination = BytesIO()
        assert isinstance(
            client.get_object_into("my-bucket", destination, "key"), TransportFailure
        )
        assert destination.getvalue() == b""

    def test_delete_object(self, client, transport):
        transport.response.status = 204
        assert client.delete_object("my-bucket", "key") == Success(None)
        assert transport.last_request.method == "DELETE"

    def test_object_exists(self, aws_identity, transport, failing_transport):
        assert S3Client(identity=aws_identity, transport=transport).object_exists(
            "my-bucket", "key"
        )
        assert not S3Client(
            identity=aws_identity, transport=failing_transport
        ).object_exists("my-bucket", "key")
        assert transport.last_request.method == "HEAD"
