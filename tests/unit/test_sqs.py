import pytest

from aws_legacy_signers import Parameter
from aws_legacy_signers.exceptions import ValidationError
from aws_legacy_signers.services import SQSClient, SQSRegion, Success
from aws_legacy_signers.services.sqs import check_bound, is_valid_queue_name

QUEUE_URL = "https://sqs.us-east-1.amazonaws.com/123456789012/my-queue"


@pytest.fixture
def client(aws_identity, transport) -> SQSClient:
    return SQSClient(identity=aws_identity, transport=transport)


def _params(request) -> dict[str, str | None]:
    return dict(request.params)


@pytest.mark.parametrize(
    "queue_name, valid",
    [
        ("my-queue_01", True),
        ("a" * 80, True),
        ("a" * 81, False),
        ("", False),
        ("my.queue", False),
        ("my queue", False),
    ],
)
def test_queue_name_validation(queue_name, valid):
    assert is_valid_queue_name(queue_name) is valid


class TestCheckBound:
    def test_inclusive(self):
        check_bound("WaitTimeSeconds", 0, lower=0, upper=20)
        check_bound("WaitTimeSeconds", 20, lower=0, upper=20)

    @pytest.mark.parametrize("value", [-1, 21, True, "5", 1.5])
    def test_rejected(self, value):
        with pytest.raises(ValidationError):
            check_bound("WaitTimeSeconds", value, lower=0, upper=20)


class TestSQSClient:
    def test_list_queues(self, client, transport):
        transport.response.body = b"<ListQueuesResponse/>"
        assert client.list_queues(prefix="my") == Success(b"<ListQueuesResponse/>")
        request = transport.last_request
        assert request.method == "POST"
        assert request.destination.build() == "https://queue.amazonaws.com/"
        params = _params(request)
        assert params["Action"] == "ListQueues"
        assert params["QueueNamePrefix"] == "my"
        assert params["SignatureVersion"] == "2"
        assert "Signature" in params
        assert request.body is not None
        assert b"Action=ListQueues" in request.body

    def test_list_queues_without_prefix(self, client, transport):
        client.list_queues()
        assert "QueueNamePrefix" not in _params(transport.last_request)

    def test_regional_endpoint(self, aws_identity, transport):
        SQSClient(
            identity=aws_identity, transport=transport, region=SQSRegion.EU
        ).list_queues()
        assert transport.last_request.destination.host == "sqs.eu-west-1.amazonaws.com"

    def test_create_queue(self, client, transport):
        client.create_queue("my-queue", default_visibility_timeout=60)
        params = _params(transport.last_request)
        assert params["QueueName"] == "my-queue"
        assert params["Attribute.1.Name"] == "VisibilityTimeout"
        assert params["Attribute.1.Value"] == "60"

    def test_create_queue_rejects_bad_input(self, client, transport):
        with pytest.raises(ValidationError):
            client.create_queue("a" * 81)
        with pytest.raises(ValidationError):
            client.create_queue("my-queue", default_visibility_timeout=43201)
        assert transport.requests == []

    def test_send_message_to_queue_url(self, client, transport):
        client.send_message(QUEUE_URL, "hello world")
        request = transport.last_request
        assert request.destination.host == "sqs.us-east-1.amazonaws.com"
        assert request.destination.path == "/123456789012/my-queue"
        params = _params(request)
        assert params["Action"] == "SendMessage"
        assert params["MessageBody"] == "hello world"
        assert b"MessageBody=hello+world" in request.body

    @pytest.mark.parametrize(
        "queue_url",
        [
            None,
            "",
            "/123456789012/my-queue",
            "//sqs.us-east-1.amazonaws.com/123456789012/my-queue",
            "http://sqs.us-east-1.amazonaws.com/123456789012/my-queue",
        ],
    )
    def test_queue_url_required(self, client, transport, queue_url):
        with pytest.raises(ValidationError):
            client.delete_queue(queue_url)
        assert transport.requests == []

    def test_receive_message(self, client, transport):
        client.receive_message(
            QUEUE_URL, wait_time_seconds=20, max_number_of_messages=10
        )
        params = _params(transport.last_request)
        assert params["Action"] == "ReceiveMessage"
        assert params["WaitTimeSeconds"] == "20"
        assert params["MaxNumberOfMessages"] == "10"

    def test_receive_message_defaults_omitted(self, client, transport):
        client.receive_message(QUEUE_URL)
        params = _params(transport.last_request)
        assert "WaitTimeSeconds" not in params
        assert "MaxNumberOfMessages" not in params

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"wait_time_seconds": 21},
            {"wait_time_seconds": -1},
            {"max_number_of_messages": 0},
            {"max_number_of_messages": 11},
        ],
    )
    def test_receive_message_bounds(self, client, transport, kwargs):
        with pytest.raises(ValidationError):
            client.receive_message(QUEUE_URL, **kwargs)
        assert transport.requests == []

    def test_delete_message(self, client, transport):
        client.delete_message(QUEUE_URL, "handle+1")
        assert Parameter("ReceiptHandle", "handle+1") in transport.last_request.params

    def test_delete_message_requires_handle(self, client, transport):
        with pytest.raises(ValidationError):
            client.delete_message(QUEUE_URL, "")
        assert transport.requests == []

    def test_change_message_visibility(self, client, transport):
        client.change_message_visibility(QUEUE_URL, "handle", 43200)
        params = _params(transport.last_request)
        assert params["Action"] == "ChangeMessageVisibility"
        assert params["VisibilityTimeout"] == "43200"
        with pytest.raises(ValidationError):
            client.change_message_visibility(QUEUE_URL, "handle", 43201)
