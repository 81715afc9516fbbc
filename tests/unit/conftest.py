"""
Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
SPDX-License-Identifier: Apache-2.0
"""

from dataclasses import dataclass, field
import datetime

import pytest

from aws_legacy_signers import AWSCredentialIdentity, AWSRequest, Fields

FIXED_DATE = datetime.datetime(2013, 1, 1, tzinfo=datetime.UTC)
FIXED_HTTP_DATE = "Tue, 01 Jan 2013 00:00:00 GMT"


@dataclass
class FakeResponse:
    status: int = 200
    fields: Fields = field(default_factory=Fields)
    body: bytes = b""


class FakeTransport:
    """Records every request and replies with a canned response."""

    def __init__(self, response: FakeResponse | None = None):
        self.response = response or FakeResponse()
        self.requests: list[AWSRequest] = []

    def send(self, request: AWSRequest) -> FakeResponse:
        self.requests.append(request)
        return self.response

    @property
    def last_request(self) -> AWSRequest:
        return self.requests[-1]


@pytest.fixture(scope="module")
def aws_identity() -> AWSCredentialIdentity:
    return AWSCredentialIdentity(access_key_id="AKID", secret_access_key="secret")


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def failing_transport() -> FakeTransport:
    return FakeTransport(FakeResponse(status=403, body=b"<Error/>"))


@pytest.fixture
def signing_properties() -> dict:
    return {"date": FIXED_DATE}
