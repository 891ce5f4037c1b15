"""
Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
SPDX-License-Identifier: Apache-2.0
"""

from unittest.mock import Mock, patch

import pytest
import requests

from sigv4_client import (
    Credentials,
    Field,
    HTTPRequest,
    RequestsTransport,
    Service,
    TransportError,
)


@pytest.fixture
def session() -> Mock:
    return Mock(spec=requests.Session)


def _request(**kwargs) -> HTTPRequest:
    return HTTPRequest.from_url(
        "https://kinesis.us-east-1.amazonaws.com/?a=1",
        method="POST",
        headers={"Authorization": "AWS4-HMAC-SHA256 ...", "X-Amz-Date": "x"},
        **kwargs,
    )


class TestRequestsTransport:
    def test_send(self, session: Mock):
        response = Mock(spec=requests.Response, status_code=403)
        session.request.return_value = response
        transport = RequestsTransport(session=session, timeout=(3.05, 27))

        assert transport.send(_request(body=b"{}")) is response
        session.request.assert_called_once_with(
            "POST",
            "https://kinesis.us-east-1.amazonaws.com/?a=1",
            headers={"Authorization": "AWS4-HMAC-SHA256 ...", "X-Amz-Date": "x"},
            data=b"{}",
            timeout=(3.05, 27),
            allow_redirects=False,
        )

    def test_multi_value_field_sent_as_signed(self, session: Mock):
        credentials = Credentials(access_key_id="AKID", secret_access_key="secret")
        sign = Service(name="kinesis", region="us-east-1")
        request = HTTPRequest.from_url(
            "https://kinesis.us-east-1.amazonaws.com/", method="POST", body=b"{}"
        )
        request.fields.set_field(Field(name="X-Amz-Meta", values=["a", "b"]))
        sign(credentials, request)

        RequestsTransport(session=session).send(request)
        sent = session.request.call_args
        sent_headers = dict(sent.kwargs["headers"])
        authorization = sent_headers.pop("Authorization")

        received = HTTPRequest.from_url(
            sent.args[1], method=sent.args[0], headers=sent_headers, body=b"{}"
        )
        sign(credentials, received)
        assert received.fields["Authorization"].as_string() == authorization

    def test_empty_body_sent_as_none(self, session: Mock):
        RequestsTransport(session=session).send(_request())
        assert session.request.call_args.kwargs["data"] is None

    def test_chunked_body_joined(self, session: Mock):
        RequestsTransport(session=session).send(_request(body=[b"ab", b"cd"]))
        assert session.request.call_args.kwargs["data"] == b"abcd"

    def test_request_exception_becomes_transport_error(self, session: Mock):
        cause = requests.ConnectionError("connection refused")
        session.request.side_effect = cause

        with pytest.raises(TransportError) as exc_info:
            RequestsTransport(session=session).send(_request())
        assert exc_info.value.__cause__ is cause

    def test_close_leaves_supplied_session_open(self, session: Mock):
        with RequestsTransport(session=session):
            pass
        session.close.assert_not_called()

    def test_close_owned_session(self):
        with patch("sigv4_client.transport.requests.Session") as session_cls:
            with RequestsTransport():
                pass
        session_cls.return_value.close.assert_called_once_with()
