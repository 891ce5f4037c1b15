"""
Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
SPDX-License-Identifier: Apache-2.0
"""

import pytest

from sigv4_client import URI, Field, Fields, HTTPRequest


class TestURI:
    def test_from_url(self):
        uri = URI.from_url("https://user:pw@example.com:8443/a/b?x=1&y=2#frag")
        assert uri == URI(
            scheme="https",
            username="user",
            password="pw",
            host="example.com",
            port=8443,
            path="/a/b",
            query="x=1&y=2",
            fragment="frag",
        )

    @pytest.mark.parametrize("url", ["/relative/path", "example.com", "https://"])
    def test_from_url_rejects_relative(self, url: str):
        with pytest.raises(ValueError):
            URI.from_url(url)

    def test_ipv6_netloc(self):
        uri = URI.from_url("http://[::1]:8080/test")
        assert uri.host == "::1"
        assert uri.netloc == "[::1]:8080"
        assert uri.build() == "http://[::1]:8080/test"

    def test_build(self):
        uri = URI(host="kinesis.us-east-1.amazonaws.com", path="/", query="a=1")
        assert uri.build() == "https://kinesis.us-east-1.amazonaws.com/?a=1"


class TestFields:
    def test_lookup_is_case_insensitive(self):
        fields = Fields([Field(name="Content-Type", values=["text/plain"])])
        assert "content-type" in fields
        assert fields["CONTENT-TYPE"].name == "Content-Type"
        assert fields.get("missing") is None

    def test_set_field_replaces(self):
        fields = Fields.from_mapping({"X-Amz-Date": "1"})
        fields.set_field(Field(name="x-amz-date", values=["2"]))
        assert len(fields) == 1
        assert fields["X-Amz-Date"].as_string() == "2"

    def test_remove_field(self):
        fields = Fields.from_mapping({"Host": "example.com"})
        fields.remove_field("host")
        assert "Host" not in fields

    def test_copy_is_independent(self):
        fields = Fields.from_mapping({"X-Multi": "a"})
        copied = fields.copy()
        copied["X-Multi"].add("b")
        copied.set_field(Field(name="X-New", values=["1"]))

        assert fields["X-Multi"].values == ["a"]
        assert "X-New" not in fields
        assert copied != fields

    def test_field_as_string(self):
        fld = Field(name="Accept", values=["a", "b"])
        assert fld.as_string() == "a, b"
        assert fld.as_string(delimiter=",") == "a,b"


class TestHTTPRequest:
    def test_from_url(self):
        request = HTTPRequest.from_url(
            "https://kinesis.us-east-1.amazonaws.com/",
            method="POST",
            headers={"Content-Type": "application/json"},
            body=b"{}",
        )
        assert request.method == "POST"
        assert request.destination.host == "kinesis.us-east-1.amazonaws.com"
        assert request.fields["content-type"].as_string() == "application/json"
        assert request.body == b"{}"

    def test_defaults(self):
        request = HTTPRequest(destination=URI(host="example.com"), method="GET")
        assert len(request.fields) == 0
        assert request.body == b""
