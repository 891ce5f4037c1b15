"""
Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
SPDX-License-Identifier: Apache-2.0
"""

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from .._http import HTTPRequest


class HTTPTransport(Protocol):
    """Sends a fully-formed request and returns the service's response.

    HTTP error statuses are returned as ordinary responses. Only failures to
    obtain a response at all are raised.
    """

    def send(self, request: "HTTPRequest") -> Any: ...
