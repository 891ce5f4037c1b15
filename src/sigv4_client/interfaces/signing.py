"""
Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
SPDX-License-Identifier: Apache-2.0
"""

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from .._http import HTTPRequest
    from .._identity import Credentials


class SigningFunction(Protocol):
    """Signs a request in place using the given credentials.

    Implementations add their headers to ``request.fields`` only once the
    signature is complete, and raise :class:`~sigv4_client.exceptions.SigningError`
    otherwise, leaving the request untouched.
    """

    def __call__(self, credentials: "Credentials", request: "HTTPRequest") -> None: ...
