"""
Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
SPDX-License-Identifier: Apache-2.0
"""

import logging
from typing import Any

from ._http import HTTPRequest
from ._identity import Credentials
from .exceptions import SigningError
from .interfaces.http import HTTPTransport
from .interfaces.signing import SigningFunction
from .signers import Service, sign
from .transport import default_transport

logger = logging.getLogger(__name__)


class SigningClient:
    """Like a plain HTTP transport, but signs every request with ``credentials``.

    By default the signing scope is derived from each request's host and
    requests go through :func:`~sigv4_client.transport.default_transport`.
    Supply ``transport`` to use a session configured with custom timeouts,
    or ``sign_func`` to use another signing variant.

    The credentials are assumed to be sanely initialized; they are only
    checked when a request is signed.
    """

    def __init__(
        self,
        credentials: Credentials,
        *,
        transport: HTTPTransport | None = None,
        sign_func: SigningFunction = sign,
    ):
        self._credentials = credentials
        self._transport = transport if transport is not None else default_transport()
        self._sign_func = sign_func

    @classmethod
    def for_service(
        cls,
        credentials: Credentials,
        *,
        region: str,
        service: str,
        transport: HTTPTransport | None = None,
    ) -> "SigningClient":
        """Create a client whose signatures are scoped to ``service`` in ``region``."""
        return cls(
            credentials,
            transport=transport,
            sign_func=Service(name=service, region=region),
        )

    @property
    def transport(self) -> HTTPTransport:
        return self._transport

    def send(self, request: HTTPRequest) -> Any:
        """Sign ``request`` in place, then send it.

        :raises SigningError: If the request cannot be signed. Nothing is sent.
        :returns: Whatever the transport returns, unchanged.
        """
        try:
            self._sign_func(self._credentials, request)
        except SigningError as e:
            logger.debug(
                "Not sending %s %s: %s", request.method, request.destination.host, e
            )
            raise
        logger.debug(
            "Sending signed %s request to %s", request.method, request.destination.host
        )
        return self._transport.send(request)
