"""
Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
SPDX-License-Identifier: Apache-2.0
"""

import logging
from functools import cache

import requests

from ._http import HTTPRequest
from .exceptions import TransportError

logger = logging.getLogger(__name__)


class RequestsTransport:
    """Sends :class:`~sigv4_client.HTTPRequest` objects with a ``requests.Session``.

    Any ``timeout`` is passed to every call. Redirects are not followed, since
    a redirected request would carry a signature for the wrong destination.
    """

    def __init__(
        self,
        *,
        session: requests.Session | None = None,
        timeout: float | tuple[float, float] | None = None,
    ):
        self._owns_session = session is None
        self._session = session if session is not None else requests.Session()
        self._timeout = timeout

    def send(self, request: HTTPRequest) -> requests.Response:
        url = request.destination.build()
        body = request.body
        if isinstance(body, list | tuple):
            body = b"".join(body)
        try:
            return self._session.request(
                request.method,
                url,
                headers={
                    fld.name: fld.as_string(delimiter=",") for fld in request.fields
                },
                data=body or None,
                timeout=self._timeout,
                allow_redirects=False,
            )
        except requests.RequestException as e:
            logger.debug("%s %s failed: %s", request.method, url, e)
            raise TransportError(f"HTTP request to {url} failed: {e}") from e

    def close(self) -> None:
        """Close the session if this transport created it."""
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> "RequestsTransport":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


@cache
def default_transport() -> RequestsTransport:
    """The process-wide transport used by clients that are not given one."""
    return RequestsTransport()
