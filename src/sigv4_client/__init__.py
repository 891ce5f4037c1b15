"""
Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
SPDX-License-Identifier: Apache-2.0

sigv4-client signs outgoing HTTP requests with AWS Signature Version 4 and
sends them through a pluggable transport, ``requests`` by default.
"""

from __future__ import annotations

from ._http import URI, Field, Fields, HTTPRequest
from ._identity import Credentials
from ._version import __version__
from .client import SigningClient
from .exceptions import (
    BaseSigningClientException,
    MissingExpectedParameterException,
    SigningError,
    TransportError,
)
from .signers import (
    MINIMAL_SIGNED_HEADERS,
    Configuration,
    Service,
    SigV4Signer,
    SigV4SigningProperties,
    service_from_host,
    sign,
)
from .transport import RequestsTransport, default_transport

__license__ = "Apache-2.0"
__version__ = __version__

__all__ = (
    "BaseSigningClientException",
    "Configuration",
    "Credentials",
    "Field",
    "Fields",
    "HTTPRequest",
    "MINIMAL_SIGNED_HEADERS",
    "MissingExpectedParameterException",
    "RequestsTransport",
    "Service",
    "SigV4Signer",
    "SigV4SigningProperties",
    "SigningClient",
    "SigningError",
    "TransportError",
    "URI",
    "default_transport",
    "service_from_host",
    "sign",
)
