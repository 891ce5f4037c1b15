import datetime
import hmac
import logging
from collections.abc import AsyncIterable, Iterable
from dataclasses import dataclass, replace
from hashlib import sha256
from typing import Required, TypedDict
from urllib.parse import parse_qsl, quote

from ._http import URI, Body, Field, Fields, HTTPRequest
from ._identity import Credentials
from .exceptions import MissingExpectedParameterException, SigningError

logger = logging.getLogger(__name__)

HEADERS_EXCLUDED_FROM_SIGNING: tuple[str, ...] = (
    "authorization",
    "expect",
    "user-agent",
    "x-amz-content-sha256",
    "x-amzn-trace-id",
)
ALWAYS_SIGNED_HEADERS: frozenset[str] = frozenset(
    {"host", "x-amz-date", "x-amz-security-token"}
)
MINIMAL_SIGNED_HEADERS: frozenset[str] = frozenset({"host", "x-amz-date"})
DEFAULT_PORTS: dict[str, int] = {"http": 80, "https": 443}
ENDPOINT_SUFFIXES: tuple[str, ...] = ("amazonaws.com", "amazonaws.com.cn")

SIGV4_ALGORITHM: str = "AWS4-HMAC-SHA256"
SIGV4_TIMESTAMP_FORMAT: str = "%Y%m%dT%H%M%SZ"
DATE_HEADER: str = "X-Amz-Date"
SECURITY_TOKEN_HEADER: str = "X-Amz-Security-Token"
UNSIGNED_PAYLOAD: str = "UNSIGNED-PAYLOAD"
EMPTY_SHA256_HASH = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
PAYLOAD_CHUNK_SIZE: int = 1024 * 1024


@dataclass(frozen=True, kw_only=True)
class Configuration:
    """Signer-wide options.

    ``signed_headers`` selects which request headers take part in the
    signature. With ``None`` every header is signed except those listed in
    :data:`HEADERS_EXCLUDED_FROM_SIGNING`. With a set of names only
    those headers are signed, together with :data:`ALWAYS_SIGNED_HEADERS`.
    Use :data:`MINIMAL_SIGNED_HEADERS` to sign just the host and timestamp.
    Names are matched case-insensitively.
    """

    signed_headers: frozenset[str] | None = None

    def __post_init__(self) -> None:
        if self.signed_headers is not None:
            object.__setattr__(
                self,
                "signed_headers",
                frozenset(name.lower() for name in self.signed_headers),
            )


class SigV4SigningProperties(TypedDict, total=False):
    region: Required[str]
    service: Required[str]
    date: str
    payload_signing_enabled: bool


class SigV4Signer:
    """
    Request signer for applying the AWS Signature Version 4 algorithm.
    """

    def __init__(self, *, config: Configuration | None = None):
        self._config = config if config is not None else Configuration()

    def sign(
        self,
        *,
        signing_properties: SigV4SigningProperties,
        request: HTTPRequest,
        identity: Credentials,
    ) -> None:
        """Sign ``request`` in place.

        The ``X-Amz-Date``, ``X-Amz-Security-Token`` (when the identity carries
        a session token) and ``Authorization`` fields are only written to the
        request once the signature has been computed. On failure the request
        is left as it was.

        :raises SigningError: If the identity, properties or request cannot be
            used to produce a signature.
        """
        self._validate_identity(identity=identity)
        self._validate_request(request=request)
        new_signing_properties = self._normalize_signing_properties(
            signing_properties=signing_properties, request=request
        )

        # Stage the headers that take part in the signature on a copy so the
        # caller's request is untouched until signing succeeds.
        staged_fields = [
            Field(name=DATE_HEADER, values=[new_signing_properties["date"]])
        ]
        if identity.session_token:
            staged_fields.append(
                Field(name=SECURITY_TOKEN_HEADER, values=[identity.session_token])
            )
        new_request = self._generate_new_request(
            request=request, staged_fields=staged_fields
        )

        # Construct core signing components
        canonical_request = self.canonical_request(
            signing_properties=new_signing_properties,
            request=new_request,
        )
        string_to_sign = self.string_to_sign(
            canonical_request=canonical_request,
            signing_properties=new_signing_properties,
        )
        logger.debug("Canonical request:\n%s", canonical_request)
        logger.debug("String to sign:\n%s", string_to_sign)
        signature = self._signature(
            string_to_sign=string_to_sign,
            secret_key=identity.secret_access_key,
            signing_properties=new_signing_properties,
        )

        signing_fields = self._normalize_signing_fields(request=new_request)
        credential_scope = self._scope(signing_properties=new_signing_properties)
        credential = f"{identity.access_key_id}/{credential_scope}"
        authorization = self.generate_authorization_field(
            credential=credential,
            signed_headers=list(signing_fields.keys()),
            signature=signature,
        )

        for fld in staged_fields:
            request.fields.set_field(fld)
        request.fields.set_field(authorization)

    def generate_authorization_field(
        self, *, credential: str, signed_headers: list[str], signature: str
    ) -> Field:
        """Generate the `Authorization` field"""
        signed_headers_str = ";".join(signed_headers)
        auth_str = (
            f"{SIGV4_ALGORITHM} Credential={credential}, "
            f"SignedHeaders={signed_headers_str}, Signature={signature}"
        )
        return Field(name="Authorization", values=[auth_str])

    def _signature(
        self,
        *,
        string_to_sign: str,
        secret_key: str,
        signing_properties: SigV4SigningProperties,
    ) -> str:
        """Sign the string to sign.

        In SigV4, a signing key is created that is scoped to a specific region and
        service. The date, region, service and resulting signing key are individually
        hashed, then the composite hash is used to sign the string to sign.

        DateKey              = HMAC-SHA256("AWS4"+"<SecretAccessKey>", "<YYYYMMDD>")
        DateRegionKey        = HMAC-SHA256(<DateKey>, "<aws-region>")
        DateRegionServiceKey = HMAC-SHA256(<DateRegionKey>, "<aws-service>")
        SigningKey           = HMAC-SHA256(<DateRegionServiceKey>, "aws4_request")
        """
        k_date = self._hash(
            key=f"AWS4{secret_key}".encode(), value=signing_properties["date"][0:8]
        )
        k_region = self._hash(key=k_date, value=signing_properties["region"])
        k_service = self._hash(key=k_region, value=signing_properties["service"])
        k_signing = self._hash(key=k_service, value="aws4_request")

        return self._hash(key=k_signing, value=string_to_sign).hex()

    def _hash(self, key: bytes, value: str) -> bytes:
        return hmac.new(key=key, msg=value.encode(), digestmod=sha256).digest()

    def _validate_identity(self, *, identity: Credentials) -> None:
        """Perform runtime and expiration checks before attempting signing."""
        if not isinstance(identity, Credentials):
            raise SigningError(
                "Received unexpected value for identity parameter. Expected "
                f"Credentials but received {type(identity)}."
            )
        elif not identity.access_key_id or not identity.secret_access_key:
            raise SigningError(
                "Credentials must include a non-empty access key id and "
                "secret access key."
            )
        elif identity.is_expired:
            raise SigningError(
                f"Provided identity expired at {identity.expiration}. Please "
                "refresh the credentials or update the expiration parameter."
            )

    def _validate_request(self, *, request: HTTPRequest) -> None:
        if not request.method:
            raise SigningError("Cannot sign a request without an HTTP method.")
        uri = request.destination
        if uri.scheme not in DEFAULT_PORTS or not uri.host:
            raise SigningError(
                f"Cannot sign a request to {uri.build()!r}. Expected an "
                "http or https URI with a host."
            )

    def _normalize_signing_properties(
        self, *, signing_properties: SigV4SigningProperties, request: HTTPRequest
    ) -> SigV4SigningProperties:
        for key in ("region", "service"):
            if not signing_properties.get(key):
                raise MissingExpectedParameterException(
                    f"Signing properties must include a non-empty {key!r}."
                )
        # Create copy of signing properties to avoid mutating the original
        new_signing_properties = SigV4SigningProperties(**signing_properties)
        new_signing_properties["date"] = self._resolve_signing_date(
            date=new_signing_properties.get("date"), request=request
        )
        return new_signing_properties

    def _generate_new_request(
        self, *, request: HTTPRequest, staged_fields: list[Field]
    ) -> HTTPRequest:
        fields = request.fields.copy()
        for fld in staged_fields:
            fields.set_field(fld)
        return replace(request, fields=fields)

    def _resolve_signing_date(self, *, date: str | None, request: HTTPRequest) -> str:
        if date is None and DATE_HEADER in request.fields:
            date = request.fields[DATE_HEADER].as_string()
        if date is None:
            date_obj = datetime.datetime.now(datetime.timezone.utc)
            return date_obj.strftime(SIGV4_TIMESTAMP_FORMAT)
        try:
            datetime.datetime.strptime(date, SIGV4_TIMESTAMP_FORMAT)
        except ValueError as e:
            raise SigningError(
                f"Signing date {date!r} does not match the format "
                f"{SIGV4_TIMESTAMP_FORMAT!r}."
            ) from e
        return date

    def canonical_request(
        self, *, signing_properties: SigV4SigningProperties, request: HTTPRequest
    ) -> str:
        canonical_path = self._format_canonical_path(path=request.destination.path)
        canonical_query = self._format_canonical_query(query=request.destination.query)
        normalized_fields = self._normalize_signing_fields(request=request)
        canonical_fields = self._format_canonical_fields(fields=normalized_fields)
        canonical_payload = self._format_canonical_payload(
            body=request.body, signing_properties=signing_properties
        )
        return (
            f"{request.method.upper()}\n"
            f"{canonical_path}\n"
            f"{canonical_query}\n"
            f"{canonical_fields}\n"
            f"{';'.join(normalized_fields)}\n"
            f"{canonical_payload}"
        )

    def string_to_sign(
        self,
        *,
        canonical_request: str,
        signing_properties: SigV4SigningProperties,
    ) -> str:
        date = signing_properties.get("date")
        if date is None:
            raise MissingExpectedParameterException(
                "Cannot generate string_to_sign without a valid date "
                f"in your signing_properties. Current value: {date}"
            )
        return (
            f"{SIGV4_ALGORITHM}\n"
            f"{date}\n"
            f"{self._scope(signing_properties=signing_properties)}\n"
            f"{sha256(canonical_request.encode()).hexdigest()}"
        )

    def _scope(self, signing_properties: SigV4SigningProperties) -> str:
        formatted_date = signing_properties["date"][0:8]
        region = signing_properties["region"]
        service = signing_properties["service"]
        # Scope format: <YYYYMMDD>/<AWS Region>/<AWS Service>/aws4_request
        return f"{formatted_date}/{region}/{service}/aws4_request"

    def _format_canonical_path(self, *, path: str | None) -> str:
        if not path:
            path = "/"
        normalized_path = _remove_dot_segments(path)
        return quote(string=normalized_path, safe="/%")

    def _format_canonical_query(self, *, query: str | None) -> str:
        if not query:
            return ""

        query_params = parse_qsl(qs=query, keep_blank_values=True)
        query_parts = (
            (quote(string=key, safe=""), quote(string=value, safe=""))
            for key, value in query_params
        )
        # key-value pairs must be in sorted order for their encoded forms.
        return "&".join(f"{key}={value}" for key, value in sorted(query_parts))

    def _normalize_signing_fields(self, *, request: HTTPRequest) -> dict[str, str]:
        normalized_fields = {
            field.name.lower(): field.as_string(delimiter=",")
            for field in request.fields
            if self._is_signed_field(name=field.name.lower())
        }
        if "host" not in normalized_fields:
            normalized_fields["host"] = self._normalize_host_field(
                uri=request.destination
            )

        return dict(sorted(normalized_fields.items()))

    def _is_signed_field(self, *, name: str) -> bool:
        if name in HEADERS_EXCLUDED_FROM_SIGNING:
            return False
        allowed = self._config.signed_headers
        return allowed is None or name in allowed or name in ALWAYS_SIGNED_HEADERS

    def _normalize_host_field(self, *, uri: URI) -> str:
        if uri.port is not None and DEFAULT_PORTS.get(uri.scheme) == uri.port:
            uri = replace(uri, port=None)
        return uri.host_with_port

    def _format_canonical_fields(self, *, fields: dict[str, str]) -> str:
        return "".join(
            f"{key}:{' '.join(value.split())}\n" for key, value in fields.items()
        )

    def _format_canonical_payload(
        self,
        *,
        body: Body,
        signing_properties: SigV4SigningProperties,
    ) -> str:
        if isinstance(body, AsyncIterable):
            raise SigningError(
                "An async body was attached to a synchronous signer. Please "
                "ensure your body is bytes or of type Iterable[bytes]."
            )
        if signing_properties.get("payload_signing_enabled", True) is False:
            return UNSIGNED_PAYLOAD
        return _payload_hash(body)


class Service:
    """A signing function scoped to one service in one region.

    Instances are callables matching
    :class:`~sigv4_client.interfaces.signing.SigningFunction`::

        sign = Service(name="kinesis", region="us-west-2")
        sign(credentials, request)
    """

    def __init__(
        self, *, name: str, region: str, signer: SigV4Signer | None = None
    ) -> None:
        self.name = name
        self.region = region
        self._signer = signer if signer is not None else SigV4Signer()

    def __call__(self, credentials: Credentials, request: HTTPRequest) -> None:
        self._signer.sign(
            signing_properties=SigV4SigningProperties(
                region=self.region, service=self.name
            ),
            request=request,
            identity=credentials,
        )

    def __repr__(self) -> str:
        return f"Service(name={self.name!r}, region={self.region!r})"


def service_from_host(host: str) -> Service:
    """Derive the signing scope from a regional endpoint host name.

    ``kinesis.us-east-1.amazonaws.com`` signs for service ``kinesis`` in
    region ``us-east-1``.

    :raises SigningError: If the host is not a regional endpoint under one of
        :data:`ENDPOINT_SUFFIXES`.
    """
    labels = host.lower().rstrip(".").split(".")
    for suffix in ENDPOINT_SUFFIXES:
        suffix_labels = suffix.split(".")
        if labels[-len(suffix_labels) :] == suffix_labels:
            labels = labels[: -len(suffix_labels)]
            break
    else:
        labels = []
    if len(labels) < 2 or not all(labels):
        raise SigningError(
            f"Cannot derive a service and region from host {host!r}. Expected "
            "an endpoint of the form <service>.<region>.amazonaws.com."
        )
    return Service(name=labels[0], region=labels[1])


def sign(credentials: Credentials, request: HTTPRequest) -> None:
    """Sign ``request`` for the service and region named by its host."""
    service_from_host(request.destination.host)(credentials, request)


def _payload_hash(body: Body) -> str:
    if isinstance(body, bytes | bytearray):
        return sha256(body).hexdigest() if body else EMPTY_SHA256_HASH
    if isinstance(body, str):
        raise SigningError("Request bodies must be bytes, not str.")

    checksum = sha256()
    if hasattr(body, "read"):
        if not (hasattr(body, "seekable") and body.seekable()):
            raise SigningError(
                "Cannot hash a body stream that is not seekable. Read it into "
                "bytes or disable payload signing."
            )
        position = body.tell()
        try:
            while chunk := body.read(PAYLOAD_CHUNK_SIZE):
                checksum.update(chunk)
        finally:
            body.seek(position)
        return checksum.hexdigest()

    if isinstance(body, list | tuple):
        for chunk in body:
            checksum.update(chunk)
        return checksum.hexdigest()

    if isinstance(body, Iterable):
        raise SigningError(
            "Cannot hash a one-shot body iterator without consuming it. Pass "
            "bytes, a seekable file or a list of chunks, or disable payload "
            "signing."
        )
    raise SigningError(f"Unsupported request body type {type(body)}.")


def _remove_dot_segments(path: str, remove_consecutive_slashes: bool = True) -> str:
    """Removes dot segments from a path per :rfc:`3986#section-5.2.4`.
    Optionally removes consecutive slashes, true by default.
    :param path: The path to modify.
    :param remove_consecutive_slashes: Whether to remove consecutive slashes.
    :returns: The path with dot segments removed.
    """
    output = []
    for segment in path.split("/"):
        if segment == ".":
            continue
        elif segment != "..":
            output.append(segment)
        elif output:
            output.pop()
    if path.startswith("/") and (not output or output[0]):
        output.insert(0, "")
    if output and path.endswith(("/.", "/..")):
        output.append("")
    result = "/".join(output)
    if remove_consecutive_slashes:
        result = result.replace("//", "/")
    return result
