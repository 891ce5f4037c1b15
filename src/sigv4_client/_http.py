"""
Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
SPDX-License-Identifier: Apache-2.0
"""

from collections.abc import AsyncIterable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import IO
from urllib.parse import urlsplit, urlunsplit


@dataclass(kw_only=True, frozen=True)
class URI:
    """Universal Resource Identifier, target location for a :py:class:`HTTPRequest`."""

    scheme: str = "https"
    """For example ``http`` or ``https``."""

    username: str | None = None
    password: str | None = None

    host: str
    """The hostname, for example ``kinesis.us-east-1.amazonaws.com``."""

    port: int | None = None

    path: str | None = None
    """Path component of the URI, already percent-encoded."""

    query: str | None = None
    """Query component of the URI as string, without the leading ``?``."""

    fragment: str | None = None

    @property
    def netloc(self) -> str:
        """Construct netloc string in format ``{username}:{password}@{host}:{port}``

        ``username``, ``password``, and ``port`` are only included if set.
        ``password`` is ignored, unless ``username`` is also set. IPv6 hosts are
        wrapped in brackets.
        """
        return f"{self._userinfo}{self.host_with_port}"

    @property
    def host_with_port(self) -> str:
        """The host and, when set, port, as sent in the Host header."""
        host = self.host
        if ":" in host and not host.startswith("["):
            host = f"[{host}]"
        if self.port is not None:
            return f"{host}:{self.port}"
        return host

    @property
    def _userinfo(self) -> str:
        if self.username is None:
            return ""
        if self.password is not None:
            return f"{self.username}:{self.password}@"
        return f"{self.username}@"

    def build(self) -> str:
        """Construct URI string representation.

        Returns a string of the form
        ``{scheme}://{username}:{password}@{host}:{port}{path}?{query}#{fragment}``
        """
        return urlunsplit(
            (
                self.scheme,
                self.netloc,
                self.path or "",
                self.query or "",
                self.fragment or "",
            )
        )

    @classmethod
    def from_url(cls, url: str) -> "URI":
        """Parse an absolute URL string.

        :raises ValueError: If the URL has no scheme or host, or its port is
            not a number.
        """
        parts = urlsplit(url)
        if not parts.scheme or not parts.hostname:
            raise ValueError(f"Expected an absolute URL, got {url!r}")
        return cls(
            scheme=parts.scheme,
            username=parts.username,
            password=parts.password,
            host=parts.hostname,
            port=parts.port,
            path=parts.path or None,
            query=parts.query or None,
            fragment=parts.fragment or None,
        )


class Field:
    """A name-value pair representing a single header.

    A field may carry more than one value, in which case the values are
    joined when the field is rendered.
    """

    def __init__(self, *, name: str, values: Iterable[str] | None = None):
        self.name = name
        self.values: list[str] = list(values) if values is not None else []

    def add(self, value: str) -> None:
        """Append a value to the field."""
        self.values.append(value)

    def set(self, values: list[str]) -> None:
        """Overwrite existing field values."""
        self.values = values

    def as_string(self, delimiter: str = ", ") -> str:
        """Get comma-delimited string of all values."""
        return delimiter.join(self.values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Field):
            return False
        return self.name == other.name and self.values == other.values

    def __repr__(self) -> str:
        return f"Field(name={self.name!r}, values={self.values!r})"


class Fields:
    """Collection of header fields, looked up by case-insensitive name."""

    def __init__(self, initial: Iterable[Field] | None = None):
        self.entries: dict[str, Field] = {}
        for fld in initial or ():
            self.set_field(fld)

    @classmethod
    def from_mapping(cls, headers: Mapping[str, str]) -> "Fields":
        return cls(Field(name=name, values=[value]) for name, value in headers.items())

    def set_field(self, field: Field) -> None:
        """Set entry for a Field name, replacing any existing entry."""
        self.entries[field.name.lower()] = field

    def get_field(self, name: str) -> Field:
        """Retrieve Field entry."""
        return self.entries[name.lower()]

    def remove_field(self, name: str) -> None:
        """Delete entry from collection."""
        del self.entries[name.lower()]

    def get(self, name: str, default: Field | None = None) -> Field | None:
        return self.entries.get(name.lower(), default)

    def copy(self) -> "Fields":
        """Copy the collection. Fields are copied too, so the copy is independent."""
        return Fields(Field(name=fld.name, values=fld.values) for fld in self)

    def __getitem__(self, name: str) -> Field:
        return self.get_field(name)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self.entries

    def __iter__(self) -> Iterator[Field]:
        return iter(self.entries.values())

    def __len__(self) -> int:
        return len(self.entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Fields):
            return False
        return self.entries == other.entries

    def __repr__(self) -> str:
        return f"Fields({list(self.entries.values())!r})"


Body = bytes | bytearray | IO[bytes] | Iterable[bytes] | AsyncIterable[bytes]


@dataclass(kw_only=True)
class HTTPRequest:
    """An outgoing HTTP request.

    Signers read every attribute but only ever write to ``fields``.
    """

    destination: URI
    method: str
    fields: Fields = field(default_factory=Fields)
    body: Body = b""

    @classmethod
    def from_url(
        cls,
        url: str,
        *,
        method: str = "GET",
        headers: Mapping[str, str] | None = None,
        body: Body = b"",
    ) -> "HTTPRequest":
        return cls(
            destination=URI.from_url(url),
            method=method,
            fields=Fields.from_mapping(headers or {}),
            body=body,
        )
