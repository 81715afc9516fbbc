"""
Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
SPDX-License-Identifier: Apache-2.0
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field, replace
from typing import NamedTuple
from urllib.parse import quote_plus, unquote_plus, urlencode, urlsplit

from .exceptions import ValidationError


class Parameter(NamedTuple):
    """A single request parameter. A ``None`` value renders as a bare name."""

    name: str
    value: str | None = None


def sort_parameters(params: Iterable[Parameter]) -> tuple[Parameter, ...]:
    """Sort parameters by name only.

    Parameters sharing a name keep their original relative order.
    """
    return tuple(sorted((Parameter(*p) for p in params), key=lambda p: p.name))


def parse_query(query: str | None) -> tuple[Parameter, ...]:
    """Decode a raw query string into parameters, keeping bare names bare."""
    if not query:
        return ()
    params = []
    for part in query.split("&"):
        if not part:
            continue
        name, sep, value = part.partition("=")
        params.append(
            Parameter(unquote_plus(name), unquote_plus(value) if sep else None)
        )
    return tuple(params)


def encode_parameters(params: Iterable[Parameter]) -> str:
    """Render parameters as an ``application/x-www-form-urlencoded`` string."""
    return urlencode([(p.name, "" if p.value is None else p.value) for p in params])


def _encode_query(params: Iterable[Parameter]) -> str:
    parts = []
    for p in params:
        if p.value is None:
            parts.append(quote_plus(p.name))
        else:
            parts.append(urlencode([(p.name, p.value)]))
    return "&".join(parts)


@dataclass(frozen=True)
class URI:
    host: str | None = None
    path: str = ""
    query: str | None = None
    scheme: str = "https"
    port: int | None = None

    @property
    def netloc(self) -> str:
        if self.host is None:
            return ""
        if self.port is not None:
            return f"{self.host}:{self.port}"
        return self.host

    def build(self) -> str:
        """Render the URI as a string. Only components that are set appear."""
        uri = f"{self.scheme}://{self.netloc}" if self.host else ""
        uri += self.path
        if self.query:
            uri += f"?{self.query}"
        return uri

    def with_query_parameters(self, params: Iterable[Parameter]) -> "URI":
        encoded = _encode_query(params)
        if not encoded:
            return self
        query = f"{self.query}&{encoded}" if self.query else encoded
        return replace(self, query=query)

    @classmethod
    def from_string(cls, uri: str) -> "URI":
        try:
            parts = urlsplit(uri)
            port = parts.port
        except ValueError as e:
            raise ValidationError(f"Invalid URI {uri!r}: {e}") from e
        if parts.scheme and parts.scheme not in ("http", "https"):
            raise ValidationError(f"Unsupported URI scheme: {parts.scheme!r}")
        return cls(
            scheme=parts.scheme or "https",
            host=parts.hostname,
            port=port,
            path=parts.path,
            query=parts.query or None,
        )

    def __str__(self) -> str:
        return self.build()


@dataclass(frozen=True)
class Field:
    """A name/value(s) HTTP header."""

    name: str
    values: tuple[str, ...] = ()

    def as_string(self, delimiter: str = ", ") -> str:
        return delimiter.join(self.values)


class Fields:
    """Ordered, immutable HTTP header multimap.

    Lookups are case-insensitive and return the first matching entry. Updates
    return a new instance.
    """

    __slots__ = ("_entries",)

    def __init__(self, initial: Iterable[Field] = ()) -> None:
        self._entries: tuple[Field, ...] = tuple(initial)

    def __iter__(self) -> Iterator[Field]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self._find(name) is not None

    def __getitem__(self, name: str) -> Field:
        found = self._find(name)
        if found is None:
            raise KeyError(name)
        return found

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Fields):
            return NotImplemented
        return self._entries == other._entries

    def __hash__(self) -> int:
        return hash(self._entries)

    def __repr__(self) -> str:
        return f"Fields({list(self._entries)!r})"

    def _find(self, name: str) -> Field | None:
        lowered = name.lower()
        for entry in self._entries:
            if entry.name.lower() == lowered:
                return entry
        return None

    def get_first(self, name: str) -> str | None:
        """Value of the first field named ``name``, or None."""
        found = self._find(name)
        if found is None:
            return None
        return found.as_string()

    def with_field(self, field: Field) -> "Fields":
        return Fields((*self._entries, field))

    def set_field(self, field: Field) -> "Fields":
        """Replace every field sharing ``field``'s name with ``field``.

        The replacement takes the position of the first existing entry, or is
        appended when there is none.
        """
        lowered = field.name.lower()
        entries: list[Field] = []
        placed = False
        for entry in self._entries:
            if entry.name.lower() != lowered:
                entries.append(entry)
            elif not placed:
                entries.append(field)
                placed = True
        if not placed:
            entries.append(field)
        return Fields(entries)


@dataclass(frozen=True, kw_only=True)
class AWSRequest:
    """Immutable snapshot of an outbound request.

    Signers never modify a request; they return a new one carrying the
    signature, so a signed request can't drift from what was signed.
    """

    method: str
    destination: URI
    fields: Fields = field(default_factory=Fields)
    params: tuple[Parameter, ...] = ()
    resource: str | None = None
    body: bytes | None = None

    def query_parameters(self) -> tuple[Parameter, ...]:
        """Parameters from the destination query followed by ``params``."""
        return parse_query(self.destination.query) + self.params


class AWSRequestBuilder:
    """Accumulates headers, parameters and a body until :meth:`build`."""

    def __init__(
        self,
        method: str,
        destination: URI | str,
        *,
        resource: str | None = None,
    ) -> None:
        if isinstance(destination, str):
            destination = URI.from_string(destination)
        self.method = method.upper()
        self.destination = destination
        self.resource = resource
        self.body: bytes | None = None
        self._fields: list[Field] = []
        self._params: list[Parameter] = []

    def add_header(self, name: str, value: str) -> "AWSRequestBuilder":
        self._fields.append(Field(name=name, values=(value,)))
        return self

    def set_header(self, name: str, value: str) -> "AWSRequestBuilder":
        lowered = name.lower()
        self._fields = [f for f in self._fields if f.name.lower() != lowered]
        return self.add_header(name, value)

    def add_parameter(
        self, name: str, value: str | None, *, optional: bool = False
    ) -> "AWSRequestBuilder":
        """Append a parameter.

        With ``optional=True`` a ``None`` value is skipped rather than sent as a
        bare name.
        """
        if value is None and optional:
            return self
        self._params.append(Parameter(name, value))
        return self

    def set_body(self, body: bytes | None) -> "AWSRequestBuilder":
        self.body = body
        return self

    def build(self) -> AWSRequest:
        return AWSRequest(
            method=self.method,
            destination=self.destination,
            fields=Fields(self._fields),
            params=tuple(self._params),
            resource=self.resource,
            body=self.body,
        )
