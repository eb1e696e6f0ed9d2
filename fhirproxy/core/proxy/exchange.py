# fhirproxy/core/proxy/exchange.py
"""
Exchange data model

One client request/response cycle, as values:
- HeaderMap: case-insensitive, case-preserving, deterministic iteration
- Exchange: the inbound request plus its resolved client response kind
- ContentPayload: a body tagged with its serialization kind
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from fhirproxy.core.errors import DataFormatError
from fhirproxy.core.fhir.constants import ContentKind

from .negotiation import FORMAT_PARAM, resolve_client_content_type


TRANSACTION_ID_HEADER = "X-OpenHIM-TransactionID"

# Methods whose body is validated and converted
BODY_METHODS = frozenset({"POST", "PUT"})

# Never copied from one hop to the next
STRIPPED_HEADERS = ("Content-Type", "Content-Length", "Host")


HeaderSource = Union[Mapping[str, str], Iterable[Tuple[str, str]], "HeaderMap", None]
Body = Union[str, bytes]

_CHARSET_RE = re.compile(r';\s*charset\s*=\s*"?([^\s;"]+)', re.IGNORECASE)


def content_charset(content_type: Optional[str]) -> Optional[str]:
    """charset parameter of a media type, if declared."""
    if not content_type:
        return None
    match = _CHARSET_RE.search(content_type)
    return match.group(1) if match else None


def decode_body(raw: bytes, content_type: Optional[str]) -> str:
    """
    Decode raw body bytes with the declared charset (UTF-8 when none is declared).

    Undecodable bytes raise DataFormatError; they are never replaced.
    """
    charset = content_charset(content_type) or "utf-8"
    try:
        return raw.decode(charset)
    except (LookupError, UnicodeDecodeError) as exc:
        raise DataFormatError(
            f"Body is not valid {charset} text: {exc}",
            details={"charset": charset},
            cause=exc,
        ) from exc


class HeaderMap:
    """
    Immutable header mapping keyed by lower-cased name.

    Each entry keeps the original name and every value received for it, so
    repeated headers such as Set-Cookie survive a round trip. Iteration is
    ordered by the lower-cased name; get() joins repeated values with ", ".
    """

    __slots__ = ("_entries",)

    def __init__(self, headers: HeaderSource = None):
        entries: Dict[str, Tuple[str, Tuple[str, ...]]] = {}
        if isinstance(headers, HeaderMap):
            entries = dict(headers._entries)
        elif headers is not None:
            pairs = headers.items() if isinstance(headers, Mapping) else headers
            for name, value in pairs:
                key = name.lower()
                if key in entries:
                    entries[key] = (entries[key][0], entries[key][1] + (value,))
                else:
                    entries[key] = (name, (value,))
        self._entries = entries

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        entry = self._entries.get(name.lower())
        return ", ".join(entry[1]) if entry is not None else default

    def get_all(self, name: str) -> List[str]:
        entry = self._entries.get(name.lower())
        return list(entry[1]) if entry is not None else []

    def with_header(self, name: str, value: str) -> "HeaderMap":
        """Copy with name set to value (replacing any existing spelling and values)."""
        copy = HeaderMap(self)
        copy._entries[name.lower()] = (name, (value,))
        return copy

    def without(self, *names: str) -> "HeaderMap":
        copy = HeaderMap(self)
        for name in names:
            copy._entries.pop(name.lower(), None)
        return copy

    def items(self) -> Iterator[Tuple[str, str]]:
        """(name, value) pairs, one per received value."""
        for key in sorted(self._entries):
            name, values = self._entries[key]
            for value in values:
                yield name, value

    def to_dict(self) -> Dict[str, str]:
        return {name: self.get(name) for name in self}

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._entries

    def __iter__(self) -> Iterator[str]:
        for key in sorted(self._entries):
            yield self._entries[key][0]

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HeaderMap):
            return NotImplemented
        return list(self.items()) == list(other.items())

    def __hash__(self) -> int:
        return hash(tuple(self.items()))

    def __repr__(self) -> str:
        return f"HeaderMap({list(self.items())!r})"


@dataclass(frozen=True)
class ContentPayload:
    kind: ContentKind
    text: str


@dataclass(frozen=True)
class Exchange:
    """
    Inbound request of one exchange.

    client_kind is resolved once at construction from (headers, params,
    Content-Type) and never changes afterwards.
    """
    method: str
    path: str
    params: Tuple[Tuple[str, str], ...] = ()
    headers: HeaderMap = field(default_factory=HeaderMap)
    body: Optional[str] = None
    scheme: str = "http"
    host: str = ""
    # Bytes as received on the wire; body is the text form when no bytes are known
    raw_body: Optional[bytes] = None
    client_kind: str = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", self.method.upper())
        object.__setattr__(self, "params", tuple((str(k), str(v)) for k, v in self.params))
        if not isinstance(self.headers, HeaderMap):
            object.__setattr__(self, "headers", HeaderMap(self.headers))
        object.__setattr__(
            self,
            "client_kind",
            resolve_client_content_type(self.headers, self.params, self.content_type),
        )

    @property
    def content_type(self) -> Optional[str]:
        return self.headers.get("Content-Type")

    @property
    def wire_body(self) -> Optional[Body]:
        """Body as received: the raw bytes when known, else the text."""
        return self.raw_body if self.raw_body is not None else self.body

    def text(self) -> Optional[str]:
        """Body as text, decoded with the declared charset. Raises DataFormatError."""
        if self.raw_body is None:
            return self.body
        return decode_body(self.raw_body, self.content_type)

    @property
    def carries_body(self) -> bool:
        return self.method in BODY_METHODS

    @property
    def transaction_id(self) -> Optional[str]:
        return self.headers.get(TRANSACTION_ID_HEADER)

    @property
    def log_prefix(self) -> str:
        return f"[{self.transaction_id}]"

    def forwarded_params(self) -> Tuple[Tuple[str, str], ...]:
        """Query parameters relayed upstream (_format is proxy-only)."""
        return tuple((k, v) for k, v in self.params if k.lower() != FORMAT_PARAM)

    def forwarded_headers(self) -> HeaderMap:
        return self.headers.without(*STRIPPED_HEADERS)


__all__ = [
    "HeaderMap",
    "ContentPayload",
    "Exchange",
    "TRANSACTION_ID_HEADER",
    "BODY_METHODS",
    "STRIPPED_HEADERS",
    "Body",
    "content_charset",
    "decode_body",
]
