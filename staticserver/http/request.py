"""Parsing of raw HTTP request heads."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

DEFAULT_MAX_REQUEST_BYTES = 8192

_VERSION_RE = re.compile(r"^HTTP/\d\.\d$")
_TERMINATORS = (b"\r\n\r\n", b"\n\n")


class BadRequestError(ValueError):
    """Raised when a request head cannot be parsed."""


class Method(str, Enum):
    GET = "GET"
    OTHER = "OTHER"


@dataclass(frozen=True)
class ParsedRequest:
    method: Method
    raw_method: str
    raw_path: str
    version: str
    headers: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)
    query_ignored: bool = False

    def header(self, name: str) -> Optional[str]:
        name = name.lower()
        for key, value in self.headers:
            if key.lower() == name:
                return value
        return None


def head_end(data: bytes) -> int:
    """Return the offset just past the blank line ending the head, or -1."""

    ends = []
    for terminator in _TERMINATORS:
        index = data.find(terminator)
        if index != -1:
            ends.append(index + len(terminator))
    return min(ends) if ends else -1


def split_target(target: str) -> Tuple[str, bool]:
    """Drop any ``?query`` or ``#fragment`` from a request target.

    The query is acknowledged but never interpreted.
    """

    path, has_query = target, False
    if "#" in path:
        path = path.split("#", 1)[0]
    if "?" in path:
        path = path.split("?", 1)[0]
        has_query = True
    return path, has_query


def parse_request(raw: bytes, max_bytes: int = DEFAULT_MAX_REQUEST_BYTES) -> ParsedRequest:
    """Parse a request line plus headers from ``raw``."""

    if not raw:
        raise BadRequestError("Empty request")
    end = head_end(raw)
    head = raw[:end] if end != -1 else raw
    if len(head) > max_bytes:
        raise BadRequestError(f"Request head exceeds {max_bytes} bytes")

    lines = head.replace(b"\r\n", b"\n").split(b"\n")
    try:
        request_line = lines[0].decode("utf-8")
    except UnicodeDecodeError as exc:
        raise BadRequestError("Request line is not valid UTF-8") from exc

    words = request_line.split()
    if len(words) != 3:
        raise BadRequestError(f"Malformed request line: {request_line!r}")
    raw_method, target, version = words
    if not _VERSION_RE.match(version):
        raise BadRequestError(f"Unsupported protocol version: {version!r}")
    if not target.startswith("/"):
        raise BadRequestError(f"Request target must be an absolute path: {target!r}")

    headers = []
    for line in lines[1:]:
        if not line:
            continue
        text = line.decode("iso-8859-1")
        if ":" not in text:
            continue
        key, value = text.split(":", 1)
        headers.append((key.strip(), value.strip()))

    path, has_query = split_target(target)
    method = Method.GET if raw_method == "GET" else Method.OTHER
    return ParsedRequest(
        method=method,
        raw_method=raw_method,
        raw_path=path,
        version=version,
        headers=tuple(headers),
        query_ignored=has_query,
    )
