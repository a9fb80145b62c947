"""HTTP response objects and serialisation."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Dict, Optional


@dataclass
class Response:
    status: int
    body: bytes = b""
    content_type: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def reason(self) -> str:
        try:
            return HTTPStatus(self.status).phrase
        except ValueError:
            return "Unknown"

    def to_bytes(self) -> bytes:
        lines = [f"HTTP/1.1 {self.status} {self.reason}"]
        if self.content_type:
            lines.append(f"Content-Type: {self.content_type}")
        lines.append(f"Content-Length: {len(self.body)}")
        for key, value in self.headers.items():
            lines.append(f"{key}: {value}")
        lines.append("Connection: close")
        head = "\r\n".join(lines) + "\r\n\r\n"
        return head.encode("iso-8859-1") + self.body


def error_response(status: int, headers: Optional[Dict[str, str]] = None) -> Response:
    """Build a plain-text error response.

    The body only depends on ``status`` so two errors with the same code are
    byte-for-byte identical.
    """

    response = Response(status=int(status), content_type="text/plain; charset=utf-8")
    response.body = f"{response.status} {response.reason}\n".encode("utf-8")
    if headers:
        response.headers.update(headers)
    return response


def too_many_requests(retry_after: float) -> Response:
    seconds = max(1, math.ceil(retry_after))
    return error_response(HTTPStatus.TOO_MANY_REQUESTS, {"Retry-After": str(seconds)})
