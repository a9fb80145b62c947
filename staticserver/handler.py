"""Per-connection request handling: rate limit, parse, resolve, respond."""
from __future__ import annotations

import logging
import socket
from http import HTTPStatus
from typing import Optional

from staticserver.config import Settings
from staticserver.http import (
    BadRequestError,
    Method,
    Response,
    error_response,
    head_end,
    parse_request,
    too_many_requests,
)
from staticserver.rate_limit import RateLimiter
from staticserver.resolver import Outcome, PathResolver
from staticserver.utils import guess_content_type

LOGGER = logging.getLogger(__name__)

RECV_CHUNK = 4096


class RequestHandler:
    """Turn one accepted connection into exactly one HTTP response."""

    def __init__(
        self,
        settings: Settings,
        limiter: Optional[RateLimiter] = None,
        resolver: Optional[PathResolver] = None,
    ) -> None:
        self._settings = settings
        if limiter is None:
            limiter = RateLimiter(
                settings.rate_limit_requests,
                settings.penalty_seconds,
                settings.rate_limit_window_seconds,
                max_tracked_clients=settings.max_tracked_clients,
            )
        if resolver is None:
            resolver = PathResolver(settings.root, settings.blacklist, settings.default_document)
        self.limiter = limiter
        self.resolver = resolver

    def handle_connection(self, conn: socket.socket, client_ip: str) -> None:
        decision = self.limiter.check(client_ip)

        # The head is drained even for rejected clients so closing the socket
        # does not reset the connection before the client reads the 429.
        try:
            raw = self.read_head(conn)
        except socket.timeout:
            LOGGER.info("client sent no request in time", extra={"client_ip": client_ip})
            if decision.admitted:
                return
            raw = b""
        except OSError as exc:
            LOGGER.info("error reading from client: %s", exc, extra={"client_ip": client_ip})
            return

        if not decision.admitted:
            response = too_many_requests(decision.retry_after)
            LOGGER.info(
                "request rejected by rate limiter",
                extra={"client_ip": client_ip, "status": response.status},
            )
        elif not raw:
            LOGGER.debug(
                "client closed connection without a request", extra={"client_ip": client_ip}
            )
            return
        else:
            response = self.respond(raw, client_ip)
        self._send(conn, response, client_ip)

    def read_head(self, conn: socket.socket) -> bytes:
        """Read until the blank line after the headers, EOF, or the size cap.

        Stops as soon as more than ``max_request_bytes`` have arrived, so an
        oversized head is detected without buffering all of it.
        """

        limit = self._settings.max_request_bytes
        conn.settimeout(self._settings.read_timeout_seconds)
        data = b""
        while head_end(data) == -1 and len(data) <= limit:
            chunk = conn.recv(RECV_CHUNK)
            if not chunk:
                break
            data += chunk
        return data[: limit + 1] if head_end(data) == -1 else data

    def respond(self, raw: bytes, client_ip: str = "-") -> Response:
        try:
            request = parse_request(raw, self._settings.max_request_bytes)
        except BadRequestError as exc:
            LOGGER.warning(
                "bad request: %s", exc, extra={"client_ip": client_ip, "status": 400}
            )
            return error_response(HTTPStatus.BAD_REQUEST)

        log_extra = {
            "client_ip": client_ip,
            "method": request.raw_method,
            "path": request.raw_path,
            "host": request.header("Host"),
        }
        if request.method is not Method.GET:
            return self._log(error_response(HTTPStatus.BAD_REQUEST), log_extra)

        resolved = self.resolver.resolve(request.raw_path)
        if resolved.outcome in (Outcome.NOT_FOUND, Outcome.BLACKLISTED):
            return self._log(error_response(HTTPStatus.NOT_FOUND), log_extra)
        if resolved.outcome is not Outcome.FOUND:
            return self._log(error_response(HTTPStatus.BAD_REQUEST), log_extra)

        try:
            body = resolved.path.read_bytes()
        except OSError:
            LOGGER.exception("error reading resolved file", extra={**log_extra, "status": 500})
            return error_response(HTTPStatus.INTERNAL_SERVER_ERROR)

        response = Response(
            status=HTTPStatus.OK.value,
            body=body,
            content_type=guess_content_type(resolved.path),
        )
        return self._log(response, log_extra)

    def _log(self, response: Response, extra: dict) -> Response:
        level = logging.INFO if response.status < 400 else logging.WARNING
        LOGGER.log(
            level,
            "%s %s - %d",
            extra["method"],
            extra["path"],
            response.status,
            extra={**extra, "status": response.status},
        )
        return response

    def _send(self, conn: socket.socket, response: Response, client_ip: str) -> None:
        try:
            conn.sendall(response.to_bytes())
        except OSError as exc:
            LOGGER.info("error writing to client: %s", exc, extra={"client_ip": client_ip})
