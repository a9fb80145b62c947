"""Threaded TCP server that feeds connections to the request handler."""
from __future__ import annotations

import logging
import os
import socketserver
from typing import Optional, Tuple

from staticserver.config import ConfigError, Settings
from staticserver.handler import RequestHandler

LOGGER = logging.getLogger(__name__)


class _ConnectionHandler(socketserver.BaseRequestHandler):
    server: "StaticFileServer"

    def handle(self) -> None:
        self.server.handler.handle_connection(self.request, self.client_address[0])


class StaticFileServer(socketserver.ThreadingTCPServer):
    """One thread per connection; every connection gets one response."""

    allow_reuse_address = True
    daemon_threads = True
    request_queue_size = 64

    def __init__(self, address: Tuple[str, int], handler: RequestHandler) -> None:
        self.handler = handler
        super().__init__(address, _ConnectionHandler)

    def handle_error(self, request, client_address) -> None:  # noqa: D401
        LOGGER.exception(
            "unhandled error serving connection", extra={"client_ip": client_address[0]}
        )


def build_server(
    settings: Settings, handler: Optional[RequestHandler] = None
) -> StaticFileServer:
    """Validate the serving root and bind the listening socket."""

    root = settings.root
    if not root.is_dir():
        raise ConfigError(f"Serving root is not a directory: {root}")
    if not os.access(root, os.R_OK | os.X_OK):
        raise ConfigError(f"Serving root is not readable: {root}")

    address = (settings.bind_address, settings.port)
    server = StaticFileServer(address, handler or RequestHandler(settings))
    host, port = server.server_address[:2]
    LOGGER.info(
        "serving %s on %s:%d",
        server.handler.resolver.root,
        host,
        port,
    )
    if settings.rate_limit_enabled:
        LOGGER.info(
            "rate limit %d requests per %ds, penalty %ds",
            settings.rate_limit_requests,
            settings.rate_limit_window_seconds,
            settings.penalty_seconds,
        )
    return server
