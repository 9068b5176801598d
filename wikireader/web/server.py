"""Local HTTP viewer serving routed pages to a browser."""

from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any

import structlog

from wikireader.markup.renderer import article_href
from wikireader.web.router import Router

logger = structlog.get_logger(__name__)


def make_handler(router: Router, start_page: str) -> type[BaseHTTPRequestHandler]:
    """Build a request handler class bound to ``router``.

    Args:
        router: Router answering every GET request
        start_page: Article title the root path redirects to
    """

    class ViewerRequestHandler(BaseHTTPRequestHandler):
        server_version = "wikireader"

        def do_GET(self) -> None:  # noqa: N802
            if self.path in ("", "/"):
                self.send_response(302)
                self.send_header("Location", article_href(start_page))
                self.end_headers()
                return

            response = router.handle(self.path)
            content_type = response.mime_type
            if content_type.startswith("text/"):
                content_type += "; charset=utf-8"

            self.send_response(response.status)
            self.send_header("Content-Type", content_type)
            self.send_header("Content-Length", str(len(response.body)))
            self.end_headers()
            self.wfile.write(response.body)

        def log_message(self, format: str, *args: Any) -> None:
            logger.debug("http_request", client=self.address_string(), message=format % args)

    return ViewerRequestHandler


def create_server(router: Router, host: str, port: int, start_page: str) -> ThreadingHTTPServer:
    """Create (but do not start) the threaded viewer server."""
    return ThreadingHTTPServer((host, port), make_handler(router, start_page))


def serve_forever(server: ThreadingHTTPServer) -> None:
    """Serve until interrupted, then close the listening socket."""
    host, port = server.server_address[:2]
    logger.info("viewer_listening", host=host, port=port)
    try:
        server.serve_forever()
    finally:
        server.server_close()
        logger.info("viewer_stopped")
