"""Simple HTTP mock for the Mailgun messages API."""

from __future__ import annotations

import json
import logging
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any
from urllib.parse import parse_qsl

logging.basicConfig(level=logging.INFO, format="[MOCK-MAILGUN] %(message)s")
LOGGER = logging.getLogger("mock_mailgun")


class MailgunRequestHandler(BaseHTTPRequestHandler):
    server_version = "MockMailgun/1.0"

    def log_message(self, format: str, *args: Any) -> None:  # noqa: A003 - required signature
        LOGGER.info(format, *args)

    def _reply(self, status: int, payload: dict[str, Any]) -> None:
        response = json.dumps(payload).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(response)))
        self.end_headers()
        self.wfile.write(response)

    def do_POST(self) -> None:  # noqa: N802 - required by BaseHTTPRequestHandler
        content_length = int(self.headers.get("Content-Length", "0"))
        body = self.rfile.read(content_length)

        segments = [segment for segment in self.path.split("?")[0].split("/") if segment]
        if len(segments) < 2 or segments[-1] != "messages":
            self._reply(404, {"message": "Not Found"})
            return

        if not self.headers.get("Authorization", "").startswith("Basic "):
            self._reply(401, {"message": "Forbidden"})
            return

        message = dict(parse_qsl(body.decode("utf-8"), keep_blank_values=True))
        missing = [field for field in ("from", "to", "subject") if not message.get(field)]
        if missing:
            self._reply(400, {"message": f"'{missing[0]}' parameter is missing"})
            return

        domain = segments[-2]
        LOGGER.info(
            "Message queued domain=%s from=%s to=%s subject=%s\n%s",
            domain,
            message.get("from"),
            message.get("to"),
            message.get("subject"),
            message.get("text", ""),
        )
        self._reply(200, {"id": f"<mock.{id(message)}@{domain}>", "message": "Queued. Thank you."})


def build_server(host: str = "0.0.0.0", port: int = 8080) -> HTTPServer:
    return HTTPServer((host, port), MailgunRequestHandler)


def run(host: str = "0.0.0.0", port: int = 8080) -> None:
    LOGGER.info("Starting mock Mailgun API on %s:%s", host, port)
    server = build_server(host, port)
    try:
        server.serve_forever()
    except KeyboardInterrupt:  # pragma: no cover - manual stop
        pass
    finally:
        server.server_close()
        LOGGER.info("Mock Mailgun API stopped")


if __name__ == "__main__":
    run()
