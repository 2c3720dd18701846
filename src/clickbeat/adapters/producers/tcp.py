"""Raw TCP line listener."""

import logging
import queue
import socketserver
import threading
from typing import Any

from clickbeat.core.encoding.ndjson import loads

logger = logging.getLogger(__name__)


def decode_line(line: str, fmt: str) -> list[dict[str, Any]]:
    """Decode one received line.

    Args:
        line: The line without its terminator.
        fmt: ``json_lines`` (one object per line) or ``json`` (one object or
            an array of objects per line).

    Returns:
        The decoded objects; empty if the line is malformed.
    """
    try:
        value = loads(line)
    except (ValueError, RecursionError):
        return []
    if isinstance(value, dict):
        return [value]
    if fmt == "json" and isinstance(value, list):
        return [item for item in value if isinstance(item, dict)]
    return []


class _LineHandler(socketserver.StreamRequestHandler):
    server: "_LineServer"

    def handle(self) -> None:
        for raw in self.rfile:
            line = raw.decode("utf-8", errors="replace").strip()
            if not line:
                continue
            objects = decode_line(line, self.server.line_format)
            if not objects:
                logger.debug("dropping malformed line from %s", self.client_address)
            for obj in objects:
                self.server.received.put(obj)


class _LineServer(socketserver.ThreadingTCPServer):
    daemon_threads = True
    allow_reuse_address = True

    def __init__(self, address: tuple[str, int], line_format: str) -> None:
        self.line_format = line_format
        self.received: queue.Queue[dict[str, Any]] = queue.Queue()
        super().__init__(address, _LineHandler)


class TCPLineProducer:
    """Accepts newline-delimited JSON over plain TCP connections.

    The listener starts on construction and serves each connection on its
    own thread. Received objects are buffered until the next poll.

    Args:
        host: Interface to bind.
        port: Port to bind; 0 picks a free port.
        fmt: ``json_lines`` or ``json``.
    """

    name = "tcp"

    def __init__(self, host: str, port: int, fmt: str = "json_lines") -> None:
        self._server = _LineServer((host, port), fmt)
        self._thread = threading.Thread(
            target=self._server.serve_forever, name="tcp-listener", daemon=True
        )
        self._thread.start()
        logger.info("TCP listener on %s:%d, format=%s", *self.address, fmt)

    @property
    def address(self) -> tuple[str, int]:
        host, port = self._server.server_address[:2]
        return str(host), int(port)

    def poll(self) -> list[dict[str, Any]]:
        """Return every object received since the last poll."""
        batch: list[dict[str, Any]] = []
        while True:
            try:
                batch.append(self._server.received.get_nowait())
            except queue.Empty:
                return batch

    def close(self) -> None:
        self._server.shutdown()
        self._server.server_close()
        self._thread.join()
