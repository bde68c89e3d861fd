from __future__ import annotations

import logging
import socket
from dataclasses import dataclass
from typing import Tuple

from .constants import LISTEN_BACKLOG
from .errors import ConnectionLost, DataChannelTimeout

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Endpoint:
    host: str
    port: int

    @property
    def address(self) -> Tuple[str, int]:
        return (self.host, self.port)

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


def listening(
    endpoint: Endpoint,
    backlog: int = LISTEN_BACKLOG,
    timeout: float | None = None,
) -> socket.socket:
    """Bind and listen on ``endpoint``.

    Failures are not caught here: a peer that cannot create, bind or listen on
    its socket cannot take part in the protocol at all.
    """
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind(endpoint.address)
        sock.listen(backlog)
    except OSError:
        sock.close()
        raise
    sock.settimeout(timeout)
    return sock


def accept_from(listener: socket.socket, expected_host: str | None = None) -> Tuple[socket.socket, Tuple[str, int]]:
    """Accept one connection, dropping any that come from an unexpected host."""
    while True:
        try:
            conn, addr = listener.accept()
        except socket.timeout:
            raise DataChannelTimeout(f"no connection on {listener.getsockname()} before timeout") from None
        if expected_host is None or addr[0] == expected_host:
            conn.settimeout(None)
            return conn, addr
        log.error("rejecting data connection from %s:%d; expected peer %s", addr[0], addr[1], expected_host)
        conn.close()


def read_exact(sock: socket.socket, size: int) -> bytes:
    buf = bytearray(size)
    view = memoryview(buf)
    received = 0
    while received < size:
        try:
            n = sock.recv_into(view[received:], size - received)
        except (ConnectionResetError, ConnectionAbortedError) as exc:
            raise ConnectionLost(f"connection reset after {received} of {size} bytes") from exc
        if n <= 0:
            raise ConnectionLost(f"connection closed after {received} of {size} bytes")
        received += n
    return bytes(buf)
