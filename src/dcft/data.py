from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .constants import CHUNK_SIZE, LISTEN_BACKLOG
from .events import EventSink
from .frame import Command
from .net import Endpoint, accept_from, listening
from .retry import RetryConnector
from .transfer import TransferMetrics, receive_file, send_file


@dataclass(frozen=True, slots=True)
class SessionOutcome:
    token: str
    command: Command | None
    peer_host: str
    metrics: TransferMetrics | None = None


def receive_passive(
    endpoint: Endpoint,
    path: Path,
    events: EventSink,
    *,
    role: str,
    expected_host: str | None = None,
    chunk_size: int = CHUNK_SIZE,
    backlog: int = LISTEN_BACKLOG,
    accept_timeout: float | None = None,
) -> TransferMetrics:
    """Listen on ``endpoint``, accept one peer and write its stream to ``path``.

    The passive side of a data channel is always the receiving side.
    """
    with listening(endpoint, backlog=backlog, timeout=accept_timeout) as listener:
        events.emit("data.listen", role=role, endpoint=endpoint)
        conn, addr = accept_from(listener, expected_host)
        with conn:
            events.emit("data.accept", role=role, peer=f"{addr[0]}:{addr[1]}")
            with open(path, "wb") as out:
                metrics = receive_file(conn, out, chunk_size)
    events.emit("transfer.received", role=role, path=path, bytes=metrics.bytes_transferred, chunks=metrics.chunks)
    events.emit("data.closed", role=role)
    return metrics


def send_active(
    connector: RetryConnector,
    endpoint: Endpoint,
    path: Path,
    events: EventSink,
    *,
    role: str,
    chunk_size: int = CHUNK_SIZE,
) -> TransferMetrics:
    """Connect to ``endpoint`` and stream ``path`` to it.

    The source is opened before connecting so a missing file never shows up at
    the receiver as an empty transfer.
    """
    with open(path, "rb") as f:
        with connector.connect(endpoint) as sock:
            events.emit("data.connect", role=role, endpoint=endpoint)
            metrics = send_file(sock, f, chunk_size)
    events.emit("transfer.sent", role=role, path=path, bytes=metrics.bytes_transferred, chunks=metrics.chunks)
    events.emit("data.closed", role=role)
    return metrics
