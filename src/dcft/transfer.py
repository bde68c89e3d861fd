from __future__ import annotations

import io
import logging
import os
import socket
import time
from dataclasses import dataclass, field
from typing import BinaryIO

from .constants import CHUNK_SIZE
from .errors import ConnectionLost

log = logging.getLogger(__name__)


@dataclass(slots=True)
class TransferMetrics:
    bytes_transferred: int = 0
    chunks: int = 0
    start_ts: float = field(default_factory=time.monotonic)
    end_ts: float | None = None

    @property
    def duration_s(self) -> float:
        if self.end_ts is None:
            return 0.0
        return max(0.0, self.end_ts - self.start_ts)

    @property
    def throughput_mbps(self) -> float:
        if self.duration_s <= 0:
            return 0.0
        return (self.bytes_transferred * 8 / 1_000_000) / self.duration_s


def send_file(sock: socket.socket, f: BinaryIO, chunk_size: int = CHUNK_SIZE) -> TransferMetrics:
    """Copy ``f`` to ``sock`` until EOF.

    No trailer is sent: the receiver sees end of stream when the caller closes
    the connection.
    """
    metrics = TransferMetrics()
    while True:
        chunk = f.read(chunk_size)
        if not chunk:
            break
        try:
            sock.sendall(chunk)
        except (BrokenPipeError, ConnectionResetError, ConnectionAbortedError) as exc:
            raise ConnectionLost(f"stream reset after {metrics.bytes_transferred} bytes sent") from exc
        metrics.chunks += 1
        metrics.bytes_transferred += len(chunk)
        log.debug("sent chunk %d (%d bytes)", metrics.chunks, len(chunk))
    metrics.end_ts = time.monotonic()
    return metrics


def receive_file(sock: socket.socket, out: BinaryIO, chunk_size: int = CHUNK_SIZE) -> TransferMetrics:
    """Copy ``sock`` to ``out`` until the peer closes.

    Every chunk is flushed (and fsynced where ``out`` has a descriptor) before
    the next receive, so at most one chunk is lost on an abrupt stop. Bytes are
    written exactly as received; nothing is trimmed.
    """
    metrics = TransferMetrics()
    buf = bytearray(chunk_size)
    view = memoryview(buf)
    while True:
        try:
            n = sock.recv_into(view, chunk_size)
        except (ConnectionResetError, ConnectionAbortedError) as exc:
            raise ConnectionLost(f"stream reset after {metrics.bytes_transferred} bytes") from exc
        if n <= 0:
            break
        out.write(view[:n])
        _sync(out)
        metrics.chunks += 1
        metrics.bytes_transferred += n
        log.debug("received chunk %d (%d bytes)", metrics.chunks, n)
    metrics.end_ts = time.monotonic()
    return metrics


def _sync(out: BinaryIO) -> None:
    out.flush()
    try:
        fd = out.fileno()
    except (AttributeError, io.UnsupportedOperation):
        return
    os.fsync(fd)
