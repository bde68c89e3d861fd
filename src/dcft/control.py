from __future__ import annotations

import logging
import socket

from .constants import FRAME_SIZE
from .frame import ControlFrame
from .net import read_exact

log = logging.getLogger(__name__)


def send_frame(sock: socket.socket, frame: ControlFrame) -> None:
    sock.sendall(frame.to_bytes())


def recv_frame(sock: socket.socket) -> ControlFrame:
    return ControlFrame.from_bytes(read_exact(sock, FRAME_SIZE))


def request_command(sock: socket.socket, frame: ControlFrame) -> ControlFrame:
    """Client half: send the request frame, return the server's echo."""
    log.debug("transmitting command %r", frame.token)
    send_frame(sock, frame)
    ack = recv_frame(sock)
    log.debug("received acknowledgment %r", ack.token)
    return ack


def acknowledge_command(sock: socket.socket) -> ControlFrame:
    """Server half: read one request frame and echo it back unchanged."""
    frame = recv_frame(sock)
    log.debug("acknowledging request %r", frame.token)
    send_frame(sock, frame)
    return frame
