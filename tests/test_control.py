from __future__ import annotations

import socket
import threading

import pytest

from dcft.constants import FRAME_SIZE
from dcft.control import acknowledge_command, recv_frame, request_command
from dcft.errors import ConnectionLost
from dcft.frame import Command, ControlFrame
from dcft.net import read_exact


class TrickleSocket:
    """Hands out pre-arranged pieces, one per recv_into call."""

    def __init__(self, pieces):
        self.pieces = list(pieces)
        self.calls = 0

    def recv_into(self, view, nbytes):
        self.calls += 1
        if not self.pieces:
            return 0
        piece = self.pieces.pop(0)
        assert len(piece) <= nbytes
        view[: len(piece)] = piece
        return len(piece)


class ResettingSocket:
    def recv_into(self, view, nbytes):
        raise ConnectionResetError("reset by peer")


def test_frame_accumulates_partial_reads():
    raw = ControlFrame.for_command(Command.FETCH).to_bytes()
    sock = TrickleSocket([raw[:1], raw[1:30], raw[30:79], raw[79:]])
    frame = recv_frame(sock)
    assert frame.to_bytes() == raw
    assert sock.calls == 4


@pytest.mark.parametrize("sent", [1, 40, FRAME_SIZE - 1])
def test_short_frame_is_connection_lost(sent):
    sock = TrickleSocket([b"x" * sent])
    with pytest.raises(ConnectionLost):
        read_exact(sock, FRAME_SIZE)


def test_exactly_full_frame_completes_without_extra_read():
    sock = TrickleSocket([b"y" * FRAME_SIZE, b"should not be read"])
    assert read_exact(sock, FRAME_SIZE) == b"y" * FRAME_SIZE
    assert sock.calls == 1


def test_reset_is_connection_lost():
    with pytest.raises(ConnectionLost):
        read_exact(ResettingSocket(), FRAME_SIZE)


def test_zero_byte_read_does_not_hang():
    with pytest.raises(ConnectionLost):
        read_exact(TrickleSocket([]), FRAME_SIZE)


@pytest.mark.parametrize("command", list(Command))
def test_echo_is_byte_identical(command):
    a, b = socket.socketpair()
    seen = {}

    def server_side():
        with b:
            seen["frame"] = acknowledge_command(b)

    t = threading.Thread(target=server_side)
    t.start()
    request = ControlFrame.for_command(command)
    with a:
        ack = request_command(a, request)
    t.join(timeout=5)

    assert ack.to_bytes() == request.to_bytes()
    assert seen["frame"] == request
    assert ack.command is command


def test_echo_survives_split_request():
    a, b = socket.socketpair()
    raw = ControlFrame.for_command(Command.DEPOSIT).to_bytes()
    with a, b:
        a.sendall(raw[:10])
        a.sendall(raw[10:])
        assert acknowledge_command(b).to_bytes() == raw
        assert read_exact(a, FRAME_SIZE) == raw
