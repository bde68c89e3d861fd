from __future__ import annotations


class TransferError(Exception):
    pass


class ConnectionLost(TransferError):
    """Peer closed or reset the connection before the expected bytes arrived."""


class ProtocolError(TransferError):
    pass


class UnknownCommand(ProtocolError):
    def __init__(self, token: str):
        super().__init__(f"unrecognized command token: {token!r}")
        self.token = token


class EchoMismatch(ProtocolError):
    def __init__(self, sent: str, received: str):
        super().__init__(f"acknowledgment {received!r} does not echo request {sent!r}")
        self.sent = sent
        self.received = received


class RetriesExhausted(TransferError):
    pass


class ConnectCancelled(TransferError):
    pass


class DataChannelTimeout(TransferError):
    pass
