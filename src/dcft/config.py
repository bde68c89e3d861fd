from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .constants import (
    CHUNK_SIZE,
    CLIENT_CONTROL_PORT,
    CLIENT_DATA_PORT,
    GET_FILE_NAME,
    LISTEN_BACKLOG,
    SEND_FILE_NAME,
    SERVER_CONTROL_PORT,
    SERVER_DATA_PORT,
)
from .net import Endpoint


@dataclass(frozen=True, slots=True)
class PeerConfig:
    """Settings shared by both peers.

    ``fetch_file`` is what GET moves (server reads it, client writes it) and
    ``deposit_file`` is what SEND moves (client reads it, server writes it).
    A ``client_control_port`` of 0 lets the OS pick the control source port.

    With ``verify_data_peer`` the passive side drops data connections from any
    host other than the control peer. The dropped sender has already connected
    and may report a completed send, and the passive side keeps waiting, so a
    peer that connects back from another address (multi-homed host) needs
    ``verify_data_peer=False`` or an ``accept_timeout``.
    """

    bind_host: str = "0.0.0.0"
    server_control_port: int = SERVER_CONTROL_PORT
    server_data_port: int = SERVER_DATA_PORT
    client_control_port: int = CLIENT_CONTROL_PORT
    client_data_port: int = CLIENT_DATA_PORT
    fetch_file: Path = Path(GET_FILE_NAME)
    deposit_file: Path = Path(SEND_FILE_NAME)
    chunk_size: int = CHUNK_SIZE
    backlog: int = LISTEN_BACKLOG
    accept_timeout: float | None = None
    verify_data_peer: bool = True

    def __post_init__(self) -> None:
        if self.chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")

    @property
    def server_control(self) -> Endpoint:
        return Endpoint(self.bind_host, self.server_control_port)

    @property
    def server_data(self) -> Endpoint:
        return Endpoint(self.bind_host, self.server_data_port)

    @property
    def client_data(self) -> Endpoint:
        return Endpoint(self.bind_host, self.client_data_port)
