from __future__ import annotations

import logging
import socket
from dataclasses import dataclass, field

from .config import PeerConfig
from .control import acknowledge_command
from .data import SessionOutcome, receive_passive, send_active
from .errors import TransferError, UnknownCommand
from .events import EventSink, LoggingSink
from .frame import Command
from .net import Endpoint, accept_from, listening
from .retry import RetryConnector
from .transfer import TransferMetrics

log = logging.getLogger(__name__)

ROLE = "server"


@dataclass(slots=True)
class Server:
    """Serves clients one at a time.

    Each session runs to completion (control exchange, data channel, close)
    before the next control connection is accepted.
    """

    config: PeerConfig = field(default_factory=PeerConfig)
    connector: RetryConnector = field(default_factory=RetryConnector)
    events: EventSink = field(default_factory=LoggingSink)

    def serve_forever(self, max_sessions: int | None = None) -> None:
        cfg = self.config
        with listening(cfg.server_control, backlog=cfg.backlog) as listener:
            log.info("server listening on %s", cfg.server_control)
            served = 0
            while max_sessions is None or served < max_sessions:
                try:
                    self.serve_one(listener)
                except TransferError as exc:
                    # session-level failure; OSError from sockets or files stays fatal
                    self.events.emit("session.failed", role=ROLE, error=exc)
                served += 1

    def serve_one(self, listener: socket.socket) -> SessionOutcome:
        conn, addr = accept_from(listener)
        peer_host = addr[0]
        with conn:
            self.events.emit("control.accepted", role=ROLE, peer=f"{peer_host}:{addr[1]}")
            frame = acknowledge_command(conn)
        self.events.emit("control.echoed", role=ROLE, token=frame.token)

        try:
            command = frame.command
        except UnknownCommand:
            self.events.emit("protocol.unknown_command", role=ROLE, token=frame.token, peer=peer_host)
            return SessionOutcome(token=frame.token, command=None, peer_host=peer_host)

        if command is Command.FETCH:
            metrics = self.fetch(peer_host)
        else:
            metrics = self.deposit(peer_host)
        self.events.emit("session.done", role=ROLE, command=command.value, bytes=metrics.bytes_transferred)
        return SessionOutcome(token=frame.token, command=command, peer_host=peer_host, metrics=metrics)

    def fetch(self, peer_host: str) -> TransferMetrics:
        cfg = self.config
        return send_active(
            self.connector,
            Endpoint(peer_host, cfg.client_data_port),
            cfg.fetch_file,
            self.events,
            role=ROLE,
            chunk_size=cfg.chunk_size,
        )

    def deposit(self, peer_host: str) -> TransferMetrics:
        cfg = self.config
        return receive_passive(
            cfg.server_data,
            cfg.deposit_file,
            self.events,
            role=ROLE,
            expected_host=peer_host if cfg.verify_data_peer else None,
            chunk_size=cfg.chunk_size,
            backlog=cfg.backlog,
            accept_timeout=cfg.accept_timeout,
        )
