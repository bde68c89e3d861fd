from __future__ import annotations

from dataclasses import dataclass, field

from .config import PeerConfig
from .control import request_command
from .data import SessionOutcome, receive_passive, send_active
from .errors import EchoMismatch
from .events import EventSink, LoggingSink
from .frame import Command, ControlFrame
from .net import Endpoint
from .retry import RetryConnector
from .transfer import TransferMetrics

ROLE = "client"


@dataclass(slots=True)
class Client:
    """Runs one control exchange and one data transfer against ``server_host``.

    ``server_host`` must already be a resolved address; the server connects
    back to it for GET, so it is also used to vet the incoming data peer.
    """

    server_host: str
    config: PeerConfig = field(default_factory=PeerConfig)
    connector: RetryConnector = field(default_factory=RetryConnector)
    events: EventSink = field(default_factory=LoggingSink)

    def run(self, command: Command) -> SessionOutcome:
        ack = self.negotiate(command)
        if ack is Command.FETCH:
            metrics = self.fetch()
        else:
            metrics = self.deposit()
        self.events.emit("session.done", role=ROLE, command=ack.value, bytes=metrics.bytes_transferred)
        return SessionOutcome(token=ack.value, command=ack, peer_host=self.server_host, metrics=metrics)

    def negotiate(self, command: Command) -> Command:
        cfg = self.config
        request = ControlFrame.for_command(command)
        server = Endpoint(self.server_host, cfg.server_control_port)
        with self.connector.connect(server, source_port=cfg.client_control_port) as sock:
            self.events.emit("control.connected", role=ROLE, endpoint=server)
            ack = request_command(sock, request)
        self.events.emit("control.ack_received", role=ROLE, token=ack.token)
        if ack != request:
            raise EchoMismatch(request.token, ack.token)
        return ack.command

    def fetch(self) -> TransferMetrics:
        cfg = self.config
        return receive_passive(
            cfg.client_data,
            cfg.fetch_file,
            self.events,
            role=ROLE,
            expected_host=self.server_host if cfg.verify_data_peer else None,
            chunk_size=cfg.chunk_size,
            backlog=cfg.backlog,
            accept_timeout=cfg.accept_timeout,
        )

    def deposit(self) -> TransferMetrics:
        cfg = self.config
        return send_active(
            self.connector,
            Endpoint(self.server_host, cfg.server_data_port),
            cfg.deposit_file,
            self.events,
            role=ROLE,
            chunk_size=cfg.chunk_size,
        )
