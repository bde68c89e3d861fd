from __future__ import annotations

import socket
import threading
from dataclasses import dataclass, field

import pytest

from dcft.config import PeerConfig
from dcft.retry import RetryConnector
from dcft.server import Server


def free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


@dataclass
class RecordingSink:
    events: list = field(default_factory=list)

    def emit(self, name, **fields):
        self.events.append((name, fields))

    def names(self):
        return [name for name, _ in self.events]


def fast_connector() -> RetryConnector:
    return RetryConnector(initial_delay=0.01, step=0.01, max_attempts=500)


@pytest.fixture
def ports():
    return {
        "server_control_port": free_port(),
        "server_data_port": free_port(),
        "client_data_port": free_port(),
    }


@pytest.fixture
def server_dir(tmp_path):
    d = tmp_path / "server"
    d.mkdir()
    return d


@pytest.fixture
def client_dir(tmp_path):
    d = tmp_path / "client"
    d.mkdir()
    return d


@pytest.fixture
def server_config(ports, server_dir):
    return PeerConfig(
        bind_host="127.0.0.1",
        client_control_port=0,
        fetch_file=server_dir / "get.txt",
        deposit_file=server_dir / "send.txt",
        accept_timeout=10.0,
        **ports,
    )


@pytest.fixture
def client_config(ports, client_dir):
    return PeerConfig(
        bind_host="127.0.0.1",
        client_control_port=0,
        fetch_file=client_dir / "get.txt",
        deposit_file=client_dir / "send.txt",
        accept_timeout=10.0,
        **ports,
    )


class ServerThread(threading.Thread):
    """Runs ``Server.serve_forever`` for a fixed number of sessions."""

    def __init__(self, server: Server, sessions: int):
        super().__init__(daemon=True)
        self.server = server
        self.sessions = sessions
        self.error: BaseException | None = None

    def run(self):
        try:
            self.server.serve_forever(max_sessions=self.sessions)
        except BaseException as exc:
            self.error = exc

    def finish(self, timeout: float = 10.0) -> None:
        self.join(timeout)
        assert not self.is_alive(), "server did not finish its sessions"
        if self.error is not None:
            raise self.error


@pytest.fixture
def start_server(server_config):
    started = []

    def _start(sessions: int = 1, config: PeerConfig | None = None) -> ServerThread:
        sink = RecordingSink()
        server = Server(config=config or server_config, connector=fast_connector(), events=sink)
        t = ServerThread(server, sessions)
        t.start()
        started.append(t)
        return t

    yield _start
    for t in started:
        t.join(timeout=1.0)
