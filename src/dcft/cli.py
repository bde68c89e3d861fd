from __future__ import annotations

import argparse
import json
import logging
import socket
from pathlib import Path

from .client import Client
from .config import PeerConfig
from .constants import (
    CHUNK_SIZE,
    CLIENT_CONTROL_PORT,
    CLIENT_DATA_PORT,
    DEFAULT_RETRY_DELAY,
    DEFAULT_RETRY_STEP,
    GET_COMMAND,
    GET_FILE_NAME,
    SEND_COMMAND,
    SEND_FILE_NAME,
    SERVER_CONTROL_PORT,
    SERVER_DATA_PORT,
)
from .errors import TransferError
from .frame import Command
from .retry import RetryConnector
from .server import Server

log = logging.getLogger("dcft")


def build_config(args: argparse.Namespace) -> PeerConfig:
    return PeerConfig(
        bind_host=args.bind_host,
        server_control_port=args.server_control_port,
        server_data_port=args.server_data_port,
        client_control_port=args.client_control_port,
        client_data_port=args.client_data_port,
        fetch_file=Path(args.fetch_file),
        deposit_file=Path(args.deposit_file),
        chunk_size=args.chunk_size,
        accept_timeout=args.accept_timeout,
        verify_data_peer=not args.no_verify_peer,
    )


def build_connector(args: argparse.Namespace) -> RetryConnector:
    return RetryConnector(
        initial_delay=args.retry_delay,
        step=args.retry_step,
        max_attempts=args.max_attempts,
    )


def cmd_client(args: argparse.Namespace) -> int:
    try:
        server_host = socket.gethostbyname(args.host)
    except socket.gaierror as exc:
        log.error("unknown server address %s: %s", args.host, exc)
        return 1
    log.info("host %s resolved to %s", args.host, server_host)

    client = Client(server_host, config=build_config(args), connector=build_connector(args))
    outcome = client.run(Command.from_token(args.command))
    metrics = outcome.metrics

    payload = {
        "role": "client",
        "command": outcome.token,
        "server": server_host,
        "bytes": metrics.bytes_transferred if metrics else 0,
        "chunks": metrics.chunks if metrics else 0,
        "seconds": metrics.duration_s if metrics else 0.0,
        "mbps": metrics.throughput_mbps if metrics else 0.0,
    }
    print(json.dumps(payload, indent=2) if args.json else payload)
    return 0


def cmd_server(args: argparse.Namespace) -> int:
    server = Server(config=build_config(args), connector=build_connector(args))
    server.serve_forever(max_sessions=args.sessions)
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="dcft", description="Two-channel TCP file transfer (GET + SEND).")
    p.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    sub = p.add_subparsers(dest="cmd", required=True)

    def add_common(x: argparse.ArgumentParser) -> None:
        x.add_argument("--bind-host", default="0.0.0.0", help="local address for listening sockets")
        x.add_argument("--server-control-port", type=int, default=SERVER_CONTROL_PORT)
        x.add_argument("--server-data-port", type=int, default=SERVER_DATA_PORT)
        x.add_argument("--client-control-port", type=int, default=CLIENT_CONTROL_PORT,
                       help="client control source port (0 lets the OS choose)")
        x.add_argument("--client-data-port", type=int, default=CLIENT_DATA_PORT)
        x.add_argument("--fetch-file", default=GET_FILE_NAME, help="file moved by GET")
        x.add_argument("--deposit-file", default=SEND_FILE_NAME, help="file moved by SEND")
        x.add_argument("--chunk-size", type=int, default=CHUNK_SIZE)
        x.add_argument("--retry-delay", type=float, default=DEFAULT_RETRY_DELAY)
        x.add_argument("--retry-step", type=float, default=DEFAULT_RETRY_STEP)
        x.add_argument("--max-attempts", type=int, default=None, help="default: retry forever")
        x.add_argument("--accept-timeout", type=float, default=None, help="default: wait forever")
        x.add_argument("--no-verify-peer", action="store_true",
                       help="accept a data connection from any host")
        x.add_argument("--json", action="store_true")

    client = sub.add_parser("client", help="run one GET or SEND against a server")
    add_common(client)
    client.add_argument("host", help="server host name or address")
    client.add_argument("command", choices=[GET_COMMAND, SEND_COMMAND])
    client.set_defaults(func=cmd_client)

    server = sub.add_parser("server", help="serve clients one session at a time")
    add_common(server)
    server.add_argument("--sessions", type=int, default=None, help="stop after N sessions")
    server.set_defaults(func=cmd_server)

    return p


def main(argv: list[str] | None = None) -> int:
    p = build_parser()
    args = p.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(asctime)s [%(levelname)s] %(message)s")
    try:
        return int(args.func(args))
    except (OSError, TransferError) as exc:
        log.error("fatal: %s", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
