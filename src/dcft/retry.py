from __future__ import annotations

import logging
import socket
import threading
import time
from dataclasses import dataclass
from typing import Callable

from .constants import DEFAULT_RETRY_DELAY, DEFAULT_RETRY_STEP
from .errors import ConnectCancelled, RetriesExhausted
from .net import Endpoint

log = logging.getLogger(__name__)


@dataclass(slots=True)
class RetryConnector:
    """Connects to an endpoint, sleeping 1, 2, 3, ... seconds between failures.

    With the defaults it never gives up: both peers are expected to start at
    roughly the same time and the connecting side may simply be first.
    ``max_attempts`` and ``cancel`` bound it when that is not wanted.
    """

    initial_delay: float = DEFAULT_RETRY_DELAY
    step: float = DEFAULT_RETRY_STEP
    max_attempts: int | None = None
    cancel: threading.Event | None = None
    sleep: Callable[[float], None] = time.sleep

    def connect(self, endpoint: Endpoint, source_port: int | None = None) -> socket.socket:
        delay = self.initial_delay
        attempt = 0
        while True:
            self._check_cancel(endpoint)
            attempt += 1
            sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            try:
                if source_port:
                    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
                    sock.bind(("", source_port))
                sock.connect(endpoint.address)
            except OSError as exc:
                sock.close()
                log.warning("can't connect to %s (attempt %d): %s; retrying in %.2fs", endpoint, attempt, exc, delay)
                if self.max_attempts is not None and attempt >= self.max_attempts:
                    raise RetriesExhausted(f"gave up on {endpoint} after {attempt} attempts") from exc
                self._check_cancel(endpoint)
                self.sleep(delay)
                delay += self.step
                continue
            log.debug("connected to %s after %d attempt(s)", endpoint, attempt)
            return sock

    def _check_cancel(self, endpoint: Endpoint) -> None:
        if self.cancel is not None and self.cancel.is_set():
            raise ConnectCancelled(f"connect to {endpoint} cancelled")
