from __future__ import annotations

import logging
from typing import Protocol

log = logging.getLogger("dcft.events")

# events that mark a failure are logged above INFO
_LEVELS = {
    "protocol.unknown_command": logging.ERROR,
    "session.failed": logging.ERROR,
}


class EventSink(Protocol):
    def emit(self, name: str, **fields: object) -> None: ...


class LoggingSink:
    """Renders events as ``name key=value ...`` log records."""

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or log

    def emit(self, name: str, **fields: object) -> None:
        level = _LEVELS.get(name, logging.INFO)
        detail = " ".join(f"{k}={v}" for k, v in fields.items())
        self.logger.log(level, "%s %s", name, detail)
