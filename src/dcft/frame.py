from __future__ import annotations

import enum
from dataclasses import dataclass

from .constants import FRAME_SIZE, GET_COMMAND, SEND_COMMAND
from .errors import UnknownCommand


class Command(enum.Enum):
    FETCH = GET_COMMAND
    DEPOSIT = SEND_COMMAND

    @classmethod
    def from_token(cls, token: str) -> "Command":
        try:
            return cls(token)
        except ValueError:
            raise UnknownCommand(token) from None


@dataclass(frozen=True, slots=True)
class ControlFrame:
    """Fixed-size control message; the request and its echo share this shape."""

    raw: bytes

    def __post_init__(self) -> None:
        if len(self.raw) != FRAME_SIZE:
            raise ValueError(f"control frame must be {FRAME_SIZE} bytes, got {len(self.raw)}")

    @property
    def token(self) -> str:
        # token ends at the first NUL; space padding is also accepted
        head = self.raw.split(b"\x00", 1)[0]
        return head.rstrip(b" ").decode("ascii", errors="replace")

    @property
    def command(self) -> Command:
        return Command.from_token(self.token)

    def to_bytes(self) -> bytes:
        return self.raw

    @staticmethod
    def from_bytes(raw: bytes) -> "ControlFrame":
        return ControlFrame(bytes(raw))

    @staticmethod
    def from_token(token: str) -> "ControlFrame":
        encoded = token.encode("ascii")
        if len(encoded) > FRAME_SIZE:
            raise ValueError(f"token too long for a {FRAME_SIZE}-byte frame: {len(encoded)}")
        return ControlFrame(encoded.ljust(FRAME_SIZE, b"\x00"))

    @staticmethod
    def for_command(command: Command) -> "ControlFrame":
        return ControlFrame.from_token(command.value)
