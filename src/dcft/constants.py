from __future__ import annotations

SERVER_CONTROL_PORT = 7005
SERVER_DATA_PORT = 7006
CLIENT_CONTROL_PORT = 4611
CLIENT_DATA_PORT = 4612

FRAME_SIZE = 80  # control frame, no length prefix
CHUNK_SIZE = 1024

GET_COMMAND = "GET"
SEND_COMMAND = "SEND"

GET_FILE_NAME = "get.txt"
SEND_FILE_NAME = "send.txt"

LISTEN_BACKLOG = 5

DEFAULT_RETRY_DELAY = 1.0
DEFAULT_RETRY_STEP = 1.0
