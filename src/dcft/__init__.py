"""Dual-channel TCP file transfer (DCFT)

One control connection negotiates a single command (GET or SEND) with a fixed
80-byte frame that the server echoes back; a second, freshly opened data
connection then streams one file in one direction and is closed.

Who connects the data channel depends on the command:
- GET: the server connects to the client's data port and sends
- SEND: the client connects to the server's data port and sends
"""

__all__ = []
