"""
Network relay for the shared Minesweeper board.

Forwards client requests into one GameEngine and broadcasts its events
to every connected client over newline-delimited JSON.
"""
from .protocol import ProtocolError, Request, decode_request, encode_event
from .server import RelayServer, run_server

__all__ = [
    "ProtocolError",
    "Request",
    "decode_request",
    "encode_event",
    "RelayServer",
    "run_server",
]
