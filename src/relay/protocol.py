"""
JSON-lines wire format between the relay server and its clients.

Client -> server, one object per line::

    {"type": "open", "x": 3, "y": 1}
    {"type": "flag", "x": 0, "y": 4}

Server -> client, one object per line::

    {"event": "game:update", "data": {...}}
"""
import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from minefield import CellDiff, Ended, Snapshot

ACTIONS = ("open", "flag")

LOADED = "game:loaded"
STARTED = "game:started"
UPDATE = "game:update"
COUNTDOWN = "game:countdown"


class ProtocolError(ValueError):
    """Raised for a client line that is not a well-formed request."""


@dataclass(frozen=True)
class Request:
    """A decoded client request. Coordinates are not validated here."""

    action: str
    x: Any
    y: Any


def decode_request(line: bytes) -> Request:
    """
    Decode one client line.

    Args:
        line: Raw bytes of a single line, newline optional.

    Returns:
        The decoded request.

    Raises:
        ProtocolError: If the line is not a JSON object with a known
            ``type`` and both coordinates.
    """
    try:
        message = json.loads(line.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as error:
        raise ProtocolError(f"Malformed message: {error}") from error

    if not isinstance(message, dict):
        raise ProtocolError("Message must be a JSON object")
    action = message.get("type")
    if action not in ACTIONS:
        raise ProtocolError(f"Unknown request type: {action!r}")
    if "x" not in message or "y" not in message:
        raise ProtocolError("Request is missing a coordinate")
    return Request(action=action, x=message["x"], y=message["y"])


def encode_event(name: str, data: Dict[str, Any]) -> bytes:
    """Encode one server event as a newline-terminated JSON line."""
    return (json.dumps({"event": name, "data": data}) + "\n").encode("utf-8")


def loaded_event(snapshot: Snapshot) -> bytes:
    return encode_event(LOADED, snapshot.to_dict())


def started_event(snapshot: Snapshot) -> bytes:
    return encode_event(STARTED, snapshot.to_dict())


def update_event(diff: List[CellDiff], ended: Optional[Ended]) -> bytes:
    return encode_event(
        UPDATE,
        {
            "cells": [cell.to_dict() for cell in diff],
            "game_state": ended.to_dict() if ended else None,
        },
    )


def countdown_event(seconds_left: int) -> bytes:
    return encode_event(COUNTDOWN, {"seconds_left": seconds_left})
