"""Wire protocol — the two server-to-client messages.

``version``
    Sent once, right after a session registers.  The client compares it
    against its remembered version and reloads only if it is behind.

``reload``
    Sent on every broadcast.  The client reloads unconditionally.

Each message is one compact JSON text frame::

    {"type": "version", "index": 3}
    {"type": "reload", "index": 4}

"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Literal

from autoreload._errors import ProtocolError


@dataclass(frozen=True, slots=True)
class VersionMessage:
    """Greeting carrying the server's current version."""

    index: int
    type: Literal["version"] = "version"


@dataclass(frozen=True, slots=True)
class ReloadMessage:
    """Push telling the client a change just happened."""

    index: int
    type: Literal["reload"] = "reload"


type WireMessage = VersionMessage | ReloadMessage

_MESSAGE_TYPES: dict[str, type[VersionMessage] | type[ReloadMessage]] = {
    "version": VersionMessage,
    "reload": ReloadMessage,
}


def encode_message(message: WireMessage) -> str:
    """Serialize a message to its JSON text frame."""
    return json.dumps({"type": message.type, "index": message.index}, separators=(",", ":"))


def decode_message(text: str | bytes) -> WireMessage:
    """Parse a JSON text frame into a message.

    Raises:
        ProtocolError: If the payload is not JSON, not an object, has an
            unknown ``type``, or an ``index`` that is not a non-negative int.

    """
    try:
        data = json.loads(text)
    except (ValueError, TypeError) as exc:
        msg = f"Malformed autoreload message: {exc}"
        raise ProtocolError(msg) from exc

    if not isinstance(data, dict):
        msg = f"Expected a JSON object, got {type(data).__name__}"
        raise ProtocolError(msg)

    kind = data.get("type")
    message_cls = _MESSAGE_TYPES.get(kind) if isinstance(kind, str) else None
    if message_cls is None:
        msg = f"Unknown message type {kind!r}"
        raise ProtocolError(msg)

    index = data.get("index")
    # bool is an int subclass; reject it explicitly
    if isinstance(index, bool) or not isinstance(index, int) or index < 0:
        msg = f"Invalid index {index!r} in {data['type']!r} message"
        raise ProtocolError(msg)

    return message_cls(index=index)
