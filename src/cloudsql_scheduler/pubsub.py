"""Pub/Sub envelope helpers.

Extracts the raw message bytes from the shapes Cloud Functions delivers:

- CloudEvent data: ``{"message": {"data": "<base64>", ...}, "subscription": ...}``
- legacy background event: ``{"data": "<base64>", "attributes": {...}}``
"""

from __future__ import annotations

import base64
import binascii
from typing import Any, Mapping

from .exceptions import PayloadDecodeError


def _message_of(envelope: Mapping[str, Any]) -> Mapping[str, Any]:
    message = envelope.get("message")
    if message is None:
        return envelope
    if not isinstance(message, Mapping):
        raise PayloadDecodeError("Pub/Sub 'message' field must be an object")
    return message


def decode_pubsub_data(envelope: Mapping[str, Any] | None) -> bytes:
    """Return the decoded ``data`` bytes of a Pub/Sub message.

    A message without data yields ``b""``.

    Raises:
        PayloadDecodeError: If the envelope is malformed or data is not base64
    """
    if envelope is None:
        return b""
    if not isinstance(envelope, Mapping):
        raise PayloadDecodeError(
            f"Pub/Sub envelope must be an object, got {type(envelope).__name__}"
        )

    data = _message_of(envelope).get("data")
    if not data:
        return b""
    if isinstance(data, str):
        data = data.encode("ascii", errors="strict") if data.isascii() else None
    if not isinstance(data, (bytes, bytearray)):
        raise PayloadDecodeError("Pub/Sub message data must be a base64 string")

    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise PayloadDecodeError(f"Pub/Sub message data is not valid base64: {e}") from e
