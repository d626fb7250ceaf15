"""Low-level message framing.

Frame layout (16-byte header + JSON payload):
0-1  : 0x5A1F       magic bytes
2    : version (1)
3    : MessageKind (enum)
4-7  : seq u32 (big-endian)
8-11 : len u32 (payload length)
12-15: CRC-32 over header[0:12]+payload
16-  : UTF-8 JSON payload

When a key is enabled (see :mod:`salvo.encryption`) frames are sealed with
AES-GCM instead and the CRC is replaced by the authentication tag.
"""

from __future__ import annotations

import enum
import json
import logging
import struct
import zlib
from io import BufferedReader, BufferedWriter
from typing import Any, Dict, Final, Tuple

from cryptography.exceptions import InvalidTag

from . import encryption
from .encryption import HEADER_STRUCT as AEAD_HEADER_STRUCT

logger = logging.getLogger(__name__)

MAGIC: Final[int] = 0x5A1F
VERSION: Final[int] = 1

_HEADER = struct.Struct(">HBBII")  # magic, version, kind, seq, len
_CRC = struct.Struct(">I")
HEADER_LEN: Final[int] = _HEADER.size + _CRC.size

MAX_PAYLOAD: Final[int] = encryption.MAX_PAYLOAD

enable_encryption = encryption.enable_encryption
disable_encryption = encryption.disable_encryption


class MessageKind(int, enum.Enum):
    """Wire identifiers of the closed message set."""

    WELCOME = 0
    LOGIN = 1
    PING = 2
    QUIT = 3
    REQUEST_BOARD = 4
    BOARD = 5
    REQUEST_COORD = 6
    SHOOT = 7
    HIT = 8
    MISS = 9
    TURN_HOST = 10
    WON = 11
    LOST = 12
    TEXT = 13
    UNEXPECTED = 14


class FrameError(Exception):
    """Base for framing problems."""


class CrcError(FrameError):
    """Raised when a CRC-32 check fails while decoding a frame."""


class IncompleteError(FrameError):
    """Raised when the stream closes before a full frame could be read."""


def _kind(value: int) -> MessageKind:
    try:
        return MessageKind(value)
    except ValueError:
        raise FrameError(f"unknown message kind {value}") from None


def _decode_payload(payload: bytes) -> Dict[str, Any]:
    try:
        obj = json.loads(payload.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise FrameError(f"malformed payload: {exc}") from None
    if not isinstance(obj, dict):
        raise FrameError("payload must be a JSON object")
    return obj


def _read_exact(r: BufferedReader, n: int, what: str) -> bytes:
    data = r.read(n)
    if data is None or len(data) < n:
        raise IncompleteError(f"Incomplete {what}")
    return data


# ---------------------------------------------------------------------------
# Public pack / unpack
# ---------------------------------------------------------------------------


def pack(kind: MessageKind, seq: int, obj: Dict[str, Any]) -> bytes:
    """Serialize one frame; AEAD-sealed when a key is enabled, CRC otherwise."""
    payload = json.dumps(obj, separators=(",", ":")).encode("utf-8")
    if len(payload) > MAX_PAYLOAD:
        raise ValueError(f"Payload too large: {len(payload)} bytes")
    if encryption.enabled():
        return encryption.pack(int(kind), seq, payload)
    header = _HEADER.pack(MAGIC, VERSION, int(kind), seq, len(payload))
    crc = zlib.crc32(header + payload) & 0xFFFFFFFF
    return header + _CRC.pack(crc) + payload


def unpack(buf: bytes) -> Tuple[MessageKind, int, Dict[str, Any]]:
    """Decode a complete frame held in memory."""
    if encryption.enabled():
        return _unpack_aead(buf)
    if len(buf) < HEADER_LEN:
        raise IncompleteError("Incomplete header")
    magic, version, kind, seq, length = _HEADER.unpack_from(buf)
    if magic != MAGIC or version != VERSION:
        raise FrameError("magic/version mismatch")
    (crc,) = _CRC.unpack_from(buf, _HEADER.size)
    payload = buf[HEADER_LEN : HEADER_LEN + length]
    if len(payload) < length:
        raise IncompleteError("Incomplete payload")
    if zlib.crc32(buf[: _HEADER.size] + payload) & 0xFFFFFFFF != crc:
        raise CrcError("CRC mismatch")
    return _kind(kind), seq, _decode_payload(payload)


def _unpack_aead(frame: bytes) -> Tuple[MessageKind, int, Dict[str, Any]]:
    if len(frame) < AEAD_HEADER_STRUCT.size:
        raise IncompleteError("Incomplete header")
    try:
        magic, version, kind, seq, plaintext = encryption.unpack(frame)
    except InvalidTag:
        raise FrameError("AEAD authentication failed") from None
    if magic != MAGIC or version != VERSION:
        raise FrameError("magic/version mismatch")
    return _kind(kind), seq, _decode_payload(plaintext)


# ---------------------------------------------------------------------------
# Convenience wrappers for file-like objects
# ---------------------------------------------------------------------------


def send_pkt(w: BufferedWriter, kind: MessageKind, seq: int, obj: Dict[str, Any]) -> None:
    """Write a single framed message to buffered writer *w* and flush."""
    w.write(pack(kind, seq, obj))
    w.flush()
    logger.debug("sent %s seq=%d", kind.name, seq)


def recv_pkt(r: BufferedReader) -> Tuple[MessageKind, int, Dict[str, Any]]:
    """Blocking helper that returns the next `(kind, seq, obj)` tuple from *r*."""
    if encryption.enabled():
        header = _read_exact(r, AEAD_HEADER_STRUCT.size, "header")
        length = AEAD_HEADER_STRUCT.unpack(header)[-1]
    else:
        header = _read_exact(r, HEADER_LEN, "header")
        length = _HEADER.unpack_from(header)[-1]
    if length > MAX_PAYLOAD + 16:
        raise FrameError(f"frame length {length} exceeds limit")
    body = _read_exact(r, length, "payload")
    kind, seq, obj = unpack(header + body)
    logger.debug("received %s seq=%d", kind.name, seq)
    return kind, seq, obj
