# encryption abstraction module

import os
import struct

from cryptography.hazmat.primitives.ciphers.aead import AESGCM

# AEAD header format: magic (2 bytes), version (1 byte), message kind (1 byte), sequence (4 bytes), nonce (12 bytes), length (4 bytes)
HEADER_STRUCT = struct.Struct(">HBBI12sI")

# Reject excessively large payloads (1 MiB is far beyond any game message)
MAX_PAYLOAD = 1024 * 1024

_MAGIC = 0x5A1F
_VERSION = 1

_secret_key: bytes | None = None


def enable_encryption(key: bytes) -> None:
    """Set the symmetric key used to seal every frame from now on."""
    global _secret_key
    if len(key) not in (16, 24, 32):
        raise ValueError("AES key must be 16/24/32 bytes")
    _secret_key = key


def disable_encryption() -> None:
    """Revert to plain CRC framing."""
    global _secret_key
    _secret_key = None


def enabled() -> bool:
    return _secret_key is not None


def pack(kind: int, seq: int, payload: bytes) -> bytes:
    """AEAD pack: header + ciphertext+tag. The header is authenticated too."""
    if _secret_key is None:
        raise ValueError("Encryption key not set")
    if len(payload) > MAX_PAYLOAD:
        raise ValueError(f"Payload too large: {len(payload)} bytes")
    nonce = os.urandom(12)
    length = len(payload) + 16  # GCM tag
    header = HEADER_STRUCT.pack(_MAGIC, _VERSION, kind, seq, nonce, length)
    ciphertext = AESGCM(_secret_key).encrypt(nonce, payload, header)
    return header + ciphertext


def unpack(frame: bytes) -> tuple[int, int, int, int, bytes]:
    """AEAD unpack: returns (magic, version, kind, seq, plaintext)"""
    if _secret_key is None:
        raise ValueError("Encryption key not set")
    header_size = HEADER_STRUCT.size
    hdr = frame[:header_size]
    magic, version, kind, seq, nonce, length = HEADER_STRUCT.unpack(hdr)
    ciphertext = frame[header_size : header_size + length]
    plaintext = AESGCM(_secret_key).decrypt(nonce, ciphertext, hdr)
    return magic, version, kind, seq, plaintext
