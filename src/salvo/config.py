"""Central configuration for runtime-tunable parameters.

All constants can be overridden via environment variables so that a game can be
tuned without touching the CLI, while the automated test-suite can flip the
rule variants it needs.
"""

from __future__ import annotations

import os


# ===========================================================================
# Network Defaults
# ===========================================================================
# SALVO_HOST: Address the server binds to and the client connects to when no
#   IP is given.
#   Defaults to "127.0.0.1".
#   Example: export SALVO_HOST=0.0.0.0
DEFAULT_HOST: str = os.getenv("SALVO_HOST", "127.0.0.1")

# SALVO_PORT: Default port for the server to listen on and clients to connect to.
#   Defaults to 4200.
#   Example: export SALVO_PORT=4201
DEFAULT_PORT: int = int(os.getenv("SALVO_PORT", "4200"))

# Ports below this are reserved; the CLI rejects them.
MIN_PORT: int = 1024
MAX_PORT: int = 65535


# ===========================================================================
# Receive Timeout
# ===========================================================================
# SALVO_RECV_TIMEOUT: seconds a session waits for the next message from its
#   peer before treating the connection as dropped. 0 disables the timeout, so
#   a silent peer blocks the session indefinitely.
#   Example: export SALVO_RECV_TIMEOUT=120
RECV_TIMEOUT: float = float(os.getenv("SALVO_RECV_TIMEOUT", "0"))


# ===========================================================================
# Game Rules
# ===========================================================================
# Board dimensions are fixed; only 10x10 is supported.
BOARD_SIZE: int = 10

# Fleet roster: (name, length, count), placed in this order.
FLEET = [
    ("Submarine", 2, 4),
    ("Destroyer", 3, 3),
    ("Cruiser", 4, 2),
    ("Battleship", 5, 1),
]

# SALVO_SHOOT_AGAIN: If "1", a player who hits keeps the turn (older rule).
#   Defaults to "0": the turn always passes after a resolved shot.
#   Example: export SALVO_SHOOT_AGAIN=1
SHOOT_AGAIN_ON_HIT: bool = os.getenv("SALVO_SHOOT_AGAIN", "0") == "1"

# Greeting the host sends in its Welcome message.
GREETING: str = "Welcome stranger, let me sink your ships!"


# ===========================================================================
# Debugging and Logging
# ===========================================================================
# SALVO_DEBUG: If "1", enables detailed debug logging across modules.
#   Defaults to "0" (disabled).
#   Example: export SALVO_DEBUG=1
DEBUG: bool = os.getenv("SALVO_DEBUG", "0") == "1"


# ===========================================================================
# Cryptography Defaults
# ===========================================================================
# SALVO_KEY: AES key as a hex string, used when --secure is given without a key.
# Defaults to "00112233445566778899AABBCCDDEEFF".
DEFAULT_KEY_HEX: str = os.getenv("SALVO_KEY", "00112233445566778899AABBCCDDEEFF")
DEFAULT_KEY: bytes = bytes.fromhex(DEFAULT_KEY_HEX)
