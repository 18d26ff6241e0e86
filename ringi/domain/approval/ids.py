"""Sortable, coordination-free request identifiers.

Layout (26 symbols, Crockford base32 without I, L, O, U):

    TTTTTTTTTT RRRRRRRRRRRRRRRR
    |          |
    |          80 random bits (10 bytes packed into 5-bit groups)
    48-bit millisecond timestamp, most significant symbol first

Ids compare lexicographically in creation order down to the millisecond.
Within one millisecond the order is random.

Uniqueness is probabilistic only. For ``n`` ids created in the same
millisecond the collision probability is about ``n**2 / 2**81``; even a
thousand ids in one millisecond collide with probability below 1e-18.
"""

from __future__ import annotations

import os
import time
from typing import Callable

ENCODING = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"
TIME_LENGTH = 10
RANDOM_LENGTH = 16
RANDOM_BYTES = 10


def encode_time(timestamp_ms: int, length: int = TIME_LENGTH) -> str:
    if timestamp_ms < 0:
        raise ValueError("timestamp must be non-negative")
    chars = [ENCODING[0]] * length
    for i in range(length - 1, -1, -1):
        chars[i] = ENCODING[timestamp_ms % 32]
        timestamp_ms //= 32
    if timestamp_ms:
        raise ValueError(f"timestamp does not fit in {length} symbols")
    return "".join(chars)


def encode_random(data: bytes, length: int = RANDOM_LENGTH) -> str:
    value = 0
    bits = 0
    chars: list[str] = []
    for byte in data:
        value = (value << 8) | byte
        bits += 8
        while bits >= 5:
            bits -= 5
            chars.append(ENCODING[(value >> bits) & 31])
        value &= (1 << bits) - 1
    while len(chars) < length:
        chars.append(ENCODING[0])
    return "".join(chars[:length])


class IdGenerator:
    def __init__(
        self,
        *,
        prefix: str = "",
        clock_ms: Callable[[], int] | None = None,
        random_bytes: Callable[[int], bytes] = os.urandom,
    ) -> None:
        self._prefix = prefix
        self._clock_ms = clock_ms or (lambda: time.time_ns() // 1_000_000)
        self._random_bytes = random_bytes

    def generate(self) -> str:
        return (
            self._prefix
            + encode_time(self._clock_ms())
            + encode_random(self._random_bytes(RANDOM_BYTES))
        )

    __call__ = generate
