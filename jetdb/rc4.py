"""The RC4 stream cipher used to obscure database pages."""

from __future__ import annotations


class RC4:
    """An RC4 keystream; successive ``process`` calls continue the stream."""

    def __init__(self, key: bytes) -> None:
        key = bytes(key)
        if not key:
            raise ValueError("RC4 key must not be empty")
        state = list(range(256))
        j = 0
        for i in range(256):
            j = (j + state[i] + key[i % len(key)]) % 256
            state[i], state[j] = state[j], state[i]
        self._state = state
        self._x = 0
        self._y = 0

    def process(self, data: bytes) -> bytes:
        """Encrypt or decrypt ``data``; the operation is its own inverse."""
        state = self._state
        x, y = self._x, self._y
        out = bytearray(data)
        for pos, byte in enumerate(out):
            x = (x + 1) % 256
            y = (state[x] + y) % 256
            state[x], state[y] = state[y], state[x]
            out[pos] = byte ^ state[(state[x] + state[y]) % 256]
        self._x, self._y = x, y
        return bytes(out)


def rc4(key: bytes, data: bytes) -> bytes:
    """Apply RC4 with a fresh keystream from ``key`` to ``data``."""
    return RC4(key).process(data)