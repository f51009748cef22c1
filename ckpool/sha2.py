"""SHA-256 message digest (FIPS 180-2)."""

from __future__ import annotations

import struct

DIGEST_SIZE = 32
BLOCK_SIZE = 64

_H0 = (
    0x6A09E667, 0xBB67AE85, 0x3C6EF372, 0xA54FF53A,
    0x510E527F, 0x9B05688C, 0x1F83D9AB, 0x5BE0CD19,
)

_K = (
    0x428A2F98, 0x71374491, 0xB5C0FBCF, 0xE9B5DBA5,
    0x3956C25B, 0x59F111F1, 0x923F82A4, 0xAB1C5ED5,
    0xD807AA98, 0x12835B01, 0x243185BE, 0x550C7DC3,
    0x72BE5D74, 0x80DEB1FE, 0x9BDC06A7, 0xC19BF174,
    0xE49B69C1, 0xEFBE4786, 0x0FC19DC6, 0x240CA1CC,
    0x2DE92C6F, 0x4A7484AA, 0x5CB0A9DC, 0x76F988DA,
    0x983E5152, 0xA831C66D, 0xB00327C8, 0xBF597FC7,
    0xC6E00BF3, 0xD5A79147, 0x06CA6351, 0x14292967,
    0x27B70A85, 0x2E1B2138, 0x4D2C6DFC, 0x53380D13,
    0x650A7354, 0x766A0ABB, 0x81C2C92E, 0x92722C85,
    0xA2BFE8A1, 0xA81A664B, 0xC24B8B70, 0xC76C51A3,
    0xD192E819, 0xD6990624, 0xF40E3585, 0x106AA070,
    0x19A4C116, 0x1E376C08, 0x2748774C, 0x34B0BCB5,
    0x391C0CB3, 0x4ED8AA4A, 0x5B9CCA4F, 0x682E6FF3,
    0x748F82EE, 0x78A5636F, 0x84C87814, 0x8CC70208,
    0x90BEFFFA, 0xA4506CEB, 0xBEF9A3F7, 0xC67178F2,
)

_MASK = 0xFFFFFFFF
_BLOCK = struct.Struct(">16I")


def _rotr(x: int, n: int) -> int:
    return ((x >> n) | (x << (32 - n))) & _MASK


def _compress(state: list[int], block: bytes) -> None:
    """Run one 64-byte block through the compression function, in place."""
    w = list(_BLOCK.unpack(block))
    for j in range(16, 64):
        x15 = w[j - 15]
        x2 = w[j - 2]
        s0 = _rotr(x15, 7) ^ _rotr(x15, 18) ^ (x15 >> 3)
        s1 = _rotr(x2, 17) ^ _rotr(x2, 19) ^ (x2 >> 10)
        w.append((s1 + w[j - 7] + s0 + w[j - 16]) & _MASK)

    a, b, c, d, e, f, g, h = state
    for k, wj in zip(_K, w):
        t1 = (h + (_rotr(e, 6) ^ _rotr(e, 11) ^ _rotr(e, 25))
              + ((e & f) ^ (~e & g)) + k + wj) & _MASK
        t2 = ((_rotr(a, 2) ^ _rotr(a, 13) ^ _rotr(a, 22))
              + ((a & b) ^ (a & c) ^ (b & c))) & _MASK
        h, g, f, e = g, f, e, (d + t1) & _MASK
        d, c, b, a = c, b, a, (t1 + t2) & _MASK

    for i, v in enumerate((a, b, c, d, e, f, g, h)):
        state[i] = (state[i] + v) & _MASK


class Sha256:
    """Incremental SHA-256 hasher with a hashlib-like interface."""

    digest_size = DIGEST_SIZE
    block_size = BLOCK_SIZE
    name = "sha256"

    def __init__(self, data: bytes = b"") -> None:
        self._state = list(_H0)
        self._buffer = bytearray()
        self._total = 0
        if data:
            self.update(data)

    def update(self, data) -> None:
        """Feed more bytes into the digest."""
        self._buffer += memoryview(data).cast("B")
        full = len(self._buffer) - len(self._buffer) % BLOCK_SIZE
        for start in range(0, full, BLOCK_SIZE):
            _compress(self._state, bytes(self._buffer[start:start + BLOCK_SIZE]))
        del self._buffer[:full]
        self._total += full

    def copy(self) -> "Sha256":
        """Return an independent hasher with the same state."""
        other = Sha256()
        other._state = list(self._state)
        other._buffer = bytearray(self._buffer)
        other._total = self._total
        return other

    def digest(self) -> bytes:
        """Return the digest of everything fed so far, leaving the state usable."""
        state = list(self._state)
        tail = bytes(self._buffer)
        # The bit length is kept as a 32-bit count in the low word of the trailer.
        bit_len = ((self._total + len(tail)) * 8) & _MASK
        blocks = 1 if len(tail) <= BLOCK_SIZE - 9 else 2
        padded = bytearray(blocks * BLOCK_SIZE)
        padded[:len(tail)] = tail
        padded[len(tail)] = 0x80
        padded[-4:] = bit_len.to_bytes(4, "big")
        for start in range(0, len(padded), BLOCK_SIZE):
            _compress(state, bytes(padded[start:start + BLOCK_SIZE]))
        return struct.pack(">8I", *state)

    def hexdigest(self) -> str:
        """Return the digest as a lower-case hex string."""
        return self.digest().hex()


def sha256(message) -> bytes:
    """Return the SHA-256 digest of ``message``."""
    return Sha256(message).digest()