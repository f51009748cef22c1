"""Jenkins lookup3 ``hashlittle`` hash for hash table lookups.

Not suitable for cryptographic use.
"""

from __future__ import annotations

_MASK = 0xFFFFFFFF
_SEED = 0xDEADBEEF


def hashsize(n: int) -> int:
    """Number of buckets in a table indexed by ``n`` bits."""
    return 1 << n


def hashmask(n: int) -> int:
    """Mask selecting the low ``n`` bits of a hash."""
    return hashsize(n) - 1


def _rot(x: int, k: int) -> int:
    return ((x << k) | (x >> (32 - k))) & _MASK


def _mix(a: int, b: int, c: int) -> tuple[int, int, int]:
    a = (a - c) & _MASK; a ^= _rot(c, 4); c = (c + b) & _MASK
    b = (b - a) & _MASK; b ^= _rot(a, 6); a = (a + c) & _MASK
    c = (c - b) & _MASK; c ^= _rot(b, 8); b = (b + a) & _MASK
    a = (a - c) & _MASK; a ^= _rot(c, 16); c = (c + b) & _MASK
    b = (b - a) & _MASK; b ^= _rot(a, 19); a = (a + c) & _MASK
    c = (c - b) & _MASK; c ^= _rot(b, 4); b = (b + a) & _MASK
    return a, b, c


def _final(a: int, b: int, c: int) -> tuple[int, int, int]:
    c ^= b; c = (c - _rot(b, 14)) & _MASK
    a ^= c; a = (a - _rot(c, 11)) & _MASK
    b ^= a; b = (b - _rot(a, 25)) & _MASK
    c ^= b; c = (c - _rot(b, 16)) & _MASK
    a ^= c; a = (a - _rot(c, 4)) & _MASK
    b ^= a; b = (b - _rot(a, 14)) & _MASK
    c ^= b; c = (c - _rot(b, 24)) & _MASK
    return a, b, c


def hashlittle(key, initval: int = 0) -> int:
    """Hash ``key`` (bytes, or a string encoded as UTF-8) into a 32-bit value."""
    data = key.encode("utf-8") if isinstance(key, str) else bytes(key)
    length = len(data)
    a = b = c = (_SEED + length + initval) & _MASK

    offset = 0
    while length - offset > 12:
        a = (a + int.from_bytes(data[offset:offset + 4], "little")) & _MASK
        b = (b + int.from_bytes(data[offset + 4:offset + 8], "little")) & _MASK
        c = (c + int.from_bytes(data[offset + 8:offset + 12], "little")) & _MASK
        a, b, c = _mix(a, b, c)
        offset += 12

    tail = data[offset:]
    if not tail:
        return c
    tail = tail.ljust(12, b"\0")
    a = (a + int.from_bytes(tail[0:4], "little")) & _MASK
    b = (b + int.from_bytes(tail[4:8], "little")) & _MASK
    c = (c + int.from_bytes(tail[8:12], "little")) & _MASK
    _, _, c = _final(a, b, c)
    return c