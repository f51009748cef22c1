"""Share targets, difficulties and proof-of-work hashing."""

from __future__ import annotations

import enum
import logging
import struct

from ckpool.sha2 import sha256

logger = logging.getLogger(__name__)

# The difficulty 1 target, 0x00000000FFFF followed by zero bytes.
TRUEDIFFONE = float(0xFFFF << 208)
_BITS192 = float(1 << 192)
_BITS128 = float(1 << 128)
_BITS64 = float(1 << 64)
_U64_MAX = (1 << 64) - 1


class ShareError(enum.IntEnum):
    """Outcome of validating a submitted share."""

    INVALID_NONCE2 = -9
    WORKER_MISMATCH = -8
    NO_NONCE = -7
    NO_NTIME = -6
    NO_NONCE2 = -5
    NO_JOBID = -4
    NO_USERNAME = -3
    INVALID_SIZE = -2
    NOT_ARRAY = -1
    NONE = 0
    INVALID_JOBID = 1
    STALE = 2
    NTIME_INVALID = 3
    DUPE = 4
    HIGH_DIFF = 5
    INVALID_VERSION_MASK = 6

    def message(self) -> str:
        """Human-readable description of this outcome."""
        return _SHARE_MESSAGES[self]


_SHARE_MESSAGES = {
    ShareError.INVALID_NONCE2: "Invalid nonce2 length",
    ShareError.WORKER_MISMATCH: "Worker mismatch",
    ShareError.NO_NONCE: "No nonce",
    ShareError.NO_NTIME: "No ntime",
    ShareError.NO_NONCE2: "No nonce2",
    ShareError.NO_JOBID: "No job_id",
    ShareError.NO_USERNAME: "No username",
    ShareError.INVALID_SIZE: "Invalid array size",
    ShareError.NOT_ARRAY: "Params not array",
    ShareError.NONE: "Valid",
    ShareError.INVALID_JOBID: "Invalid JobID",
    ShareError.STALE: "Stale",
    ShareError.NTIME_INVALID: "Ntime out of range",
    ShareError.DUPE: "Duplicate",
    ShareError.HIGH_DIFF: "Above target",
    ShareError.INVALID_VERSION_MASK: "Invalid version mask",
}


def _bytes32(value) -> bytes:
    raw = bytes(value)
    if len(raw) < 32:
        raise ValueError(f"Need 32 bytes, got {len(raw)}")
    return raw[:32]


def fulltest(hash, target) -> bool:
    """Whether the little-endian 256-bit ``hash`` is at or below ``target``."""
    return (int.from_bytes(_bytes32(hash), "little")
            <= int.from_bytes(_bytes32(target), "little"))


def le256todouble(target) -> float:
    """Convert a little-endian 256-bit value to a float."""
    w0, w1, w2, w3 = struct.unpack("<4Q", _bytes32(target))
    value = w3 * _BITS192
    value += w2 * _BITS128
    value += w1 * _BITS64
    value += w0
    return value


def be256todouble(target) -> float:
    """Convert a big-endian 256-bit value to a float."""
    w0, w1, w2, w3 = struct.unpack(">4Q", _bytes32(target))
    value = w0 * _BITS192
    value += w1 * _BITS128
    value += w2 * _BITS64
    value += w3
    return value


def diff_from_target(target) -> float:
    """Difficulty of a little-endian binary target."""
    value = le256todouble(target)
    if value <= 0:
        value = 1.0
    return TRUEDIFFONE / value


def diff_from_betarget(target) -> float:
    """Difficulty of a big-endian binary target."""
    value = be256todouble(target)
    if value <= 0:
        value = 1.0
    return TRUEDIFFONE / value


def diff_from_nbits(nbits) -> float:
    """Network difficulty from the packed 4-byte nbits of a block header."""
    raw = bytes(nbits)
    if len(raw) < 4:
        raise ValueError(f"nbits needs 4 bytes, got {len(raw)}")
    logger.debug("Nbits is %s", raw[:4].hex())
    shift = raw[0]
    if shift < 3:
        logger.warning("Corrupt shift of %d in nbits", shift)
        shift = 3
    elif shift > 32:
        logger.warning("Corrupt shift of %d in nbits", shift)
        shift = 32
    target = bytearray(32)
    start = 32 - shift
    target[start:start + 3] = raw[1:4]
    return diff_from_betarget(target)


def _to_u64(value: float) -> int:
    if value != value or value <= 0:
        return 0
    if value >= _BITS64:
        return _U64_MAX
    return int(value)


def target_from_diff(diff: float) -> bytes:
    """Little-endian 256-bit target for difficulty ``diff``."""
    if diff == 0.0:
        return b"\xff" * 32

    remaining = TRUEDIFFONE / diff
    words = []
    for scale in (_BITS192, _BITS128, _BITS64):
        word = _to_u64(remaining / scale)
        words.append(word)
        remaining -= float(word) * scale
    words.append(_to_u64(remaining))
    w3, w2, w1, w0 = words
    return struct.pack("<4Q", w0, w1, w2, w3)


def gen_hash(data) -> bytes:
    """Double SHA-256 of ``data``."""
    return sha256(sha256(bytes(data)))