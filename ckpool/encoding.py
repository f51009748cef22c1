"""Hex, base64, base58 and bech32 helpers and transaction script encoding."""

from __future__ import annotations

import base64
import struct

_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")

_B58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_B58_INDEX = {ch: i for i, ch in enumerate(_B58_ALPHABET)}
_B58_BIN_LEN = 25

_BECH32_CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
_BECH32_INDEX = {ch: i for i, ch in enumerate(_BECH32_CHARSET)}

_OP_DUP = 0x76
_OP_HASH160 = 0xA9
_OP_EQUAL = 0x87
_OP_EQUALVERIFY = 0x88
_OP_CHECKSIG = 0xAC
_PUSH_20 = 0x14
_WITNESS_VERSION_BASE = 0x50


def bin2hex(data) -> str:
    """Return the lower-case hex representation of ``data``."""
    return bytes(data).hex()


def validhex(buf: str) -> bool:
    """Whether ``buf`` is a non-empty, even-length string of hex digits."""
    if not buf or len(buf) % 2:
        return False
    return all(ch in _HEX_DIGITS for ch in buf)


def hex2bin(hexstr: str, length: int) -> bytes:
    """Decode exactly ``length`` bytes from ``hexstr``.

    Raises ``ValueError`` if the string is not exactly ``2 * length`` hex digits.
    """
    if len(hexstr) % 2:
        raise ValueError("Early end of string in hex2bin")
    if not all(ch in _HEX_DIGITS for ch in hexstr):
        raise ValueError("Invalid binary encoding in hex2bin")
    if len(hexstr) != 2 * length:
        raise ValueError(
            f"Failed hex2bin decode: expected {length} bytes, got {len(hexstr) // 2}"
        )
    return bytes.fromhex(hexstr)


def http_base64(src) -> str:
    """Return ``src`` encoded as MIME base64."""
    raw = src.encode("utf-8") if isinstance(src, str) else bytes(src)
    return base64.b64encode(raw).decode("ascii")


def b58tobin(b58: str) -> bytes:
    """Decode a base58 string into its 25-byte binary form.

    Raises ``ValueError`` on characters outside the base58 alphabet.
    """
    value = 0
    for ch in b58:
        try:
            digit = _B58_INDEX[ch]
        except KeyError:
            raise ValueError(f"Invalid base58 character {ch!r}") from None
        value = value * 58 + digit
    value %= 1 << (8 * _B58_BIN_LEN)
    return value.to_bytes(_B58_BIN_LEN, "big")


def safecmp(a: str | None, b: str | None) -> int:
    """Compare two strings, tolerating ``None`` and empty strings.

    Returns 0 when equal, -1 when exactly one is missing or empty, and
    otherwise a negative, zero or positive value as ``a`` sorts against ``b``.
    """
    if a is None or b is None:
        return 0 if a is b else -1
    if not a or not b:
        return 0 if len(a) == len(b) else -1
    return (a > b) - (a < b)


def cmdmatch(buf: str | None, cmd: str) -> bool:
    """Whether ``buf`` starts with ``cmd``, ignoring case."""
    if not buf or len(buf) < len(cmd):
        return False
    return buf[:len(cmd)].lower() == cmd.lower()


def _bech32_decode(addr: str) -> list[int]:
    """Return the 5-bit data values of a bech32 address, checksum excluded."""
    sep = addr.rfind("1")
    if sep < 0:
        raise ValueError("No separator in bech32 address")
    payload = addr[sep + 1:-6] if len(addr) - sep - 1 > 6 else ""
    if not payload:
        raise ValueError("Empty bech32 data part")
    try:
        return [_BECH32_INDEX[ch.lower()] for ch in payload]
    except KeyError as exc:
        raise ValueError(f"Invalid bech32 character {exc.args[0]!r}") from None


def _convert_bits(values: list[int], inbits: int = 5, outbits: int = 8) -> bytes:
    """Regroup bits into ``outbits``-sized values, dropping incomplete trailing bits."""
    acc = 0
    bits = 0
    maxv = (1 << outbits) - 1
    out = bytearray()
    for value in values:
        acc = (acc << inbits) | value
        bits += inbits
        while bits >= outbits:
            bits -= outbits
            out.append((acc >> bits) & maxv)
    return bytes(out)


def _segaddress_to_txn(addr: str) -> bytes:
    data = _bech32_decode(addr)
    version = data[0]
    program = _convert_bits(data[1:])
    opcode = version + _WITNESS_VERSION_BASE if version else 0
    return bytes((opcode, len(program) & 0xFF)) + program


def _address_to_scripttxn(addr: str) -> bytes:
    payload = b58tobin(addr)[1:21]
    return bytes((_OP_HASH160, _PUSH_20)) + payload + bytes((_OP_EQUAL,))


def _address_to_pubkeytxn(addr: str) -> bytes:
    payload = b58tobin(addr)[1:21]
    return (bytes((_OP_DUP, _OP_HASH160, _PUSH_20)) + payload
            + bytes((_OP_EQUALVERIFY, _OP_CHECKSIG)))


def address_to_txn(addr: str, script: bool, segwit: bool) -> bytes:
    """Return the output script paying to ``addr``."""
    if segwit:
        return _segaddress_to_txn(addr)
    if script:
        return _address_to_scripttxn(addr)
    return _address_to_pubkeytxn(addr)


def ser_number(val: int) -> bytes:
    """Serialise a block height for the coinbase: a length byte then little-endian bytes."""
    if val < 0x80:
        length = 1
    elif val < 0x8000:
        length = 2
    elif val < 0x800000:
        length = 3
    else:
        length = 4
    body = (val & 0xFFFFFFFF).to_bytes(4, "little")
    return bytes((length,)) + body[:length]


def get_sernumber(data) -> int:
    """Read back a number written by ``ser_number``; 0 if the length byte is invalid."""
    data = bytes(data)
    if not data:
        return 0
    length = data[0]
    if length < 1 or length > 4:
        return 0
    value = int.from_bytes(data[1:1 + length], "little")
    if value >= 1 << 31:
        value -= 1 << 32
    return value


def _words(data, count: int) -> tuple[int, ...]:
    raw = bytes(data)
    if len(raw) < count * 4:
        raise ValueError(f"Need at least {count * 4} bytes, got {len(raw)}")
    return struct.unpack(f"<{count}I", raw[:count * 4])


def _bswap_words(data, count: int) -> bytes:
    return struct.pack(f">{count}I", *_words(data, count))


def swap_256(data) -> bytes:
    """Reverse the order of the eight 32-bit words of a 256-bit value."""
    return struct.pack("<8I", *reversed(_words(data, 8)))


def bswap_256(data) -> bytes:
    """Reverse the word order and byte-swap each word of a 256-bit value."""
    return struct.pack(">8I", *reversed(_words(data, 8)))


def flip_32(data) -> bytes:
    """Byte-swap each of the eight 32-bit words of a 32-byte value."""
    return _bswap_words(data, 8)


def flip_80(data) -> bytes:
    """Byte-swap each of the twenty 32-bit words of an 80-byte header."""
    return _bswap_words(data, 20)