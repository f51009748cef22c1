import base64
import hashlib

import pytest

from ckpool.encoding import (
    address_to_txn,
    b58tobin,
    bin2hex,
    bswap_256,
    cmdmatch,
    flip_32,
    flip_80,
    get_sernumber,
    hex2bin,
    http_base64,
    safecmp,
    ser_number,
    swap_256,
    validhex,
)

_ALPHA = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"


def _base58check(version: int, payload: bytes) -> tuple[str, bytes]:
    raw = bytes((version,)) + payload
    raw += hashlib.sha256(hashlib.sha256(raw).digest()).digest()[:4]
    n = int.from_bytes(raw, "big")
    out = ""
    while n:
        n, r = divmod(n, 58)
        out = _ALPHA[r] + out
    pad = len(raw) - len(raw.lstrip(b"\x00"))
    return "1" * pad + out, raw


def _bech32_like(version: int, program: bytes) -> str:
    acc = 0
    bits = 0
    groups = []
    for byte in program:
        acc = (acc << 8) | byte
        bits += 8
        while bits >= 5:
            bits -= 5
            groups.append((acc >> bits) & 31)
    if bits:
        groups.append((acc << (5 - bits)) & 31)
    # The checksum is not examined by the decoder.
    return "bc1" + _CHARSET[version] + "".join(_CHARSET[g] for g in groups) + "qqqqqq"


@pytest.mark.parametrize("data", [b"\x00", b"\x01\x02\xfe\xff", bytes(range(256))])
def test_hex_round_trip(data):
    text = bin2hex(data)
    assert text == text.lower()
    assert len(text) == 2 * len(data)
    assert hex2bin(text, len(data)) == data


def test_hex2bin_accepts_upper_case():
    assert hex2bin("ABcd", 2) == hex2bin("abcd", 2)


@pytest.mark.parametrize("text,length", [("abc", 2), ("zz", 1), ("abcd", 1), ("ab", 2)])
def test_hex2bin_rejects_bad_input(text, length):
    with pytest.raises(ValueError):
        hex2bin(text, length)


@pytest.mark.parametrize("text,expected", [
    ("00ff", True),
    ("DEADbeef", True),
    ("", False),
    ("abc", False),
    ("0g", False),
    ("12 4", False),
])
def test_validhex(text, expected):
    assert validhex(text) is expected


def test_http_base64_known_value():
    assert http_base64("Man") == "TWFu"


@pytest.mark.parametrize("text", ["", "a", "ab", "user:password", "longer text here"])
def test_http_base64_matches_standard_encoding(text):
    assert http_base64(text) == base64.b64encode(text.encode()).decode()


@pytest.mark.parametrize("version", [0, 5, 111])
def test_b58tobin_decodes_base58check(version):
    payload = hashlib.sha256(bytes((version,))).digest()[:20]
    addr, raw = _base58check(version, payload)
    assert b58tobin(addr) == raw


def test_b58tobin_rejects_invalid_character():
    with pytest.raises(ValueError):
        b58tobin("10OIl")


def test_address_to_txn_pubkey():
    payload = bytes(range(20))
    addr, _ = _base58check(0, payload)
    txn = address_to_txn(addr, False, False)
    assert txn == b"\x76\xa9\x14" + payload + b"\x88\xac"


def test_address_to_txn_script():
    payload = bytes(range(100, 120))
    addr, _ = _base58check(5, payload)
    txn = address_to_txn(addr, True, False)
    assert txn == b"\xa9\x14" + payload + b"\x87"


def test_address_to_txn_segwit_v0_vector():
    txn = address_to_txn("BC1QW508D6QEJXTDG4Y5R3ZARVARY0C5XW7KV8F3T4", False, True)
    assert txn == bytes.fromhex("0014751e76e8199196d454941c45d1b3a323f1433bd6")


def test_address_to_txn_segwit_case_insensitive():
    upper = "BC1QW508D6QEJXTDG4Y5R3ZARVARY0C5XW7KV8F3T4"
    assert address_to_txn(upper.lower(), False, True) == address_to_txn(upper, False, True)


@pytest.mark.parametrize("version,program", [
    (0, bytes(range(32))),
    (1, bytes(range(200, 232))),
    (0, bytes(20)),
])
def test_address_to_txn_segwit_round_trip(version, program):
    txn = address_to_txn(_bech32_like(version, program), False, True)
    opcode = version + 0x50 if version else 0
    assert txn == bytes((opcode, len(program))) + program


def test_address_to_txn_segwit_without_separator():
    with pytest.raises(ValueError):
        address_to_txn("qqqqqqqqqqqqqqqq", False, True)


@pytest.mark.parametrize("val", [0, 1, 0x7F, 0x80, 0x7FFF, 0x8000, 0x7FFFFF, 0x800000, 840000, 0x7FFFFFFF])
def test_ser_number_round_trip(val):
    encoded = ser_number(val)
    assert len(encoded) == encoded[0] + 1
    assert get_sernumber(encoded) == val


@pytest.mark.parametrize("val,length", [(0x7F, 1), (0x80, 2), (0x8000, 3), (0x800000, 4)])
def test_ser_number_length_thresholds(val, length):
    assert ser_number(val)[0] == length


@pytest.mark.parametrize("data", [b"\x00\x01", b"\x05\x01\x02\x03\x04\x05", b""])
def test_get_sernumber_invalid_length(data):
    assert get_sernumber(data) == 0


def test_safecmp():
    assert safecmp(None, None) == 0
    assert safecmp(None, "a") == -1
    assert safecmp("a", None) == -1
    assert safecmp("", "") == 0
    assert safecmp("", "a") == -1
    assert safecmp("abc", "abc") == 0
    assert safecmp("abc", "abd") < 0
    assert safecmp("abd", "abc") > 0


def test_cmdmatch():
    assert cmdmatch("UPDATE now", "update") is True
    assert cmdmatch("update", "update") is True
    assert cmdmatch("upd", "update") is False
    assert cmdmatch(None, "update") is False
    assert cmdmatch("", "update") is False
    assert cmdmatch("stats", "update") is False


def test_swap_256():
    data = bytes(range(32))
    swapped = swap_256(data)
    assert swapped[:4] == data[28:32]
    assert swapped[28:] == data[:4]
    assert swap_256(swapped) == data


def test_bswap_256_reverses_bytes():
    data = bytes(range(32))
    assert bswap_256(data) == data[::-1]


def test_flip_32():
    data = bytes(range(32))
    flipped = flip_32(data)
    assert flipped[:4] == data[3::-1]
    assert flip_32(flipped) == data


def test_flip_80():
    data = bytes(range(80))
    flipped = flip_80(data)
    assert len(flipped) == 80
    assert flipped[4:8] == data[7:3:-1]
    assert flip_80(flipped) == data


def test_short_input_rejected():
    with pytest.raises(ValueError):
        swap_256(bytes(31))
    with pytest.raises(ValueError):
        flip_80(bytes(79))