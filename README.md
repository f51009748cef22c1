# ckpool

A support library for mining pool software, written in plain Python with no
dependencies outside the standard library.

## Modules

- `ckpool.sha2`: a pure SHA-256 implementation. `Sha256` is an incremental
  hasher with `update`, `digest`, `hexdigest` and `copy`; `sha256(message)`
  returns the digest in one call.
- `ckpool.difficulty`: conversions between 256-bit targets and difficulty
  (`le256todouble`, `be256todouble`, `diff_from_target`,
  `diff_from_betarget`, `diff_from_nbits`, `target_from_diff`), the share
  check `fulltest`, double SHA-256 `gen_hash`, and the `ShareError` enum
  whose `message()` gives a readable description of each outcome.
- `ckpool.encoding`: `bin2hex`, `validhex`, `hex2bin`, `http_base64`,
  `b58tobin`, the string helpers `safecmp` and `cmdmatch`, coinbase height
  serialisation (`ser_number`, `get_sernumber`), conversion of base58 and
  bech32 addresses to output scripts (`address_to_txn`), and the word-order
  helpers `swap_256`, `bswap_256`, `flip_32` and `flip_80`.
- `ckpool.stats`: human-readable number strings with K/M/G/T/P/E suffixes
  (`suffix_string`) and exponentially decaying averages (`decay_time`).
- `ckpool.locks`: `CkMutex`, `RWLock` and the write-biased `CkLock`. Blocking
  acquisitions wait in timed rounds, log a warning naming the holder after
  each one, and raise `LockContentionError` when the rounds run out.
  `ck_completion_timeout(fn, arg, timeout)` runs a call in a thread and
  reports whether it finished within `timeout` milliseconds.
- `ckpool.net`: TCP helpers. `extract_sockaddr` splits a URL into host and
  port, `url_from_serverurl` and `url_from_socket` give numeric addresses,
  `bind_socket` and `connect_socket` open sockets, `round_trip` times
  refusals from a closed port, and `read_length`, `write_length`,
  `write_socket`, `empty_socket`, `wait_read_select`, `wait_write_select`
  and `wait_close` handle I/O. Failures raise `NetError`.
- `ckpool.lookup3`: the non-cryptographic `hashlittle` hash, with
  `hashsize` and `hashmask`.
- `ckpool.jsonutil`: `json_array_string` and `json_object_dup` for checked
  access to decoded JSON values.

## Installing

    pip install .

## Examples

    from ckpool.difficulty import diff_from_nbits, target_from_diff
    from ckpool.encoding import bin2hex
    from ckpool.stats import suffix_string

    diff_from_nbits(bytes.fromhex("1d00ffff"))   # 1.0
    bin2hex(target_from_diff(1.0))
    suffix_string(1234567.0)                     # '1.23M'

## What this package does not do

It is a library only: it installs no command, and it has no helpers for
messages over unix sockets, for timing and sleeping, or for rotating log
files. It cannot by itself notify a running pool of a new block.

## Running the tests

    pip install .[test]
    pytest