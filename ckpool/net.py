"""TCP socket helpers: address parsing, connecting, binding and framed I/O."""

from __future__ import annotations

import errno
import logging
import select
import socket
import struct
import time

logger = logging.getLogger(__name__)

PAGESIZE = 4096
_ROUND_TRIP_PORT = "1042"
_CONNECT_TIMEOUT = 5
_WRITE_TIMEOUT = 5

_POLLRDHUP = getattr(select, "POLLRDHUP", 0)
_MSG_WAITALL = getattr(socket, "MSG_WAITALL", 0)
_MSG_DONTWAIT = getattr(socket, "MSG_DONTWAIT", 0)


class NetError(OSError):
    """A network operation could not be completed."""


def extract_sockaddr(url: str | None) -> tuple[str, str]:
    """Split a URL such as ``stratum+tcp://host:3333`` into host and port.

    The port defaults to ``"80"``; square brackets around IPv6 hosts are
    removed. Raises ``NetError`` when no host or an empty port is given.
    """
    if url is None:
        logger.warning("Null length url string passed to extract_sockaddr")
        raise NetError("No url given")
    slashes = url.find("//")
    rest = url if slashes < 0 else url[slashes + 2:]

    ib = rest.find("[")
    ie = rest.find("]")
    ipv6 = ib >= 0 and ie >= 0 and ie > ib
    colon = rest.find(":", ie) if ipv6 else rest.find(":")

    if colon >= 0:
        host_len = colon
        port_str = rest[colon + 1:]
        if not port_str:
            raise NetError(f"Empty port in {url!r}")
        port = port_str[:5].split("/", 1)[0]
    else:
        host_len = len(rest)
        port = "80"

    start = 0
    if ipv6:
        host_len -= 2
        start = 1
    if host_len < 1:
        logger.warning("Null length URL passed to extract_sockaddr")
        raise NetError(f"No host in {url!r}")
    return rest[start:start + host_len], port


def url_from_sockaddr(addr) -> tuple[str, str]:
    """Return the numeric host and port of an IPv4 or IPv6 socket address."""
    if not isinstance(addr, tuple) or len(addr) not in (2, 4):
        raise NetError(f"Unsupported socket address {addr!r}")
    host, port = addr[0], addr[1]
    if not isinstance(host, str) or not isinstance(port, int):
        raise NetError(f"Unsupported socket address {addr!r}")
    host = host.split("%", 1)[0]
    family = socket.AF_INET if len(addr) == 2 else socket.AF_INET6
    try:
        packed = socket.inet_pton(family, host)
    except OSError as exc:
        raise NetError(f"Not a numeric address: {host!r}") from exc
    return socket.inet_ntop(family, packed), str(port)


def _getaddrinfo(host: str, port: str):
    while True:
        try:
            return socket.getaddrinfo(host, port, socket.AF_UNSPEC, socket.SOCK_STREAM)
        except socket.gaierror as exc:
            if exc.errno != socket.EAI_AGAIN:
                raise NetError(f"Failed to resolve {host}:{port}") from exc


def url_from_serverurl(serverurl: str) -> tuple[str, str]:
    """Resolve a server URL to a numeric host and port."""
    host, port = extract_sockaddr(serverurl)
    infos = _getaddrinfo(host, port)
    if not infos:
        raise NetError(f"Failed to extract addrinfo from url {host}:{port}")
    return url_from_sockaddr(infos[0][4])


def url_from_socket(sock: socket.socket) -> tuple[str, str]:
    """Return the numeric local host and port a socket is bound to."""
    if sock.fileno() < 1:
        raise NetError("Invalid socket")
    return url_from_sockaddr(sock.getsockname())


def keep_sockalive(sock: socket.socket) -> None:
    """Enable TCP keepalive probing and disable Nagle's algorithm."""
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_KEEPALIVE, 1)
    sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
    for name, value in (("TCP_KEEPCNT", 1), ("TCP_KEEPIDLE", 45), ("TCP_KEEPINTVL", 30)):
        option = getattr(socket, name, None)
        if option is not None:
            sock.setsockopt(socket.IPPROTO_TCP, option, value)


def nolinger_socket(sock: socket.socket) -> None:
    """Make close reset the connection rather than linger."""
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_LINGER, struct.pack("ii", 1, 0))


def noblock_socket(sock: socket.socket) -> None:
    """Put the socket in non-blocking mode."""
    sock.setblocking(False)


def block_socket(sock: socket.socket) -> None:
    """Put the socket in blocking mode."""
    sock.setblocking(True)


def bind_socket(url: str, port: str) -> socket.socket:
    """Create a TCP socket bound to ``url``:``port`` with address reuse."""
    infos = _getaddrinfo(url, port)
    sock = None
    for family, socktype, proto, _, addr in infos:
        try:
            sock = socket.socket(family, socktype, proto)
        except OSError:
            continue
        break
    if sock is None:
        logger.warning("Failed to open socket for %s:%s", url, port)
        raise NetError(f"Failed to open socket for {url}:{port}")
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind(addr)
    except OSError as exc:
        logger.warning("Failed to bind socket for %s:%s", url, port)
        sock.close()
        raise NetError(f"Failed to bind socket for {url}:{port}") from exc
    return sock


def connect_socket(url: str, port: str) -> socket.socket:
    """Connect to the first address of ``url``:``port`` that answers quickly.

    Each address gets up to five seconds; the returned socket is blocking.
    """
    for family, socktype, proto, _, addr in _getaddrinfo(url, port):
        try:
            sock = socket.socket(family, socktype, proto)
        except OSError:
            logger.debug("Failed socket")
            continue
        noblock_socket(sock)
        err = sock.connect_ex(addr)
        if err == 0:
            logger.debug("Succeeded immediate connect")
            block_socket(sock)
            return sock
        if err not in (errno.EINPROGRESS, errno.EWOULDBLOCK):
            sock.close()
            logger.debug("Failed sock connect")
            continue
        if wait_write_select(sock, _CONNECT_TIMEOUT):
            if sock.getsockopt(socket.SOL_SOCKET, socket.SO_ERROR) == 0:
                logger.debug("Succeeded delayed connect")
                block_socket(sock)
                return sock
        sock.close()
        logger.debug("Select timeout/failed connect")
    logger.info("Failed to connect to %s:%s", url, port)
    raise NetError(f"Failed to connect to {url}:{port}")


def round_trip(url: str) -> int:
    """Minimum milliseconds to get a refusal from a closed port on ``url``.

    Five connection attempts are timed. Raises ``NetError`` when the host
    cannot be resolved or a connection is not refused.
    """
    infos = _getaddrinfo(url, _ROUND_TRIP_PORT)
    if not infos:
        raise NetError(f"Failed to resolve {url}:{_ROUND_TRIP_PORT}")
    family, socktype, proto, _, addr = infos[0]
    best = 0
    for _ in range(5):
        try:
            sock = socket.socket(family, socktype, proto)
        except OSError as exc:
            logger.error("Failed socket")
            raise NetError("Failed socket") from exc
        with sock:
            start = time.monotonic()
            err = sock.connect_ex(addr)
            end = time.monotonic()
        if err != errno.ECONNREFUSED:
            logger.info("Unable to get round trip due to %s:%s connect not being refused",
                        url, _ROUND_TRIP_PORT)
            raise NetError(f"Connection to {url}:{_ROUND_TRIP_PORT} not refused")
        diff = int((end - start) * 1000)
        if not best or diff < best:
            best = diff
    if best > 500:
        logger.info("Round trip to %s:%s greater than 500ms at %d", url, _ROUND_TRIP_PORT, best)
    logger.info("Minimum round trip to %s:%s calculated as %dms", url, _ROUND_TRIP_PORT, best)
    return best


def _poll(sock: socket.socket, events: int, timeout: float) -> int:
    poller = select.poll()
    poller.register(sock.fileno(), events)
    ready = poller.poll(timeout * 1000)
    return ready[0][1] if ready else 0


def wait_close(sock: socket.socket, timeout: float) -> bool:
    """Whether the peer closes the connection within ``timeout`` seconds."""
    if sock.fileno() < 0:
        raise NetError("Invalid socket")
    revents = _poll(sock, _POLLRDHUP, timeout)
    return bool(revents & (select.POLLHUP | _POLLRDHUP | select.POLLERR))


def wait_read_select(sock: socket.socket, timeout: float) -> bool:
    """Whether the socket becomes readable within ``timeout`` seconds."""
    return bool(_poll(sock, select.POLLIN | _POLLRDHUP, timeout))


def wait_write_select(sock: socket.socket, timeout: float) -> bool:
    """Whether the socket becomes writable within ``timeout`` seconds."""
    return bool(_poll(sock, select.POLLOUT | _POLLRDHUP, timeout))


def read_length(sock: socket.socket, length: int) -> bytes:
    """Read exactly ``length`` bytes, raising ``NetError`` if the stream ends."""
    if length < 1:
        logger.warning("Invalid read length of %d requested in read_length", length)
        raise ValueError(f"Invalid read length {length}")
    if sock.fileno() < 0:
        raise NetError("Invalid socket")
    chunks = bytearray()
    while len(chunks) < length:
        try:
            chunk = sock.recv(length - len(chunks), _MSG_WAITALL)
        except OSError as exc:
            raise NetError("Failed to read in read_length") from exc
        if not chunk:
            raise NetError(f"Connection closed after {len(chunks)} of {length} bytes")
        chunks += chunk
    return bytes(chunks)


def write_length(sock: socket.socket, data) -> int:
    """Write all of ``data``, returning the number of bytes written."""
    view = memoryview(bytes(data))
    if len(view) < 1:
        logger.warning("Invalid write length of %d requested in write_length", len(view))
        raise ValueError("Nothing to write")
    if sock.fileno() < 0:
        logger.warning("Attempt to write to invalidated sock in write_length")
        raise NetError("Invalid socket")
    written = 0
    while written < len(view):
        try:
            written += sock.send(view[written:])
        except OSError as exc:
            logger.error("Failed to write %d bytes in write_length", len(view) - written)
            raise NetError("Failed to write in write_length") from exc
    return written


def write_socket(sock: socket.socket, data) -> int:
    """Wait up to five seconds for the socket to be writable, then write ``data``."""
    if not wait_write_select(sock, _WRITE_TIMEOUT):
        logger.info("Select timed out in write_socket")
        raise NetError("Select timed out in write_socket")
    return write_length(sock, data)


def empty_socket(sock: socket.socket) -> int:
    """Discard whatever is waiting on the socket, returning the bytes dropped."""
    if sock.fileno() < 1:
        return 0
    discarded = 0
    while True:
        try:
            chunk = sock.recv(PAGESIZE - 1, _MSG_DONTWAIT)
        except (BlockingIOError, InterruptedError):
            break
        except OSError:
            break
        if not chunk:
            break
        logger.debug("Discarding: %s", chunk.decode("utf-8", "replace"))
        discarded += len(chunk)
    return discarded