"""A one-shot TCP server: accept a single client, read, reply, report."""

from __future__ import annotations

import argparse
import socket
import struct
import sys
from dataclasses import dataclass

DEFAULT_PORT = 8080
DEFAULT_BACKLOG = 5
RECV_SIZE = 1024
RECEIVE_TIMEOUT_SECONDS = 10
RECEIVE_BUFFER_BYTES = 65536
DEFAULT_RESPONSE = b"Hello from the server!"

_TIMEVAL = struct.Struct("ll")


@dataclass(frozen=True)
class SocketOptions:
    """A few socket-level options read back from a socket.

    A field is None when the option could not be read.
    """

    reuse_addr: bool | None
    recv_buffer: int | None
    recv_timeout: tuple[int, int] | None


def socket_info(sock: socket.socket, label: str) -> str:
    """Describe the local and remote endpoints of a connected socket."""
    local_ip, local_port = sock.getsockname()[:2]
    remote_ip, remote_port = sock.getpeername()[:2]
    return "\n".join(
        [
            f"{label}:",
            f"  Local  -> {local_ip}:{local_port}",
            f"  Remote -> {remote_ip}:{remote_port}",
        ]
    )


def socket_options(sock: socket.socket) -> SocketOptions:
    """Read SO_REUSEADDR, SO_RCVBUF and SO_RCVTIMEO from a socket."""
    try:
        reuse: bool | None = bool(
            sock.getsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR)
        )
    except OSError:
        reuse = None

    try:
        rcvbuf: int | None = sock.getsockopt(socket.SOL_SOCKET, socket.SO_RCVBUF)
    except OSError:
        rcvbuf = None

    try:
        raw = sock.getsockopt(socket.SOL_SOCKET, socket.SO_RCVTIMEO, _TIMEVAL.size)
        seconds, micros = _TIMEVAL.unpack(raw)
        timeout: tuple[int, int] | None = (seconds, micros)
    except (OSError, struct.error):
        timeout = None

    return SocketOptions(reuse, rcvbuf, timeout)


def format_socket_options(options: SocketOptions) -> str:
    """Render options as report lines, one per option."""
    lines = []
    if options.reuse_addr is None:
        lines.append("failed to get SO_REUSEADDR option")
    else:
        lines.append(f"SO_REUSEADDR {'enable' if options.reuse_addr else 'disable'}")

    if options.recv_buffer is None:
        lines.append("failed to get SO_RCVBUF option")
    else:
        lines.append(f"SO_RCVBUF: {options.recv_buffer} bytes")

    if options.recv_timeout is None:
        lines.append("failed to get SO_RCVTIMEO option")
    else:
        seconds, micros = options.recv_timeout
        lines.append(f"SO_RCVTIMEO: {seconds} sec {micros} usec")
    return "\n".join(lines)


def set_socket_options(sock: socket.socket) -> None:
    """Enable address reuse, a 10 second receive timeout and a 64 KiB
    receive buffer. Raises RuntimeError naming the option that failed."""
    settings = [
        ("SO_REUSEADDR", socket.SO_REUSEADDR, 1),
        (
            "SO_RCVTIMEO",
            socket.SO_RCVTIMEO,
            _TIMEVAL.pack(RECEIVE_TIMEOUT_SECONDS, 0),
        ),
        ("SO_RCVBUF", socket.SO_RCVBUF, RECEIVE_BUFFER_BYTES),
    ]
    for name, option, value in settings:
        try:
            sock.setsockopt(socket.SOL_SOCKET, option, value)
        except OSError as exc:
            raise RuntimeError(f"setsockopt({name}) failed") from exc


def create_listener(
    port: int = DEFAULT_PORT, host: str = "0.0.0.0", backlog: int = DEFAULT_BACKLOG
) -> socket.socket:
    """Create, configure, bind and listen on a TCP socket."""
    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    except OSError as exc:
        raise RuntimeError("socket creation failed") from exc

    try:
        set_socket_options(sock)
    except RuntimeError as exc:
        sock.close()
        raise RuntimeError("socket option set failed") from exc

    try:
        sock.bind((host, port))
    except OSError as exc:
        sock.close()
        raise RuntimeError("binding Ip/port to socket failed") from exc

    try:
        sock.listen(backlog)
    except OSError as exc:
        sock.close()
        raise RuntimeError("Listening on server socket failed") from exc
    return sock


def serve_one(listener: socket.socket, response: bytes = DEFAULT_RESPONSE) -> bytes:
    """Accept one client, read one chunk from it and send ``response``.

    Returns the bytes the client sent.
    """
    try:
        client, _ = listener.accept()
    except OSError as exc:
        raise RuntimeError("Did not accept client") from exc

    with client:
        print("Client connected!")
        print(socket_info(client, "New socket Created"))

        request = client.recv(RECV_SIZE)
        print(f"Client says: {request.decode('utf-8', errors='replace')}")

        client.sendall(response)
        print(f"Response sent to client {len(response)}")
    return request


def main(argv: list[str] | None = None) -> int:
    """Serve a single client; returns the process exit status."""
    parser = argparse.ArgumentParser(
        prog="tcpchat-basic", description="Serve a single TCP client once."
    )
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    parser.add_argument("--host", default="0.0.0.0")
    args = parser.parse_args(argv)

    try:
        listener = create_listener(args.port, args.host)
    except RuntimeError as exc:
        print(exc, file=sys.stderr)
        return 1

    with listener:
        print(f"Server listening on port {listener.getsockname()[1]}...")
        try:
            serve_one(listener)
        except (RuntimeError, OSError) as exc:
            print(exc, file=sys.stderr)
            return 1
        print(format_socket_options(socket_options(listener)))
    return 0


if __name__ == "__main__":
    sys.exit(main())