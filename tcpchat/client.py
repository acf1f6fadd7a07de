"""A TCP client that sends one message and prints the server's reply."""

from __future__ import annotations

import argparse
import socket
import sys

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8080
DEFAULT_MESSAGE = "Hello from the client"
RECV_SIZE = 1024


def exchange(
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
    message: str | bytes = DEFAULT_MESSAGE,
) -> bytes:
    """Connect to ``host:port``, send ``message`` and return one chunk of reply.

    Raises ValueError for a host that is not an IPv4 address and
    ConnectionError when the connection cannot be made.
    """
    try:
        socket.inet_pton(socket.AF_INET, host)
    except OSError as exc:
        raise ValueError("Invalid address / Address not supported") from exc

    payload = message.encode("utf-8") if isinstance(message, str) else message

    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        try:
            sock.connect((host, port))
        except OSError as exc:
            raise ConnectionError("Connection Failed") from exc
        print("connected to server")

        sent = sock.send(payload)
        print(f"Message send to the server {sent}")

        reply = sock.recv(RECV_SIZE)
        print(f"Server says: {reply.decode('utf-8', errors='replace')}")
    return reply


def main(argv: list[str] | None = None) -> int:
    """Send one message to a server; returns the process exit status."""
    parser = argparse.ArgumentParser(
        prog="tcpchat-client", description="Send one message to a TCP server."
    )
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    parser.add_argument("--message", default=DEFAULT_MESSAGE)
    args = parser.parse_args(argv)

    try:
        exchange(args.host, args.port, args.message)
    except (ValueError, ConnectionError) as exc:
        print(exc, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())