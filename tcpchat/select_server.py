"""A TCP server that multiplexes its clients with select()."""

from __future__ import annotations

import argparse
import select
import socket
import sys
from types import TracebackType

from tcpchat.handlers import BroadcastChatHandler, ClientHandler, EchoHandler

RECV_SIZE = 1024


class SelectTcpServer:
    """Accepts clients on a port and hands their traffic to a handler,
    watching every socket with one select() call per round."""

    def __init__(
        self, port: int, handler: ClientHandler, host: str = "0.0.0.0"
    ) -> None:
        if handler is None:
            raise ValueError("Client handler cannot be null")
        self._handler = handler
        self._clients: set[socket.socket] = set()
        self._closed = False
        self._listener = self._setup_socket(host, port)
        print(f"Listening on port {self.address()[1]}")

    @staticmethod
    def _setup_socket(host: str, port: int) -> socket.socket:
        try:
            sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        except OSError as exc:
            raise RuntimeError("Socket creation failed") from exc
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        except OSError as exc:
            sock.close()
            raise RuntimeError("setsockopt failed") from exc
        try:
            sock.bind((host, port))
        except OSError as exc:
            sock.close()
            raise RuntimeError("Bind failed") from exc
        try:
            sock.listen(socket.SOMAXCONN)
        except OSError as exc:
            sock.close()
            raise RuntimeError("Listen failed") from exc
        return sock

    def address(self) -> tuple[str, int]:
        """The (host, port) the server listens on."""
        return self._listener.getsockname()

    def serve_once(self, timeout: float | None = None) -> int:
        """Wait up to ``timeout`` seconds (forever if None) and handle every
        socket that became readable. Returns how many there were."""
        watched = [self._listener, *self._clients]
        ready, _, _ = select.select(watched, [], [], timeout)
        for sock in sorted(ready, key=socket.socket.fileno):
            if sock is self._listener:
                self._accept_new_client()
            else:
                self._handle_existing_client(sock)
        return len(ready)

    def run(self) -> None:
        """Serve until select() fails, then close the server."""
        try:
            while True:
                try:
                    self.serve_once(None)
                except OSError as exc:
                    print(f"select: {exc}", file=sys.stderr)
                    break
        finally:
            self.close()

    def close(self) -> None:
        """Close the listening socket and every client socket."""
        if self._closed:
            return
        self._closed = True
        self._listener.close()
        for client in self._clients:
            client.close()
        self._clients.clear()

    def __enter__(self) -> SelectTcpServer:
        return self

    def __exit__(
        self,
        *args: type[BaseException] | BaseException | TracebackType | None,
    ) -> None:
        self.close()

    def _accept_new_client(self) -> None:
        try:
            client, _ = self._listener.accept()
        except OSError as exc:
            print(f"accept: {exc}", file=sys.stderr)
            return
        self._clients.add(client)
        self._handler.on_client_connect(client)

    def _handle_existing_client(self, client: socket.socket) -> None:
        try:
            data = client.recv(RECV_SIZE)
        except OSError:
            data = b""
        if not data:
            self._handler.on_client_disconnect(client)
            self._clients.discard(client)
            client.close()
        else:
            self._handler.on_client_data(client, data)


def main(argv: list[str] | None = None) -> int:
    """Run a chat server on select(); returns the process exit status."""
    parser = argparse.ArgumentParser(
        prog="tcpchat-select", description="TCP chat server using select()."
    )
    parser.add_argument("--port", type=int, default=9000)
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument(
        "--echo", action="store_true", help="echo messages instead of broadcasting"
    )
    args = parser.parse_args(argv)

    handler: ClientHandler = EchoHandler() if args.echo else BroadcastChatHandler()
    try:
        with SelectTcpServer(args.port, handler, args.host) as server:
            server.run()
    except KeyboardInterrupt:
        return 0
    except (RuntimeError, OSError) as exc:
        print(f"Server error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())