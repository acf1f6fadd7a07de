"""A TCP server that multiplexes its clients with poll()."""

from __future__ import annotations

import argparse
import select
import socket
import sys
from types import TracebackType

from tcpchat.handlers import BroadcastChatHandler, ClientHandler, EchoHandler

RECV_SIZE = 1024


class PollTcpServer:
    """Accepts clients on a port and hands their traffic to a handler.

    One poll() call watches the listening socket and every client. Clients
    accepted or dropped during a round are added or removed once the round's
    events have all been handled.
    """

    def __init__(
        self, port: int, handler: ClientHandler, host: str = "0.0.0.0"
    ) -> None:
        if handler is None:
            raise ValueError("client handler can not be null")
        self._handler = handler
        self._clients: dict[int, socket.socket] = {}
        self._closed = False
        self._listener = self._setup_socket(host, port)
        self._listener_fd = self._listener.fileno()
        self._poller = select.poll()
        self._poller.register(self._listener_fd, select.POLLIN)
        print(f"Tcp Server is ready for Listen on port {self.address()[1]}")

    @staticmethod
    def _setup_socket(host: str, port: int) -> socket.socket:
        try:
            sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        except OSError as exc:
            raise RuntimeError("Socket Creation failed") from exc
        try:
            sock.bind((host, port))
        except OSError as exc:
            sock.close()
            raise RuntimeError("Socket binding failed") from exc
        try:
            sock.listen(socket.SOMAXCONN)
        except OSError as exc:
            sock.close()
            raise RuntimeError("Socket listening failed") from exc
        return sock

    def address(self) -> tuple[str, int]:
        """The (host, port) the server listens on."""
        return self._listener.getsockname()

    def serve_once(self, timeout: float | None = None) -> int:
        """Wait up to ``timeout`` seconds (forever if None) and handle one
        round of events. Returns the number of descriptors that had events."""
        millis = -1 if timeout is None else max(0, int(timeout * 1000))
        events = self._poller.poll(millis)

        new_clients: list[socket.socket] = []
        removed: dict[int, int] = {}

        for fd, revents in events:
            if revents & select.POLLNVAL:
                print("Invalid socket fd", file=sys.stderr)

            sock = self._listener if fd == self._listener_fd else self._clients.get(fd)

            if revents & select.POLLERR and sock is not None:
                self._report_error(sock)

            if revents & select.POLLHUP:
                print("peer hang up")

            if revents & select.POLLIN:
                if fd == self._listener_fd:
                    client = self._accept_new_client()
                    if client is not None:
                        new_clients.append(client)
                elif sock is None or not self._read_client(sock):
                    removed[fd] = revents

            if revents & select.POLLOUT:
                print(f"FD {fd} is ready to write")

        self._close_clients(removed)
        self._add_new_clients(new_clients)
        return len(events)

    def run(self) -> None:
        """Serve until polling fails, then close the server."""
        try:
            while True:
                try:
                    self.serve_once(None)
                except OSError as exc:
                    print(f"nothing to poll: {exc}", file=sys.stderr)
                    break
        finally:
            self.close()

    def close(self) -> None:
        """Close the listening socket and every client socket."""
        if self._closed:
            return
        self._closed = True
        self._listener.close()
        for client in self._clients.values():
            client.close()
        self._clients.clear()

    def __enter__(self) -> PollTcpServer:
        return self

    def __exit__(
        self,
        *args: type[BaseException] | BaseException | TracebackType | None,
    ) -> None:
        self.close()

    @staticmethod
    def _report_error(sock: socket.socket) -> None:
        try:
            err = sock.getsockopt(socket.SOL_SOCKET, socket.SO_ERROR)
        except OSError:
            print("Get socket option failed", file=sys.stderr)
        else:
            print(f"Socket error: {err}", file=sys.stderr)

    def _accept_new_client(self) -> socket.socket | None:
        try:
            client, _ = self._listener.accept()
        except OSError as exc:
            print(f"accept: {exc}", file=sys.stderr)
            return None
        self._handler.on_client_connect(client)
        return client

    def _read_client(self, client: socket.socket) -> bool:
        try:
            data = client.recv(RECV_SIZE)
        except OSError:
            return False
        if not data:
            return False
        self._handler.on_client_data(client, data)
        return True

    def _close_clients(self, removed: dict[int, int]) -> None:
        for fd, revents in removed.items():
            client = self._clients.pop(fd, None)
            try:
                self._poller.unregister(fd)
            except (KeyError, ValueError):
                pass
            if client is None:
                continue
            self._handler.on_client_disconnect(client)
            if not revents & select.POLLNVAL:
                client.close()

    def _add_new_clients(self, clients: list[socket.socket]) -> None:
        for client in clients:
            fd = client.fileno()
            self._clients[fd] = client
            self._poller.register(fd, select.POLLIN)


def main(argv: list[str] | None = None) -> int:
    """Run a chat server on poll(); returns the process exit status."""
    parser = argparse.ArgumentParser(
        prog="tcpchat-poll", description="TCP chat server using poll()."
    )
    parser.add_argument("--port", type=int, default=9000)
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument(
        "--echo", action="store_true", help="echo messages instead of broadcasting"
    )
    args = parser.parse_args(argv)

    handler: ClientHandler = EchoHandler() if args.echo else BroadcastChatHandler()
    try:
        with PollTcpServer(args.port, handler, args.host) as server:
            server.run()
    except KeyboardInterrupt:
        return 0
    except (RuntimeError, OSError) as exc:
        print(f"Server error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())