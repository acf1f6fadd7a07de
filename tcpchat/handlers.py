"""Client handlers that decide what a server does with its connections."""

from __future__ import annotations

import sys
import threading
from abc import ABC, abstractmethod
from typing import Protocol


class Client(Protocol):
    """The part of a connected socket that handlers rely on."""

    def fileno(self) -> int: ...

    def sendall(self, data: bytes, /) -> None: ...


NICKNAME_PROMPT = b" Enter your nickname: "


def _send(client: Client, data: bytes) -> None:
    """Send to a client, ignoring failures like a fire-and-forget send."""
    try:
        client.sendall(data)
    except OSError:
        pass


class ClientHandler(ABC):
    """Receives connection events from a server."""

    @abstractmethod
    def on_client_connect(self, client: Client) -> None:
        """Called once a new client has been accepted."""

    @abstractmethod
    def on_client_data(self, client: Client, data: bytes) -> None:
        """Called with each chunk of bytes read from a client."""

    @abstractmethod
    def on_client_disconnect(self, client: Client) -> None:
        """Called once a client has gone away."""


class EchoHandler(ClientHandler):
    """Sends every chunk straight back to the client that sent it."""

    def on_client_connect(self, client: Client) -> None:
        print(f"Client connected: FD = {client.fileno()}")

    def on_client_data(self, client: Client, data: bytes) -> None:
        text = data.decode("utf-8", errors="replace")
        sys.stdout.write(f"Client {client.fileno()}: {text}")
        sys.stdout.flush()
        _send(client, data)

    def on_client_disconnect(self, client: Client) -> None:
        print(f"Client disconnected: FD = {client.fileno()}")


class BroadcastChatHandler(ClientHandler):
    """A chat room: the first line from a client is its nickname, later
    lines are relayed to everyone else."""

    def __init__(self) -> None:
        self._clients: dict[Client, None] = {}
        self._nicknames: dict[Client, str] = {}
        self._lock = threading.Lock()

    def nickname(self, client: Client) -> str | None:
        """The nickname a client chose, or None if it has not chosen one."""
        with self._lock:
            return self._nicknames.get(client)

    def on_client_connect(self, client: Client) -> None:
        with self._lock:
            self._clients[client] = None
            _send(client, NICKNAME_PROMPT)

    def on_client_data(self, client: Client, data: bytes) -> None:
        with self._lock:
            text = data.decode("utf-8", errors="replace")
            text = text.replace("\r", "").replace("\n", "")

            if client not in self._nicknames:
                self._nicknames[client] = text
                message = f"{text} joined the chat\n"
            else:
                message = f"{self._nicknames[client]}: {text}\n"

            self._broadcast(client, message)
            sys.stdout.write(message)
            sys.stdout.flush()

    def on_client_disconnect(self, client: Client) -> None:
        with self._lock:
            name = self._nicknames.pop(client, None)
            if name is None:
                name = f"Client {client.fileno()}"
            self._clients.pop(client, None)

            message = f"{name} left the chat\n"
            self._broadcast(client, message)
            sys.stdout.write(message)
            sys.stdout.flush()

    def _broadcast(self, sender: Client, message: str) -> None:
        payload = message.encode("utf-8")
        for client in self._clients:
            if client is not sender:
                _send(client, payload)