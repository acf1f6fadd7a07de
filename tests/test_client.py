import socket
import threading

import pytest

from tcpchat.client import exchange, main


@pytest.fixture
def reply_server():
    """A listener that answers one connection with a fixed reply and
    records what it received."""
    listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    listener.bind(("127.0.0.1", 0))
    listener.listen(1)
    received = []

    def serve():
        conn, _ = listener.accept()
        with conn:
            received.append(conn.recv(1024))
            conn.sendall(b"Hello from the server!")

    thread = threading.Thread(target=serve, daemon=True)
    thread.start()
    yield listener.getsockname()[1], received
    thread.join(timeout=5)
    listener.close()


def _free_port():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


def test_exchange_sends_default_message(reply_server, capsys):
    port, received = reply_server
    reply = exchange("127.0.0.1", port)
    assert reply == b"Hello from the server!"
    out = capsys.readouterr().out
    assert "connected to server" in out
    assert "Message send to the server 21" in out
    assert "Server says: Hello from the server!" in out
    assert received == [b"Hello from the client"]


def test_exchange_sends_given_bytes(reply_server):
    port, received = reply_server
    reply = exchange("127.0.0.1", port, b"ping")
    assert reply == b"Hello from the server!"
    assert received == [b"ping"]


def test_exchange_rejects_invalid_address():
    with pytest.raises(ValueError, match="Invalid address"):
        exchange("not-an-address", 8080)


def test_exchange_connection_refused():
    with pytest.raises(ConnectionError, match="Connection Failed"):
        exchange("127.0.0.1", _free_port())


def test_main_success(reply_server):
    port, received = reply_server
    assert main(["--port", str(port), "--message", "hi"]) == 0
    assert received == [b"hi"]


def test_main_reports_failure(capsys):
    assert main(["--port", str(_free_port())]) == 1
    assert "Connection Failed" in capsys.readouterr().err