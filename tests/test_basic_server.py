import socket

import pytest

from tcpchat.basic_server import (
    SocketOptions,
    create_listener,
    format_socket_options,
    serve_one,
    set_socket_options,
    socket_info,
    socket_options,
)


@pytest.fixture
def listener():
    sock = create_listener(0, "127.0.0.1")
    yield sock
    sock.close()


def test_create_listener_sets_options(listener):
    options = socket_options(listener)
    assert options.reuse_addr is True
    assert options.recv_timeout == (10, 0)
    assert options.recv_buffer >= 65536


def test_set_socket_options_on_fresh_socket():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        set_socket_options(sock)
        options = socket_options(sock)
    assert options.reuse_addr is True
    assert options.recv_timeout == (10, 0)


def test_fresh_socket_has_reuse_disabled():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        options = socket_options(sock)
    assert options.reuse_addr is False
    assert options.recv_timeout == (0, 0)


def test_socket_options_of_closed_socket_are_unknown():
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.close()
    assert socket_options(sock) == SocketOptions(None, None, None)


def test_format_socket_options_success():
    text = format_socket_options(SocketOptions(True, 65536, (10, 0)))
    assert text.splitlines() == [
        "SO_REUSEADDR enable",
        "SO_RCVBUF: 65536 bytes",
        "SO_RCVTIMEO: 10 sec 0 usec",
    ]


def test_format_socket_options_disabled_and_failures():
    text = format_socket_options(SocketOptions(False, None, None))
    assert text.splitlines() == [
        "SO_REUSEADDR disable",
        "failed to get SO_RCVBUF option",
        "failed to get SO_RCVTIMEO option",
    ]


def test_create_listener_on_busy_port_fails():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as busy:
        busy.bind(("127.0.0.1", 0))
        busy.listen(1)
        port = busy.getsockname()[1]
        with pytest.raises(RuntimeError, match="binding"):
            create_listener(port, "127.0.0.1")


def test_serve_one_round_trip(listener, capsys):
    port = listener.getsockname()[1]
    with socket.create_connection(("127.0.0.1", port), timeout=5) as client:
        client.sendall(b"Hello from the client")
        request = serve_one(listener)
        reply = client.recv(1024)
    assert request == b"Hello from the client"
    assert reply == b"Hello from the server!"
    out = capsys.readouterr().out
    assert "Client says: Hello from the client" in out
    assert "Response sent to client 22" in out


def test_serve_one_custom_response(listener):
    port = listener.getsockname()[1]
    with socket.create_connection(("127.0.0.1", port), timeout=5) as client:
        client.sendall(b"ping")
        serve_one(listener, b"pong")
        assert client.recv(1024) == b"pong"


def test_socket_info_reports_both_ends(listener):
    port = listener.getsockname()[1]
    with socket.create_connection(("127.0.0.1", port), timeout=5) as client:
        info = socket_info(client, "Client side")
        local_port = client.getsockname()[1]
    lines = info.splitlines()
    assert lines[0] == "Client side:"
    assert lines[1] == f"  Local  -> 127.0.0.1:{local_port}"
    assert lines[2] == f"  Remote -> 127.0.0.1:{port}"