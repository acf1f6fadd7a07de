# tcpchat

Small TCP networking tools built only on Python's standard `socket` and
`select` modules:

- a **poll-based** multi-client server (`tcpchat.poll_server.PollTcpServer`)
- a **select-based** multi-client server (`tcpchat.select_server.SelectTcpServer`)
- pluggable client handlers in `tcpchat.handlers`: `EchoHandler` sends every
  chunk it receives back to its sender, and `BroadcastChatHandler` runs a small
  chat room with nicknames
- a **one-shot server** (`tcpchat.basic_server`) that accepts a single
  client, reads one message, answers it and prints the connection's endpoints
  and the listening socket's options
- a **client** (`tcpchat.client`) that connects, sends one message and prints
  the reply

The poll-based server needs `select.poll`, which is available on POSIX
systems but not on Windows.

## Installation

```
pip install .
```

## Commands

### Chat servers

Start the chat server with the poll-based event loop:

```
tcpchat-poll-server
```

Or the same chat server with the select-based event loop:

```
tcpchat-select-server
```

Both take the same options:

- `--port` (default `9000`)
- `--host` (default `0.0.0.0`)
- `--echo`: echo each message back to its sender instead of running the chat room

In chat mode a new client is sent the prompt ` Enter your nickname: `. The
first message it sends becomes its nickname, and everyone else is told
`<nickname> joined the chat`. Each later message is sent to every other
client as `<nickname>: <message>`. Carriage returns and newlines are
stripped from what a client sends. When a client disconnects, the others are
told `<nickname> left the chat` (or `Client <fd> left the chat` if it never
chose a nickname). Every chat line is also printed on the server's output.

Each chunk of up to 1024 bytes read from a socket is handled as one message;
the servers do not split or join messages on line boundaries.

### One-shot server and client

Run the one-shot server, which listens on port 8080 by default (`--port`,
`--host`):

```
tcpchat-basic-server
```

It enables `SO_REUSEADDR`, a 10 second receive timeout and a 64 KiB receive
buffer, accepts one client, prints its local and remote addresses, prints
what the client sent, answers `Hello from the server!`, prints the listening
socket's `SO_REUSEADDR`, `SO_RCVBUF` and `SO_RCVTIMEO` values, and exits.

Then, in another terminal, run the client against it:

```
tcpchat-client
```

The client sends `Hello from the client` to `127.0.0.1:8080` and prints the
first chunk (up to 1024 bytes) the server answers. Options: `--host` (an IPv4
address), `--port` and `--message`.

Each command exits with status 0 on success and 1 on failure.

## Library use

```python
from tcpchat.handlers import BroadcastChatHandler
from tcpchat.poll_server import PollTcpServer

with PollTcpServer(9000, BroadcastChatHandler()) as server:
    server.run()
```

`SelectTcpServer(port, handler, host="0.0.0.0")` takes the same arguments.
Both servers provide:

- `serve_once(timeout=None)`: wait up to `timeout` seconds (forever when
  `None`) and handle one round of events; returns how many sockets had events
- `run()`: call `serve_once` until the wait fails, then close the server
- `address()`: the bound `(host, port)`, useful after binding to port 0
- `close()`, also called when the `with` block ends

A server raises `ValueError` when given no handler, and `RuntimeError` when
its socket cannot be created, bound or put into listening mode.

To write your own handler, subclass `ClientHandler` and implement
`on_client_connect(client)`, `on_client_data(client, data)` and
`on_client_disconnect(client)`. `BroadcastChatHandler.nickname(client)`
returns the nickname a client chose, or `None`.

`tcpchat.basic_server` provides `create_listener(port, host, backlog)`,
`set_socket_options(sock)`, `serve_one(listener, response)` (returns what the
client sent), `socket_info(sock, label)`, `socket_options(sock)` (returns a
`SocketOptions` value) and `format_socket_options(options)`.

`tcpchat.client.exchange(host, port, message)` returns the server's reply. It
raises `ValueError` for a host that is not an IPv4 address and
`ConnectionError` when it cannot connect.

## What it does not do

There is no interactive chat client: `tcpchat-client` sends a single message
and reads a single reply. To take part in the chat room, use any
line-oriented TCP tool that keeps the connection open.

## Tests

```
pip install .[test]
pytest
```