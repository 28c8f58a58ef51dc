import socket
import time

import pytest

from matchbook.errors import FatalError
from matchbook.tcp_socket import TCPSocket


class RecordingLogger:
    def __init__(self):
        self.entries = []

    def log(self, fmt, *args):
        self.entries.append((fmt, args))


def _free_port():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as probe:
        probe.bind(("127.0.0.1", 0))
        return probe.getsockname()[1]


def _accept(listener_sock):
    deadline = time.monotonic() + 5
    while time.monotonic() < deadline:
        try:
            conn, _ = listener_sock.accept()
            conn.setblocking(False)
            return conn
        except BlockingIOError:
            time.sleep(0.01)
    raise TimeoutError("no connection")


def test_send_buffers_without_sending():
    tcp = TCPSocket(RecordingLogger())
    tcp.send(b"12")
    tcp.send(b"34")
    assert tcp.outbound_data == b"1234"


def test_connect_listening_returns_bound_socket():
    port = _free_port()
    tcp = TCPSocket(RecordingLogger())
    sock = tcp.connect("127.0.0.1", "", port, True)
    try:
        assert sock is tcp.socket
        assert sock.getsockname() == ("127.0.0.1", port)
    finally:
        sock.close()


def test_round_trip_over_connection():
    port = _free_port()
    listener = TCPSocket(RecordingLogger())
    listener.connect("127.0.0.1", "", port, True)
    client = TCPSocket(RecordingLogger())
    client.connect("127.0.0.1", "", port, False)
    server_side = TCPSocket(RecordingLogger())
    received = []
    server_side.recv_callback = lambda s, rx_time: received.append((bytes(s.inbound_data), rx_time))
    try:
        server_side.socket = _accept(listener.socket)

        client.send(b"hello")
        assert client.send_and_recv() is False
        assert client.outbound_data == b""

        deadline = time.monotonic() + 5
        got = False
        while not got and time.monotonic() < deadline:
            got = server_side.send_and_recv()
            time.sleep(0.01)
        assert got is True
        assert received[0][0] == b"hello"
        assert received[0][1] >= 0
        assert server_side.inbound_data == b"hello"
    finally:
        for sock in (listener.socket, client.socket, server_side.socket):
            if sock is not None:
                sock.close()


def test_receive_without_callback_raises():
    port = _free_port()
    listener = TCPSocket(RecordingLogger())
    listener.connect("127.0.0.1", "", port, True)
    client = socket.create_connection(("127.0.0.1", port), timeout=2)
    server_side = TCPSocket(RecordingLogger())
    try:
        server_side.socket = _accept(listener.socket)
        client.sendall(b"x")
        with pytest.raises(FatalError):
            deadline = time.monotonic() + 5
            while time.monotonic() < deadline:
                server_side.send_and_recv()
                time.sleep(0.01)
    finally:
        client.close()
        listener.socket.close()
        if server_side.socket is not None:
            server_side.socket.close()