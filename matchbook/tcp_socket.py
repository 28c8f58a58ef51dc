"""Non-blocking TCP connection with buffered sends and kernel receive timestamps."""

import socket
import struct

from matchbook.errors import ensure
from matchbook.socket_utils import SCM_TIMESTAMP, SocketCfg, create_socket
from matchbook.time_utils import NANOS_TO_MICROS, NANOS_TO_SECS, current_nanos, current_time_str

TCP_BUFFER_SIZE = 64 * 1024 * 1024

_RECV_CHUNK = 1 << 16
_TIMEVAL = struct.Struct("@ll")
_ANC_SIZE = socket.CMSG_SPACE(_TIMEVAL.size)


def _kernel_time(ancdata):
    if not ancdata:
        return 0
    level, kind, payload = ancdata[0]
    if level == socket.SOL_SOCKET and kind == SCM_TIMESTAMP and len(payload) == _TIMEVAL.size:
        seconds, micros = _TIMEVAL.unpack(payload)
        return seconds * NANOS_TO_SECS + micros * NANOS_TO_MICROS
    return 0


class TCPSocket:
    """One TCP endpoint that either listens for or carries a connection."""

    def __init__(self, logger):
        self.logger = logger
        self.socket = None
        self.outbound_data = bytearray()
        self.inbound_data = bytearray()
        self.recv_callback = None

    def connect(self, ip, iface, port, is_listening):
        """Create the socket to listen on or connect to ``ip``/``iface`` and ``port``."""
        cfg = SocketCfg(ip, iface, port, False, is_listening, True)
        self.socket = create_socket(self.logger, cfg)
        return self.socket

    def send_and_recv(self):
        """Read available data, dispatching the callback, then send buffered data."""
        room = TCP_BUFFER_SIZE - len(self.inbound_data)
        try:
            data, ancdata, _flags, _address = self.socket.recvmsg(min(room, _RECV_CHUNK), _ANC_SIZE)
        except OSError:
            data, ancdata = b"", []

        if data:
            self.inbound_data += data
            kernel_time = _kernel_time(ancdata)
            user_time = current_nanos()
            self.logger.log(
                "%() % read socket:% len:% utime:% ktime:% diff:%\n",
                "TCPSocket.send_and_recv",
                current_time_str(),
                self.socket.fileno(),
                len(self.inbound_data),
                user_time,
                kernel_time,
                user_time - kernel_time,
            )
            ensure(self.recv_callback is not None, "TCPSocket has no receive callback.")
            self.recv_callback(self, kernel_time)

        if self.outbound_data:
            try:
                sent = self.socket.send(self.outbound_data)
            except OSError:
                sent = -1
            self.logger.log(
                "%() % send socket:% len:%\n",
                "TCPSocket.send_and_recv",
                current_time_str(),
                self.socket.fileno(),
                sent,
            )
        self.outbound_data.clear()

        return bool(data)

    def send(self, data):
        """Append ``data`` to the send buffer without sending it yet."""
        ensure(
            len(self.outbound_data) + len(data) <= TCP_BUFFER_SIZE,
            "TCP socket buffer filled up and sendAndRecv() not called.",
        )
        self.outbound_data += data