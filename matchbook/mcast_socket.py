"""UDP socket that buffers outgoing data and reads incoming data without blocking."""

from matchbook.errors import ensure
from matchbook.socket_utils import SocketCfg, create_socket, join as join_group
from matchbook.time_utils import current_time_str

MCAST_BUFFER_SIZE = 64 * 1024 * 1024

_RECV_CHUNK = 1 << 16


class McastSocket:
    """Publisher or subscriber endpoint of a multicast stream."""

    def __init__(self, logger):
        self.logger = logger
        self.socket = None
        self.outbound_data = bytearray()
        self.inbound_data = bytearray()
        self.recv_callback = None

    def init(self, ip, iface, port, is_listening):
        """Create the socket to publish to or read from a stream; does not join it."""
        cfg = SocketCfg(ip, iface, port, True, is_listening, False)
        self.socket = create_socket(self.logger, cfg)
        return self.socket

    def join(self, ip):
        """Subscribe to the multicast group ``ip``; return whether it succeeded."""
        return join_group(self.socket, ip)

    def leave(self, ip, port):
        """Leave the stream by closing the socket."""
        if self.socket is not None:
            self.socket.close()
        self.socket = None

    def send_and_recv(self):
        """Read available data, dispatching the callback, then publish buffered data."""
        room = MCAST_BUFFER_SIZE - len(self.inbound_data)
        try:
            data = self.socket.recv(min(room, _RECV_CHUNK))
        except OSError:
            data = b""

        if data:
            self.inbound_data += data
            self.logger.log(
                "%() % read socket:% len:%\n",
                "McastSocket.send_and_recv",
                current_time_str(),
                self.socket.fileno(),
                len(self.inbound_data),
            )
            ensure(self.recv_callback is not None, "McastSocket has no receive callback.")
            self.recv_callback(self)

        if self.outbound_data:
            try:
                sent = self.socket.send(self.outbound_data)
            except OSError:
                sent = -1
            self.logger.log(
                "%() % send socket:% len:%\n",
                "McastSocket.send_and_recv",
                current_time_str(),
                self.socket.fileno(),
                sent,
            )
        self.outbound_data.clear()

        return bool(data)

    def send(self, data):
        """Append ``data`` to the send buffer without sending it yet."""
        self.outbound_data += data
        ensure(
            len(self.outbound_data) < MCAST_BUFFER_SIZE,
            "Mcast socket buffer filled up and sendAndRecv() not called.",
        )