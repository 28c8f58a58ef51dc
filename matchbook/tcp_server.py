"""TCP server that accepts clients and multiplexes their non-blocking sockets."""

import selectors

from matchbook.errors import FatalError, ensure
from matchbook.socket_utils import disable_nagle, set_non_blocking
from matchbook.tcp_socket import TCPSocket
from matchbook.time_utils import current_time_str


class TCPServer:
    """Listens on one interface and port and tracks the connected clients."""

    def __init__(self, logger):
        self.logger = logger
        self.listener_socket = TCPSocket(logger)
        self.receive_sockets = []
        self.send_sockets = []
        self.recv_callback = None
        self.recv_finished_callback = None
        self._selector = None

    def _log(self, fmt, *args):
        self.logger.log("%() % " + fmt, "TCPServer.poll", current_time_str(), *args)

    def _watch(self, tcp_socket):
        try:
            self._selector.register(tcp_socket.socket, selectors.EVENT_READ, tcp_socket)
        except (OSError, ValueError, KeyError) as exc:
            raise FatalError(f"Unable to add socket. error:{exc}") from exc

    def listen(self, iface, port):
        """Start listening for connections on ``iface`` and ``port``."""
        self._selector = selectors.DefaultSelector()
        self.listener_socket.connect("", iface, port, True)
        self._watch(self.listener_socket)

    def send_and_recv(self):
        """Read from receiving sockets, report completion, then flush sending sockets."""
        received = False
        for tcp_socket in self.receive_sockets:
            received |= tcp_socket.send_and_recv()

        if received:
            ensure(self.recv_finished_callback is not None, "TCPServer has no receive-finished callback.")
            self.recv_finished_callback()

        for tcp_socket in self.send_sockets:
            tcp_socket.send_and_recv()

    def poll(self):
        """Accept new connections and record sockets that are readable or writable."""
        ensure(self._selector is not None, "poll() called before listen().")
        max_events = 1 + len(self.send_sockets) + len(self.receive_sockets)
        ready = self._selector.select(timeout=0)[:max_events]

        have_new_connection = False
        for key, mask in ready:
            tcp_socket = key.data
            fd = tcp_socket.socket.fileno()
            if mask & selectors.EVENT_READ:
                if tcp_socket is self.listener_socket:
                    self._log("EPOLLIN listener_socket:%\n", fd)
                    have_new_connection = True
                    continue
                self._log("EPOLLIN socket:%\n", fd)
                if tcp_socket not in self.receive_sockets:
                    self.receive_sockets.append(tcp_socket)
            if mask & selectors.EVENT_WRITE:
                self._log("EPOLLOUT socket:%\n", fd)
                if tcp_socket not in self.send_sockets:
                    self.send_sockets.append(tcp_socket)

        while have_new_connection:
            self._log("have_new_connection\n")
            try:
                conn, _address = self.listener_socket.socket.accept()
            except OSError:
                break

            ensure(
                set_non_blocking(conn) and disable_nagle(conn),
                f"Failed to set non-blocking or no-delay on socket:{conn.fileno()}",
            )
            self._log("accepted socket:%\n", conn.fileno())

            tcp_socket = TCPSocket(self.logger)
            tcp_socket.socket = conn
            tcp_socket.recv_callback = self.recv_callback
            self._watch(tcp_socket)

            if tcp_socket not in self.receive_sockets:
                self.receive_sockets.append(tcp_socket)