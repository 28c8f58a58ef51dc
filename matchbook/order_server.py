"""Order gateway: accepts client connections and relays requests and responses."""

import threading
import time

from matchbook.client_request import OMClientRequest
from matchbook.client_response import OMClientResponse
from matchbook.errors import ensure
from matchbook.fifo_sequencer import FIFOSequencer
from matchbook.logger import Logger
from matchbook.tcp_server import TCPServer
from matchbook.thread_utils import create_and_start_thread
from matchbook.time_utils import current_time_str
from matchbook.types import ME_MAX_NUM_CLIENTS

_IDLE_SLEEP = 0.0001


def _fd(tcp_socket):
    return tcp_socket.socket.fileno() if tcp_socket.socket is not None else -1


class OrderServer:
    """Receives sequenced client requests over TCP and sends back client responses."""

    def __init__(self, client_requests, client_responses, iface, port):
        self.iface = iface
        self.port = port
        self._outgoing_responses = client_responses
        self._running = False
        self._thread = None
        self._logger = Logger("exchange_order_server.log")

        # Per client id: next sequence number to send, next one expected, and its connection.
        self._cid_next_outgoing_seq_num = [1] * ME_MAX_NUM_CLIENTS
        self._cid_next_exp_seq_num = [1] * ME_MAX_NUM_CLIENTS
        self._cid_tcp_socket = [None] * ME_MAX_NUM_CLIENTS

        self._tcp_server = TCPServer(self._logger)
        self._fifo_sequencer = FIFOSequencer(client_requests, self._logger)

        self._tcp_server.recv_callback = self.recv_callback
        self._tcp_server.recv_finished_callback = self.recv_finished_callback

    def start(self):
        """Listen for clients and run the server loop on its own thread."""
        self._running = True
        self._tcp_server.listen(self.iface, self.port)
        self._thread = create_and_start_thread(-1, "Exchange/OrderServer", self.run)
        ensure(self._thread is not None, "Failed to start OrderServer thread.")

    def stop(self):
        """Ask the server loop to finish."""
        self._running = False

    def close(self):
        """Stop the loop, close every connection and the log."""
        self.stop()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join()
        self._thread = None
        for tcp_socket in {*self._tcp_server.receive_sockets, *self._tcp_server.send_sockets,
                           self._tcp_server.listener_socket}:
            if tcp_socket.socket is not None:
                tcp_socket.socket.close()
                tcp_socket.socket = None
        self._logger.close()

    def run(self):
        """Accept clients, exchange data with them and send responses until stopped."""
        self._logger.log("%() %\n", "OrderServer.run", current_time_str())
        while self._running:
            self._tcp_server.poll()
            self._tcp_server.send_and_recv()
            if not self._send_responses():
                time.sleep(_IDLE_SLEEP)

    def _send_responses(self):
        """Buffer every queued response on its client's connection; return whether any was sent."""
        sent = False
        while (response := self._outgoing_responses.peek()) is not None:
            client_id = response.client_id
            ensure(0 <= client_id < ME_MAX_NUM_CLIENTS, f"Response for invalid ClientId:{client_id}")
            seq_num = self._cid_next_outgoing_seq_num[client_id]

            self._logger.log(
                "%() % Processing cid:% seq:% %\n",
                "OrderServer.run",
                current_time_str(),
                client_id,
                seq_num,
                response,
            )

            tcp_socket = self._cid_tcp_socket[client_id]
            ensure(tcp_socket is not None, f"Dont have a TCPSocket for ClientId:{client_id}")
            tcp_socket.send(OMClientResponse(seq_num, response).to_bytes())

            self._outgoing_responses.pop()
            self._cid_next_outgoing_seq_num[client_id] = seq_num + 1
            sent = True
        return sent

    def recv_callback(self, socket, rx_time):
        """Decode complete requests from ``socket``, check sequencing and hand them to the sequencer."""
        data = socket.inbound_data
        self._logger.log(
            "%() % Received socket:% len:% rx:%\n",
            "OrderServer.recv_callback",
            current_time_str(),
            _fd(socket),
            len(data),
            rx_time,
        )

        size = OMClientRequest.SIZE
        consumed = 0
        while consumed + size <= len(data):
            request = OMClientRequest.from_bytes(data[consumed:consumed + size])
            consumed += size
            self._logger.log("%() % Received %\n", "OrderServer.recv_callback", current_time_str(), request)

            client_id = request.me_client_request.client_id
            ensure(0 <= client_id < ME_MAX_NUM_CLIENTS, f"Request from invalid ClientId:{client_id}")

            if self._cid_tcp_socket[client_id] is None:
                self._cid_tcp_socket[client_id] = socket

            expected_socket = self._cid_tcp_socket[client_id]
            if expected_socket is not socket:
                self._logger.log(
                    "%() % Received ClientRequest from ClientId:% on different socket:% expected:%\n",
                    "OrderServer.recv_callback",
                    current_time_str(),
                    client_id,
                    _fd(socket),
                    _fd(expected_socket),
                )
                continue

            expected_seq = self._cid_next_exp_seq_num[client_id]
            if request.seq_num != expected_seq:
                self._logger.log(
                    "%() % Incorrect sequence number. ClientId:% SeqNum expected:% received:%\n",
                    "OrderServer.recv_callback",
                    current_time_str(),
                    client_id,
                    expected_seq,
                    request.seq_num,
                )
                continue

            self._cid_next_exp_seq_num[client_id] = expected_seq + 1
            self._fifo_sequencer.add_client_request(rx_time, request.me_client_request)

        del data[:consumed]

    def recv_finished_callback(self):
        """Publish this round's requests to the matching engine in receive-time order."""
        self._fifo_sequencer.sequence_and_publish()