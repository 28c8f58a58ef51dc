"""Publishes the matching engine's market updates on the incremental stream."""

import copy
import threading
import time

from matchbook.errors import ensure
from matchbook.lf_queue import LFQueue
from matchbook.logger import Logger
from matchbook.market_update import MDPMarketUpdate
from matchbook.mcast_socket import McastSocket
from matchbook.snapshot_synthesizer import SnapshotSynthesizer
from matchbook.thread_utils import create_and_start_thread
from matchbook.time_utils import current_time_str
from matchbook.types import ME_MAX_MARKET_UPDATES

_IDLE_SLEEP = 0.0001


class MarketDataPublisher:
    """Sequences market updates, sends them out and feeds the snapshot synthesizer."""

    def __init__(self, market_updates, iface, snapshot_ip, snapshot_port, incremental_ip, incremental_port):
        self._next_inc_seq_num = 1
        self._outgoing_md_updates = market_updates
        self._snapshot_md_updates = LFQueue(ME_MAX_MARKET_UPDATES)
        self._incremental_ip = incremental_ip
        self._incremental_port = incremental_port
        self._running = False
        self._thread = None
        self._logger = Logger("exchange_market_data_publisher.log")
        self._incremental_socket = McastSocket(self._logger)
        try:
            sock = self._incremental_socket.init(incremental_ip, iface, incremental_port, False)
            ensure(sock is not None, "Unable to create incremental mcast socket.")
            self._snapshot_synthesizer = SnapshotSynthesizer(
                self._snapshot_md_updates, iface, snapshot_ip, snapshot_port
            )
        except Exception:
            self._incremental_socket.leave(incremental_ip, incremental_port)
            self._logger.close()
            raise

    def start(self):
        """Run the publisher loop on its own thread and start the snapshot synthesizer."""
        self._running = True
        self._thread = create_and_start_thread(-1, "Exchange/MarketDataPublisher", self.run)
        ensure(self._thread is not None, "Failed to start MarketData thread.")
        self._snapshot_synthesizer.start()

    def stop(self):
        """Ask the publisher and the snapshot synthesizer to finish."""
        self._running = False
        self._snapshot_synthesizer.stop()

    def close(self):
        """Stop both loops and release their sockets and logs."""
        self.stop()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join()
        self._thread = None
        self._snapshot_synthesizer.close()
        self._incremental_socket.leave(self._incremental_ip, self._incremental_port)
        self._logger.close()

    def run(self):
        """Send each update with the next sequence number and hand it to the synthesizer."""
        self._logger.log("%() %\n", "MarketDataPublisher.run", current_time_str())
        while self._running:
            published = False
            while (market_update := self._outgoing_md_updates.peek()) is not None:
                self._logger.log(
                    "%() % Sending seq:% %\n",
                    "MarketDataPublisher.run",
                    current_time_str(),
                    self._next_inc_seq_num,
                    market_update,
                )
                self._incremental_socket.send(MDPMarketUpdate(self._next_inc_seq_num, market_update).to_bytes())
                self._outgoing_md_updates.pop()

                self._snapshot_md_updates.push(MDPMarketUpdate(self._next_inc_seq_num, copy.copy(market_update)))
                self._next_inc_seq_num += 1
                published = True

            if published:
                self._incremental_socket.send_and_recv()
            else:
                time.sleep(_IDLE_SLEEP)

        self._incremental_socket.send_and_recv()