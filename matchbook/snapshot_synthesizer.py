"""Keeps a full picture of every book from the incremental stream and publishes snapshots."""

import copy
import itertools
import threading
import time

from matchbook.errors import ensure
from matchbook.logger import Logger
from matchbook.market_update import MarketUpdateType, MDPMarketUpdate, MEMarketUpdate
from matchbook.mcast_socket import McastSocket
from matchbook.mem_pool import MemPool
from matchbook.thread_utils import create_and_start_thread
from matchbook.time_utils import NANOS_TO_SECS, current_nanos, current_time_str
from matchbook.types import ME_MAX_ORDER_IDS, ME_MAX_TICKERS

SNAPSHOT_INTERVAL_NANOS = 60 * NANOS_TO_SECS

_IDLE_SLEEP = 0.0001


class SnapshotSynthesizer:
    """Builds book snapshots from sequenced updates and publishes them periodically."""

    def __init__(self, market_updates, iface, snapshot_ip, snapshot_port):
        self._snapshot_md_updates = market_updates
        self._snapshot_ip = snapshot_ip
        self._snapshot_port = snapshot_port
        self._logger = Logger("exchange_snapshot_synthesizer.log")
        self._running = False
        self._thread = None
        self._snapshot_socket = McastSocket(self._logger)
        try:
            sock = self._snapshot_socket.init(snapshot_ip, iface, snapshot_port, False)
            ensure(sock is not None, "Unable to create snapshot mcast socket.")
        except Exception:
            self._logger.close()
            raise
        self._ticker_orders = [{} for _ in range(ME_MAX_TICKERS)]
        self._last_inc_seq_num = 0
        self._last_snapshot_time = 0
        self._order_pool = MemPool(ME_MAX_ORDER_IDS, copy.copy)

    def start(self):
        """Run the synthesizer loop on its own thread."""
        self._running = True
        self._thread = create_and_start_thread(-1, "Exchange/SnapshotSynthesizer", self.run)
        ensure(self._thread is not None, "Failed to start SnapshotSynthesizer thread.")

    def stop(self):
        """Ask the synthesizer loop to finish."""
        self._running = False

    def close(self):
        """Stop the loop, close the snapshot socket and the log."""
        self.stop()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join()
        self._thread = None
        self._snapshot_socket.leave(self._snapshot_ip, self._snapshot_port)
        self._logger.close()

    def add_to_snapshot(self, market_update):
        """Apply one sequenced incremental update to the book picture."""
        update = market_update.me_market_update
        ensure(0 <= update.ticker_id < ME_MAX_TICKERS, f"Received update for invalid ticker:{update.ticker_id}")
        orders = self._ticker_orders[update.ticker_id]

        if update.type in (MarketUpdateType.ADD, MarketUpdateType.MODIFY, MarketUpdateType.CANCEL):
            ensure(0 <= update.order_id < ME_MAX_ORDER_IDS, f"Received update for invalid order:{update.order_id}")
            order = orders.get(update.order_id)

            if update.type == MarketUpdateType.ADD:
                ensure(order is None, f"Received:{update} but order already exists:{order if order else ''}")
                orders[update.order_id] = self._order_pool.allocate(update)
            else:
                ensure(order is not None, f"Received:{update} but order does not exist.")
                ensure(order.order_id == update.order_id, "Expecting existing order to match new one.")
                ensure(order.side == update.side, "Expecting existing order to match new one.")
                if update.type == MarketUpdateType.MODIFY:
                    order.qty = update.qty
                    order.price = update.price
                else:
                    self._order_pool.deallocate(order)
                    del orders[update.order_id]

        ensure(market_update.seq_num == self._last_inc_seq_num + 1, "Expected incremental seq_nums to increase.")
        self._last_inc_seq_num = market_update.seq_num

    def _publish(self, market_update):
        self._logger.log("%() % %\n", "SnapshotSynthesizer.publish_snapshot", current_time_str(), market_update)
        self._snapshot_socket.send(market_update.to_bytes())

    def publish_snapshot(self):
        """Publish every live order, framed by start and end markers and per-ticker clears."""
        seq = itertools.count()

        self._publish(
            MDPMarketUpdate(next(seq), MEMarketUpdate(MarketUpdateType.SNAPSHOT_START, self._last_inc_seq_num))
        )

        for ticker_id, orders in enumerate(self._ticker_orders):
            self._publish(MDPMarketUpdate(next(seq), MEMarketUpdate(type=MarketUpdateType.CLEAR, ticker_id=ticker_id)))
            for _order_id, order in sorted(orders.items()):
                self._publish(MDPMarketUpdate(next(seq), copy.copy(order)))
                self._snapshot_socket.send_and_recv()

        self._publish(
            MDPMarketUpdate(next(seq), MEMarketUpdate(MarketUpdateType.SNAPSHOT_END, self._last_inc_seq_num))
        )
        self._snapshot_socket.send_and_recv()

        snapshot_size = next(seq)
        self._logger.log(
            "%() % Published snapshot of % orders.\n",
            "SnapshotSynthesizer.publish_snapshot",
            current_time_str(),
            snapshot_size - 1,
        )

    def run(self):
        """Consume updates and publish a snapshot at most once per interval until stopped."""
        self._logger.log("%() %\n", "SnapshotSynthesizer.run", current_time_str())
        while self._running:
            processed = False
            while (market_update := self._snapshot_md_updates.peek()) is not None:
                self._logger.log(
                    "%() % Processing %\n", "SnapshotSynthesizer.run", current_time_str(), market_update
                )
                self.add_to_snapshot(market_update)
                self._snapshot_md_updates.pop()
                processed = True

            if current_nanos() - self._last_snapshot_time > SNAPSHOT_INTERVAL_NANOS:
                self._last_snapshot_time = current_nanos()
                self.publish_snapshot()
            elif not processed:
                time.sleep(_IDLE_SLEEP)