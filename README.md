# matchbook

`matchbook` holds the building blocks of a small electronic exchange: the binary
messages that clients and the exchange exchange, the queues and logging that tie
components together, non-blocking TCP and UDP multicast sockets, an order gateway and
a market data publisher with a snapshot synthesizer.

## What is in the package

- `matchbook.types` – identifier sentinels (`ORDER_ID_INVALID`, `PRICE_INVALID`, …),
  `Side`, `AlgoType`, `RiskCfg`, `TradeEngineCfg` and the `*_to_string` helpers that
  print `INVALID` for a sentinel value.
- `matchbook.client_request`, `matchbook.client_response`, `matchbook.market_update` –
  dataclasses for the wire messages (`MEClientRequest`, `OMClientRequest`,
  `MEClientResponse`, `OMClientResponse`, `MEMarketUpdate`, `MDPMarketUpdate`), each with
  `to_bytes()` and `from_bytes()` for its packed little-endian layout.
- `matchbook.me_order` – `MEOrder` and `MEOrdersAtPrice`, the resting-order and
  price-level records with their ring links.
- `matchbook.lf_queue.LFQueue` – a bounded FIFO for one producer and one consumer
  (`push`, `peek`, `pop`, `len()`).
- `matchbook.mem_pool.MemPool` – a fixed-capacity pool that builds objects with a
  factory; it always keeps one slot free, so filling the last slot raises.
- `matchbook.logger.Logger` – queues values and writes them to a file from a
  background thread; `log(fmt, *args)` replaces each `%` with the next argument and
  `%%` with `%`. Use it as a context manager or call `close()`.
- `matchbook.errors` – `FatalError`, raised by `ensure()` and `fatal()` whenever an
  invariant is broken.
- `matchbook.thread_utils` – `create_and_start_thread()` starts a named daemon thread,
  optionally pinned to a core, and waits one second before returning.
- `matchbook.socket_utils`, `matchbook.tcp_socket`, `matchbook.tcp_server`,
  `matchbook.mcast_socket` – socket creation from a `SocketCfg`, buffered non-blocking
  TCP connections with kernel receive timestamps, a TCP server that accepts and polls
  clients, and a UDP multicast endpoint.
- `matchbook.fifo_sequencer.FIFOSequencer` – collects requests with their receive
  times and pushes them onto a queue oldest first.
- `matchbook.order_server.OrderServer` – accepts client TCP connections, checks each
  client's request sequence numbers, forwards requests to a request queue through the
  FIFO sequencer, and sends responses taken from a response queue back to the client
  with its own sequence numbers.
- `matchbook.market_data_publisher.MarketDataPublisher` – takes market updates from a
  queue, numbers them, sends them on the incremental multicast stream and feeds them
  to `matchbook.snapshot_synthesizer.SnapshotSynthesizer`, which keeps every live
  order and publishes a full snapshot at most once a minute.

## Installing

```
pip install .
```

Python 3.10 or later is required. The only dependency is `psutil`, used to look up an
interface's IPv4 address.

## Examples

Encoding and decoding a request:

```python
from matchbook.client_request import ClientRequestType, MEClientRequest, OMClientRequest
from matchbook.types import Side

request = OMClientRequest(1, MEClientRequest(
    type=ClientRequestType.NEW, client_id=1, ticker_id=0,
    order_id=10, side=Side.BUY, price=100, qty=50,
))
data = request.to_bytes()
assert OMClientRequest.from_bytes(data) == request
print(request)
```

Sequencing requests by receive time:

```python
from matchbook.fifo_sequencer import FIFOSequencer
from matchbook.lf_queue import LFQueue
from matchbook.logger import Logger

requests = LFQueue(1024)
with Logger("sequencer.log") as logger:
    sequencer = FIFOSequencer(requests, logger)
    sequencer.add_client_request(200, "second")
    sequencer.add_client_request(100, "first")
    sequencer.sequence_and_publish()

print(requests.pop(), requests.pop())  # first second
```

## What the package does not do

There is no order book or matching engine here, and no command that starts an
exchange. `OrderServer` places client requests on a queue and sends whatever
responses appear on another, and `MarketDataPublisher` sends whatever market updates
appear on its queue; producing those responses and updates from the requests is left
to the caller.

## Running the tests

```
pip install .[test]
pytest
```