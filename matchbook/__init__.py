"""Building blocks of an electronic exchange: wire messages, queues, logging, sockets, order gateway and market data publishing."""

__version__ = "0.1.0"