"""Market data updates published by the matching engine."""

import struct
from dataclasses import dataclass, field
from enum import IntEnum
from typing import ClassVar

from matchbook.types import (
    ORDER_ID_INVALID,
    PRICE_INVALID,
    PRIORITY_INVALID,
    QTY_INVALID,
    TICKER_ID_INVALID,
    Side,
    order_id_to_string,
    price_to_string,
    priority_to_string,
    qty_to_string,
    side_to_string,
    ticker_id_to_string,
)

_ME_LAYOUT = struct.Struct("<BQIbqIQ")
_SEQ_LAYOUT = struct.Struct("<Q")


class MarketUpdateType(IntEnum):
    INVALID = 0
    CLEAR = 1
    ADD = 2
    MODIFY = 3
    CANCEL = 4
    TRADE = 5
    SNAPSHOT_START = 6
    SNAPSHOT_END = 7


def market_update_type_to_string(update_type):
    """Name of a market update type, or UNKNOWN for values outside the enumeration."""
    try:
        return MarketUpdateType(update_type).name
    except ValueError:
        return "UNKNOWN"


def _check_size(cls, data):
    if len(data) != cls.SIZE:
        raise ValueError(f"{cls.__name__} needs {cls.SIZE} bytes, got {len(data)}")


@dataclass
class MEMarketUpdate:
    """One market update as produced by the matching engine."""

    SIZE: ClassVar[int] = _ME_LAYOUT.size

    type: MarketUpdateType = MarketUpdateType.INVALID
    order_id: int = ORDER_ID_INVALID
    ticker_id: int = TICKER_ID_INVALID
    side: Side = Side.INVALID
    price: int = PRICE_INVALID
    qty: int = QTY_INVALID
    priority: int = PRIORITY_INVALID

    def __str__(self):
        return (
            "MEMarketUpdate ["
            f" type:{market_update_type_to_string(self.type)}"
            f" ticker:{ticker_id_to_string(self.ticker_id)}"
            f" oid:{order_id_to_string(self.order_id)}"
            f" side:{side_to_string(self.side)}"
            f" qty:{qty_to_string(self.qty)}"
            f" price:{price_to_string(self.price)}"
            f" priority:{priority_to_string(self.priority)}"
            "]"
        )

    def to_bytes(self):
        """Packed little-endian wire form."""
        return _ME_LAYOUT.pack(
            int(self.type),
            self.order_id,
            self.ticker_id,
            int(self.side),
            self.price,
            self.qty,
            self.priority,
        )

    @classmethod
    def from_bytes(cls, data):
        """Decode an update from exactly ``SIZE`` bytes."""
        _check_size(cls, data)
        kind, order_id, ticker_id, side, price, qty, priority = _ME_LAYOUT.unpack(bytes(data))
        return cls(MarketUpdateType(kind), order_id, ticker_id, Side(side), price, qty, priority)


@dataclass
class MDPMarketUpdate:
    """A market update carrying the publisher's sequence number."""

    SIZE: ClassVar[int] = _SEQ_LAYOUT.size + _ME_LAYOUT.size

    seq_num: int = 0
    me_market_update: MEMarketUpdate = field(default_factory=MEMarketUpdate)

    def __str__(self):
        return f"MDPMarketUpdate [ seq:{self.seq_num} {self.me_market_update}]"

    def to_bytes(self):
        """Packed little-endian wire form: sequence number then update."""
        return _SEQ_LAYOUT.pack(self.seq_num) + self.me_market_update.to_bytes()

    @classmethod
    def from_bytes(cls, data):
        """Decode a sequenced update from exactly ``SIZE`` bytes."""
        _check_size(cls, data)
        data = bytes(data)
        (seq_num,) = _SEQ_LAYOUT.unpack(data[: _SEQ_LAYOUT.size])
        return cls(seq_num, MEMarketUpdate.from_bytes(data[_SEQ_LAYOUT.size :]))