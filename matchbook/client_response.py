"""Responses sent from the exchange back to clients."""

import struct
from dataclasses import dataclass, field
from enum import IntEnum
from typing import ClassVar

from matchbook.types import (
    CLIENT_ID_INVALID,
    ORDER_ID_INVALID,
    PRICE_INVALID,
    QTY_INVALID,
    TICKER_ID_INVALID,
    Side,
    client_id_to_string,
    order_id_to_string,
    price_to_string,
    qty_to_string,
    side_to_string,
    ticker_id_to_string,
)

_ME_LAYOUT = struct.Struct("<BIIQQbqII")
_SEQ_LAYOUT = struct.Struct("<Q")


class ClientResponseType(IntEnum):
    INVALID = 0
    ACCEPTED = 1
    CANCELED = 2
    FILLED = 3
    CANCEL_REJECTED = 4


def client_response_type_to_string(response_type):
    """Name of a client response type, or UNKNOWN for values outside the enumeration."""
    try:
        return ClientResponseType(response_type).name
    except ValueError:
        return "UNKNOWN"


def _check_size(cls, data):
    if len(data) != cls.SIZE:
        raise ValueError(f"{cls.__name__} needs {cls.SIZE} bytes, got {len(data)}")


@dataclass
class MEClientResponse:
    """A response as produced by the matching engine."""

    SIZE: ClassVar[int] = _ME_LAYOUT.size

    type: ClientResponseType = ClientResponseType.INVALID
    client_id: int = CLIENT_ID_INVALID
    ticker_id: int = TICKER_ID_INVALID
    client_order_id: int = ORDER_ID_INVALID
    market_order_id: int = ORDER_ID_INVALID
    side: Side = Side.INVALID
    price: int = PRICE_INVALID
    exec_qty: int = QTY_INVALID
    leaves_qty: int = QTY_INVALID

    def __str__(self):
        return (
            "MEClientResponse ["
            f"type:{client_response_type_to_string(self.type)}"
            f" client:{client_id_to_string(self.client_id)}"
            f" ticker:{ticker_id_to_string(self.ticker_id)}"
            f" coid:{order_id_to_string(self.client_order_id)}"
            f" moid:{order_id_to_string(self.market_order_id)}"
            f" side:{side_to_string(self.side)}"
            f" exec_qty:{qty_to_string(self.exec_qty)}"
            f" leaves_qty:{qty_to_string(self.leaves_qty)}"
            f" price:{price_to_string(self.price)}"
            "]"
        )

    def to_bytes(self):
        """Packed little-endian wire form."""
        return _ME_LAYOUT.pack(
            int(self.type),
            self.client_id,
            self.ticker_id,
            self.client_order_id,
            self.market_order_id,
            int(self.side),
            self.price,
            self.exec_qty,
            self.leaves_qty,
        )

    @classmethod
    def from_bytes(cls, data):
        """Decode a response from exactly ``SIZE`` bytes."""
        _check_size(cls, data)
        (kind, client_id, ticker_id, client_order_id, market_order_id,
         side, price, exec_qty, leaves_qty) = _ME_LAYOUT.unpack(bytes(data))
        return cls(
            ClientResponseType(kind),
            client_id,
            ticker_id,
            client_order_id,
            market_order_id,
            Side(side),
            price,
            exec_qty,
            leaves_qty,
        )


@dataclass
class OMClientResponse:
    """A response as sent over the order gateway, with a sequence number."""

    SIZE: ClassVar[int] = _SEQ_LAYOUT.size + _ME_LAYOUT.size

    seq_num: int = 0
    me_client_response: MEClientResponse = field(default_factory=MEClientResponse)

    def __str__(self):
        return f"OMClientResponse [seq:{self.seq_num} {self.me_client_response}]"

    def to_bytes(self):
        """Packed little-endian wire form: sequence number then response."""
        return _SEQ_LAYOUT.pack(self.seq_num) + self.me_client_response.to_bytes()

    @classmethod
    def from_bytes(cls, data):
        """Decode a sequenced response from exactly ``SIZE`` bytes."""
        _check_size(cls, data)
        data = bytes(data)
        (seq_num,) = _SEQ_LAYOUT.unpack(data[: _SEQ_LAYOUT.size])
        return cls(seq_num, MEClientResponse.from_bytes(data[_SEQ_LAYOUT.size :]))