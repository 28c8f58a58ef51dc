"""Client order requests sent to the exchange."""

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

_ME_LAYOUT = struct.Struct("<BIIQbqI")
_SEQ_LAYOUT = struct.Struct("<Q")


class ClientRequestType(IntEnum):
    INVALID = 0
    NEW = 1
    CANCEL = 2


def client_request_type_to_string(request_type):
    """Name of a client request type, or UNKNOWN for values outside the enumeration."""
    try:
        return ClientRequestType(request_type).name
    except ValueError:
        return "UNKNOWN"


def _check_size(cls, data):
    if len(data) != cls.SIZE:
        raise ValueError(f"{cls.__name__} needs {cls.SIZE} bytes, got {len(data)}")


@dataclass
class MEClientRequest:
    """A request as the matching engine consumes it."""

    SIZE: ClassVar[int] = _ME_LAYOUT.size

    type: ClientRequestType = ClientRequestType.INVALID
    client_id: int = CLIENT_ID_INVALID
    ticker_id: int = TICKER_ID_INVALID
    order_id: int = ORDER_ID_INVALID
    side: Side = Side.INVALID
    price: int = PRICE_INVALID
    qty: int = QTY_INVALID

    def __str__(self):
        return (
            "MEClientRequest ["
            f"type:{client_request_type_to_string(self.type)}"
            f" client:{client_id_to_string(self.client_id)}"
            f" ticker:{ticker_id_to_string(self.ticker_id)}"
            f" oid:{order_id_to_string(self.order_id)}"
            f" side:{side_to_string(self.side)}"
            f" qty:{qty_to_string(self.qty)}"
            f" price:{price_to_string(self.price)}"
            "]"
        )

    def to_bytes(self):
        """Packed little-endian wire form."""
        return _ME_LAYOUT.pack(
            int(self.type),
            self.client_id,
            self.ticker_id,
            self.order_id,
            int(self.side),
            self.price,
            self.qty,
        )

    @classmethod
    def from_bytes(cls, data):
        """Decode a request from exactly ``SIZE`` bytes."""
        _check_size(cls, data)
        kind, client_id, ticker_id, order_id, side, price, qty = _ME_LAYOUT.unpack(bytes(data))
        return cls(ClientRequestType(kind), client_id, ticker_id, order_id, Side(side), price, qty)


@dataclass
class OMClientRequest:
    """A request as sent over the order gateway, with the client's sequence number."""

    SIZE: ClassVar[int] = _SEQ_LAYOUT.size + _ME_LAYOUT.size

    seq_num: int = 0
    me_client_request: MEClientRequest = field(default_factory=MEClientRequest)

    def __str__(self):
        return f"OMClientRequest [seq:{self.seq_num} {self.me_client_request}]"

    def to_bytes(self):
        """Packed little-endian wire form: sequence number then request."""
        return _SEQ_LAYOUT.pack(self.seq_num) + self.me_client_request.to_bytes()

    @classmethod
    def from_bytes(cls, data):
        """Decode a sequenced request from exactly ``SIZE`` bytes."""
        _check_size(cls, data)
        data = bytes(data)
        (seq_num,) = _SEQ_LAYOUT.unpack(data[: _SEQ_LAYOUT.size])
        return cls(seq_num, MEClientRequest.from_bytes(data[_SEQ_LAYOUT.size :]))