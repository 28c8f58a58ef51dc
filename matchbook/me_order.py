"""Orders resting in the book and the price levels that hold them."""

from dataclasses import dataclass
from typing import Optional

from matchbook.types import (
    CLIENT_ID_INVALID,
    ORDER_ID_INVALID,
    PRICE_INVALID,
    PRIORITY_INVALID,
    QTY_INVALID,
    TICKER_ID_INVALID,
    Side,
    client_id_to_string,
    order_id_to_string,
    price_to_string,
    priority_to_string,
    qty_to_string,
    side_to_string,
    ticker_id_to_string,
)


@dataclass(eq=False, repr=False)
class MEOrder:
    """A resting order, linked to its neighbours at the same price in a ring."""

    ticker_id: int = TICKER_ID_INVALID
    client_id: int = CLIENT_ID_INVALID
    client_order_id: int = ORDER_ID_INVALID
    market_order_id: int = ORDER_ID_INVALID
    side: Side = Side.INVALID
    price: int = PRICE_INVALID
    qty: int = QTY_INVALID
    priority: int = PRIORITY_INVALID
    prev_order: Optional["MEOrder"] = None
    next_order: Optional["MEOrder"] = None

    def __str__(self):
        prev_id = self.prev_order.market_order_id if self.prev_order else ORDER_ID_INVALID
        next_id = self.next_order.market_order_id if self.next_order else ORDER_ID_INVALID
        return (
            "MEOrder["
            f"ticker:{ticker_id_to_string(self.ticker_id)} "
            f"cid:{client_id_to_string(self.client_id)} "
            f"oid:{order_id_to_string(self.client_order_id)} "
            f"moid:{order_id_to_string(self.market_order_id)} "
            f"side:{side_to_string(self.side)} "
            f"price:{price_to_string(self.price)} "
            f"qty:{qty_to_string(self.qty)} "
            f"prio:{priority_to_string(self.priority)} "
            f"prev:{order_id_to_string(prev_id)} "
            f"next:{order_id_to_string(next_id)}]"
        )

    __repr__ = __str__


@dataclass(eq=False, repr=False)
class MEOrdersAtPrice:
    """A price level: the ring of orders at one price, linked to neighbouring levels."""

    side: Side = Side.INVALID
    price: int = PRICE_INVALID
    first_me_order: Optional[MEOrder] = None
    prev_entry: Optional["MEOrdersAtPrice"] = None
    next_entry: Optional["MEOrdersAtPrice"] = None

    def __str__(self):
        first = str(self.first_me_order) if self.first_me_order else "null"
        prev_price = self.prev_entry.price if self.prev_entry else PRICE_INVALID
        next_price = self.next_entry.price if self.next_entry else PRICE_INVALID
        return (
            "MEOrdersAtPrice["
            f"side:{side_to_string(self.side)} "
            f"price:{price_to_string(self.price)} "
            f"first_me_order:{first} "
            f"prev:{price_to_string(prev_price)} "
            f"next:{price_to_string(next_price)}]"
        )

    __repr__ = __str__