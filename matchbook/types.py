"""Identifiers, sides, algorithm types and trading configuration."""

from dataclasses import dataclass, field
from enum import IntEnum

ME_MAX_TICKERS = 8

ME_MAX_CLIENT_UPDATES = 256 * 1024
ME_MAX_MARKET_UPDATES = 256 * 1024

ME_MAX_NUM_CLIENTS = 256
ME_MAX_ORDER_IDS = 1024 * 1024
ME_MAX_PRICE_LEVELS = 256

ORDER_ID_INVALID = 2**64 - 1
TICKER_ID_INVALID = 2**32 - 1
CLIENT_ID_INVALID = 2**32 - 1
PRICE_INVALID = 2**63 - 1
QTY_INVALID = 2**32 - 1
PRIORITY_INVALID = 2**64 - 1


def _to_string(value, invalid):
    return "INVALID" if value == invalid else str(value)


def order_id_to_string(order_id):
    """Render an order id, or INVALID for the sentinel."""
    return _to_string(order_id, ORDER_ID_INVALID)


def ticker_id_to_string(ticker_id):
    """Render a ticker id, or INVALID for the sentinel."""
    return _to_string(ticker_id, TICKER_ID_INVALID)


def client_id_to_string(client_id):
    """Render a client id, or INVALID for the sentinel."""
    return _to_string(client_id, CLIENT_ID_INVALID)


def price_to_string(price):
    """Render a price, or INVALID for the sentinel."""
    return _to_string(price, PRICE_INVALID)


def qty_to_string(qty):
    """Render a quantity, or INVALID for the sentinel."""
    return _to_string(qty, QTY_INVALID)


def priority_to_string(priority):
    """Render a priority, or INVALID for the sentinel."""
    return _to_string(priority, PRIORITY_INVALID)


class Side(IntEnum):
    INVALID = 0
    BUY = 1
    SELL = -1
    MAX = 2


def side_to_string(side):
    """Name of a side, or UNKNOWN for values outside the enumeration."""
    try:
        return Side(side).name
    except ValueError:
        return "UNKNOWN"


def side_to_index(side):
    """Index of a side into a per-side array: SELL=0, INVALID=1, BUY=2."""
    return int(side) + 1


def side_to_value(side):
    """Signed value of a side: +1 for BUY, -1 for SELL."""
    return int(side)


class AlgoType(IntEnum):
    INVALID = 0
    RANDOM = 1
    MAKER = 2
    TAKER = 3
    MAX = 4


def algo_type_to_string(algo_type):
    """Name of an algorithm type, or UNKNOWN for values outside the enumeration."""
    try:
        return AlgoType(algo_type).name
    except ValueError:
        return "UNKNOWN"


def string_to_algo_type(text):
    """Algorithm type with the given name, or AlgoType.INVALID if none matches."""
    for algo_type in AlgoType:
        if algo_type_to_string(algo_type) == text:
            return algo_type
    return AlgoType.INVALID


@dataclass
class RiskCfg:
    max_order_size: int = 0
    max_position: int = 0
    max_loss: float = 0.0

    def __str__(self):
        return (
            "RiskCfg{"
            f"max-order-size:{qty_to_string(self.max_order_size)} "
            f"max-position:{qty_to_string(self.max_position)} "
            f"max-loss:{'%g' % self.max_loss}"
            "}"
        )


@dataclass
class TradeEngineCfg:
    clip: int = 0
    threshold: float = 0.0
    risk_cfg: RiskCfg = field(default_factory=RiskCfg)

    def __str__(self):
        return (
            "TradeEngineCfg{"
            f"clip:{qty_to_string(self.clip)} "
            f"thresh:{'%g' % self.threshold} "
            f"risk:{self.risk_cfg}"
            "}"
        )