import pytest

from matchbook.types import (
    CLIENT_ID_INVALID,
    ORDER_ID_INVALID,
    PRICE_INVALID,
    PRIORITY_INVALID,
    QTY_INVALID,
    TICKER_ID_INVALID,
    AlgoType,
    RiskCfg,
    Side,
    TradeEngineCfg,
    algo_type_to_string,
    client_id_to_string,
    order_id_to_string,
    price_to_string,
    priority_to_string,
    qty_to_string,
    side_to_index,
    side_to_string,
    side_to_value,
    string_to_algo_type,
    ticker_id_to_string,
)


@pytest.mark.parametrize(
    "func, invalid",
    [
        (order_id_to_string, ORDER_ID_INVALID),
        (ticker_id_to_string, TICKER_ID_INVALID),
        (client_id_to_string, CLIENT_ID_INVALID),
        (price_to_string, PRICE_INVALID),
        (qty_to_string, QTY_INVALID),
        (priority_to_string, PRIORITY_INVALID),
    ],
)
def test_invalid_sentinels_render_as_invalid(func, invalid):
    assert func(invalid) == "INVALID"
    assert func(42) == "42"


def test_sentinels_are_type_maxima():
    assert order_id_to_string(18446744073709551615) == "INVALID"
    assert order_id_to_string(18446744073709551614) == "18446744073709551614"
    assert price_to_string(9223372036854775807) == "INVALID"
    assert price_to_string(9223372036854775806) == "9223372036854775806"
    assert qty_to_string(4294967295) == "INVALID"
    assert qty_to_string(4294967294) == "4294967294"


def test_negative_price_rendered_plainly():
    assert price_to_string(-5) == "-5"


@pytest.mark.parametrize(
    "side, name",
    [(Side.BUY, "BUY"), (Side.SELL, "SELL"), (Side.INVALID, "INVALID"), (Side.MAX, "MAX")],
)
def test_side_to_string(side, name):
    assert side_to_string(side) == name


def test_side_to_string_unknown():
    assert side_to_string(7) == "UNKNOWN"


def test_side_indices_are_distinct_and_ordered():
    indices = [side_to_index(s) for s in (Side.SELL, Side.INVALID, Side.BUY)]
    assert indices == [0, 1, 2]


def test_side_values_are_opposite():
    assert side_to_value(Side.BUY) == -side_to_value(Side.SELL)
    assert side_to_value(Side.INVALID) == 0


@pytest.mark.parametrize("algo_type", list(AlgoType))
def test_algo_type_round_trip(algo_type):
    assert string_to_algo_type(algo_type_to_string(algo_type)) is algo_type


def test_algo_type_names():
    assert algo_type_to_string(AlgoType.MAKER) == "MAKER"
    assert algo_type_to_string(AlgoType.TAKER) == "TAKER"
    assert algo_type_to_string(99) == "UNKNOWN"


def test_unknown_string_is_invalid_algo():
    assert string_to_algo_type("not-an-algo") is AlgoType.INVALID


def test_risk_cfg_string():
    cfg = RiskCfg(max_order_size=10, max_position=20, max_loss=-100.0)
    assert str(cfg) == "RiskCfg{max-order-size:10 max-position:20 max-loss:-100}"


def test_risk_cfg_invalid_qty():
    cfg = RiskCfg(max_order_size=QTY_INVALID, max_position=3, max_loss=2.5)
    assert str(cfg) == "RiskCfg{max-order-size:INVALID max-position:3 max-loss:2.5}"


def test_trade_engine_cfg_string():
    cfg = TradeEngineCfg(clip=5, threshold=0.5, risk_cfg=RiskCfg(1, 2, 3.25))
    assert str(cfg) == (
        "TradeEngineCfg{clip:5 thresh:0.5 "
        "risk:RiskCfg{max-order-size:1 max-position:2 max-loss:3.25}}"
    )


def test_trade_engine_cfg_defaults_are_independent():
    first = TradeEngineCfg()
    second = TradeEngineCfg()
    first.risk_cfg.max_position = 9
    assert second.risk_cfg.max_position == RiskCfg().max_position