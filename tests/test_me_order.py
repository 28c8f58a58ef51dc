from matchbook.me_order import MEOrder, MEOrdersAtPrice
from matchbook.types import ORDER_ID_INVALID, Side


def test_default_order_string():
    assert str(MEOrder()) == (
        "MEOrder[ticker:INVALID cid:INVALID oid:INVALID moid:INVALID side:INVALID"
        " price:INVALID qty:INVALID prio:INVALID prev:INVALID next:INVALID]"
    )


def test_order_string_with_values():
    order = MEOrder(1, 2, 3, 4, Side.BUY, 100, 50, 1)
    assert str(order) == (
        "MEOrder[ticker:1 cid:2 oid:3 moid:4 side:BUY price:100 qty:50 prio:1"
        " prev:INVALID next:INVALID]"
    )


def test_order_string_shows_neighbour_market_ids():
    a = MEOrder(0, 0, 1, 10, Side.SELL, 5, 1, 1)
    b = MEOrder(0, 0, 2, 20, Side.SELL, 5, 1, 2)
    a.prev_order = a.next_order = b
    b.prev_order = b.next_order = a
    assert str(a).endswith("prev:20 next:20]")
    assert str(b).endswith("prev:10 next:10]")


def test_self_linked_repr_terminates():
    order = MEOrder(market_order_id=7)
    order.prev_order = order.next_order = order
    assert repr(order) == str(order)
    assert "prev:7 next:7" in repr(order)


def test_orders_are_compared_by_identity():
    a = MEOrder(market_order_id=ORDER_ID_INVALID)
    b = MEOrder(market_order_id=ORDER_ID_INVALID)
    assert (a == b) is False
    assert a == a


def test_default_level_string():
    assert str(MEOrdersAtPrice()) == (
        "MEOrdersAtPrice[side:INVALID price:INVALID first_me_order:null"
        " prev:INVALID next:INVALID]"
    )


def test_level_string_shows_first_order_and_neighbour_prices():
    order = MEOrder(0, 1, 2, 3, Side.BUY, 100, 10, 1)
    level = MEOrdersAtPrice(Side.BUY, 100, order)
    lower = MEOrdersAtPrice(Side.BUY, 99)
    level.prev_entry = level.next_entry = lower
    text = str(level)
    assert text.startswith("MEOrdersAtPrice[side:BUY price:100 first_me_order:MEOrder[")
    assert f"first_me_order:{order} " in text
    assert text.endswith("prev:99 next:99]")