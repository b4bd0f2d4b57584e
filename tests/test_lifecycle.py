import pytest

from dawak.domain.errors import EmptyCartError
from dawak.domain.lifecycle import (
    advance,
    can_transition,
    generate_order_id,
    next_status,
    seal_order,
)
from dawak.domain.models import LineItem, Order, OrderStatus


def _order(status=OrderStatus.PENDING, order_id="ORD-000001"):
    return Order(
        order_id=order_id,
        created_at=1_700_000_000_000,
        status=status,
        items=(LineItem(id=1, drug_name="Panadol", quantity=1),),
    )


def test_status_sequence():
    assert next_status(OrderStatus.PENDING) == OrderStatus.ACCEPTED
    assert next_status(OrderStatus.ACCEPTED) == OrderStatus.ON_DELIVERY
    assert next_status(OrderStatus.ON_DELIVERY) == OrderStatus.DELIVERED
    assert next_status(OrderStatus.DELIVERED) is None


def test_no_skips_or_reversals():
    assert can_transition(from_status=OrderStatus.PENDING, to_status=OrderStatus.ACCEPTED)
    assert not can_transition(from_status=OrderStatus.PENDING, to_status=OrderStatus.ON_DELIVERY)
    assert not can_transition(from_status=OrderStatus.ACCEPTED, to_status=OrderStatus.PENDING)
    assert not can_transition(from_status=OrderStatus.DELIVERED, to_status=OrderStatus.PENDING)


@pytest.mark.parametrize(
    "status, roll, expected",
    [
        (OrderStatus.PENDING, 0.29, OrderStatus.ACCEPTED),
        (OrderStatus.PENDING, 0.30, OrderStatus.PENDING),
        (OrderStatus.ACCEPTED, 0.0, OrderStatus.ON_DELIVERY),
        (OrderStatus.ACCEPTED, 0.95, OrderStatus.ACCEPTED),
        (OrderStatus.ON_DELIVERY, 0.19, OrderStatus.DELIVERED),
        (OrderStatus.ON_DELIVERY, 0.25, OrderStatus.ON_DELIVERY),
    ],
)
def test_advance_uses_per_status_probability(status, roll, expected):
    assert advance(_order(status), roll).status == expected


def test_advance_keeps_everything_but_status():
    before = _order()
    after = advance(before, 0.0)
    assert after.order_id == before.order_id
    assert after.created_at == before.created_at
    assert after.items == before.items


def test_advance_returns_same_object_when_nothing_happens():
    order = _order()
    assert advance(order, 0.99) is order


def test_delivered_is_terminal():
    delivered = _order(OrderStatus.DELIVERED)
    assert advance(delivered, 0.0) is delivered


def test_custom_probabilities():
    always = {OrderStatus.PENDING: 1.0}
    assert advance(_order(), 0.999, always).status == OrderStatus.ACCEPTED
    # Missing status means it never moves
    assert advance(_order(OrderStatus.ACCEPTED), 0.0, always).status == OrderStatus.ACCEPTED


def test_order_id_uses_last_digits_of_clock():
    assert generate_order_id(1_700_000_123_456) == "ORD-123456"
    assert generate_order_id(1_700_000_000_042) == "ORD-000042"
    assert generate_order_id(987, prefix="RX-", digits=4) == "RX-0987"


def test_order_id_skips_taken_ids():
    taken = {"ORD-123456", "ORD-123457"}
    assert generate_order_id(1_700_000_123_456, taken) == "ORD-123458"
    assert generate_order_id(999_999, {"ORD-999999"}) == "ORD-000000"


def test_seal_order_snapshots_items_without_images():
    items = [
        LineItem(id=2, drug_name="Ventolin", quantity=1, image_ref="blob:x"),
        LineItem(id=1, drug_name="Panadol", quantity=2, notes="extra"),
    ]
    order = seal_order(items, "ORD-000001", 1_700_000_000_000)

    assert order.status == OrderStatus.PENDING
    assert [i.drug_name for i in order.items] == ["Ventolin", "Panadol"]
    assert all(i.image_ref is None for i in order.items)
    assert order.items[1].notes == "extra"


def test_seal_order_rejects_empty_cart():
    with pytest.raises(EmptyCartError):
        seal_order([], "ORD-000001", 0)
