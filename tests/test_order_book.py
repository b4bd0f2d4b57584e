import pytest

from dawak.application.order_book import OrderBook
from dawak.application.session import PharmacySession
from dawak.domain.cart import Cart
from dawak.domain.errors import EmptyCartError
from dawak.domain.models import ItemDraft, OrderStatus
from dawak.infrastructure.order_store import RedisOrderStore
from fakes import BrokenRedis, ConstantRandom, FakeClock


def test_submit_panadol_order(session, store):
    session.cart.add_item(ItemDraft(drug_name="Panadol Extra", quantity=2))
    assert len(session.cart) == 1

    order = session.order_book.submit_order(session.cart)

    assert session.orders == [order]
    assert order.status == OrderStatus.PENDING
    assert [(i.drug_name, i.quantity) for i in order.items] == [("Panadol Extra", 2)]
    assert order.order_id == "ORD-123456"
    assert session.cart.is_empty()
    # Written through
    assert store.load() == session.orders


def test_submit_empty_cart(session, fake_redis):
    with pytest.raises(EmptyCartError):
        session.order_book.submit_order(session.cart)

    assert session.orders == []
    assert fake_redis.writes == 0


def test_new_orders_go_first(session, clock):
    for name in ("Panadol", "Zyrtec"):
        session.cart.add_item(ItemDraft(drug_name=name))
        session.order_book.submit_order(session.cart)
        clock.advance(1000)

    assert [o.items[0].drug_name for o in session.orders] == ["Zyrtec", "Panadol"]


def test_order_ids_unique_with_frozen_clock(session):
    for _ in range(4):
        session.cart.add_item(ItemDraft(drug_name="Panadol"))
        session.order_book.submit_order(session.cart)

    ids = [o.order_id for o in session.orders]
    assert len(set(ids)) == 4


def test_cart_changes_do_not_touch_the_store(session, fake_redis):
    item = session.cart.add_item(ItemDraft(drug_name="Panadol"))
    session.cart.remove_item(item.id)
    assert fake_redis.writes == 0


def test_commit_without_change_notifies_nobody():
    book = OrderBook(clock=FakeClock())
    calls = []
    book.subscribe(calls.append)

    cart = Cart(clock=FakeClock())
    cart.add_item(ItemDraft(drug_name="Panadol"))
    book.submit_order(cart)
    assert len(calls) == 1

    assert book.commit(book.orders) is False
    assert len(calls) == 1


def test_session_resumes_stored_orders(session, store, clock):
    session.cart.add_item(ItemDraft(drug_name="Panadol"))
    order = session.order_book.submit_order(session.cart)

    reloaded = PharmacySession(store, clock=clock, rng=ConstantRandom(1.0))
    assert reloaded.orders == [order]
    assert reloaded.order_book.get(order.order_id) == order


def test_write_failure_keeps_order_in_memory(clock):
    store = RedisOrderStore(client=BrokenRedis())
    session = PharmacySession(store, clock=clock, rng=ConstantRandom(1.0))
    session.drain_warnings()

    session.cart.add_item(ItemDraft(drug_name="Panadol"))
    order = session.order_book.submit_order(session.cart)

    assert session.orders == [order]
    warnings = session.drain_warnings()
    assert len(warnings) == 1
    assert "connection refused" in warnings[0]
    assert session.drain_warnings() == []


def test_read_failure_is_reported(clock):
    store = RedisOrderStore(client=BrokenRedis())
    session = PharmacySession(store, clock=clock, rng=ConstantRandom(1.0))

    assert store.mode == "memory"
    assert session.orders == []
    warnings = session.drain_warnings()
    assert len(warnings) == 1
    assert "connection refused" in warnings[0]


def test_healthy_store_starts_without_warnings(session):
    assert session.drain_warnings() == []
