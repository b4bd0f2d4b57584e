import pytest

from dawak.application.session import PharmacySession
from dawak.infrastructure.order_store import RedisOrderStore
from fakes import ConstantRandom, FakeClock, FakeRedis


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def store(fake_redis):
    return RedisOrderStore(client=fake_redis, orders_key="dawak_orders")


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def session(store, clock):
    # Rolls of 1.0 never advance anything unless a test swaps the rng.
    return PharmacySession(store, clock=clock, rng=ConstantRandom(1.0))
