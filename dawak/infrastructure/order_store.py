import json
import logging
from typing import List, Optional

import pydantic
import redis
from redis.exceptions import RedisError

from dawak.core.config import settings
from dawak.domain.errors import PersistenceError
from dawak.domain.models import Order, OrderStatus
from dawak.interfaces.IOrderStore import IOrderStore

logger = logging.getLogger(__name__)


def parse_orders(raw: Optional[str]) -> List[Order]:
    """Decode a stored snapshot. Anything unreadable degrades to no history."""
    if not raw:
        return []
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        logger.warning(f"⚠️ Stored orders are corrupt ({e}). Starting with empty history.")
        return []
    if not isinstance(data, list):
        logger.warning(f"⚠️ Stored orders are not a list ({type(data).__name__}). Starting with empty history.")
        return []

    known = {s.value for s in OrderStatus}
    orders = []
    for entry in data:
        # Unknown statuses are shown as pending rather than hidden
        if isinstance(entry, dict) and entry.get("status") not in known:
            logger.warning(f"⚠️ Stored order has unknown status {entry.get('status')!r}; treating as PENDING")
            entry = {**entry, "status": OrderStatus.PENDING.value}
        try:
            orders.append(Order.model_validate(entry))
        except pydantic.ValidationError as e:
            logger.warning(f"⚠️ Skipping malformed stored order: {e.error_count()} error(s)")
    return orders


class RedisOrderStore(IOrderStore):
    """Order snapshot in Redis, mirrored in RAM.

    If Redis is unreachable (at startup or on any later call) the store
    switches to RAM for the rest of the process. Writes made in RAM mode
    report failure so callers can warn that nothing is durable.
    """

    def __init__(self, client=None, url: Optional[str] = None, orders_key: Optional[str] = None):
        self.orders_key = orders_key or settings.ORDERS_KEY
        self.last_error: Optional[PersistenceError] = None

        # 1. Primary Memory (Redis)
        if client is not None:
            self.redis = client
            self.redis_available = True
        else:
            try:
                self.redis = redis.from_url(
                    url or settings.REDIS_URL,
                    decode_responses=True,
                    socket_connect_timeout=1  # Fail fast if Redis is down
                )
                self.redis.ping()
                self.redis_available = True
                logger.info("✅ OrderStore: Connected to Redis.")
            except (RedisError, ValueError) as e:
                logger.warning(f"⚠️ OrderStore: Redis unreachable ({e}). Using RAM fallback.")
                self.redis = None
                self.redis_available = False
                self.last_error = PersistenceError(f"Redis unreachable: {e}")

        # 2. Fallback Memory (RAM)
        self._memory_store = {}

    @property
    def mode(self) -> str:
        return "redis" if self.redis_available else "memory"

    # --- Raw key/value access ---

    def get(self, key: str) -> Optional[str]:
        if self.redis_available:
            try:
                value = self.redis.get(key)
                if value is not None:
                    self._memory_store[key] = value
                    return value
            except RedisError as e:
                self._handle_redis_error(e)

        return self._memory_store.get(key)

    def set(self, key: str, value: str) -> bool:
        """Store `value`. True only if it reached Redis."""
        # Always write to RAM so reads stay consistent after a fallback
        self._memory_store[key] = value

        if not self.redis_available:
            return False
        try:
            self.redis.set(key, value)
            return True
        except RedisError as e:
            self._handle_redis_error(e)
            return False

    def delete(self, key: str):
        if self.redis_available:
            try:
                self.redis.delete(key)
            except RedisError as e:
                self._handle_redis_error(e)
        self._memory_store.pop(key, None)

    # --- Order snapshot ---

    def load(self) -> List[Order]:
        return parse_orders(self.get(self.orders_key))

    def save(self, orders: List[Order]) -> bool:
        try:
            payload = json.dumps([order.to_json() for order in orders])
        except (TypeError, ValueError) as e:
            logger.error(f"❌ Could not serialize orders: {e}")
            self.last_error = PersistenceError(f"Could not serialize orders: {e}")
            return False

        if self.set(self.orders_key, payload):
            return True
        if self.last_error is None:
            self.last_error = PersistenceError("Durable store unavailable")
        return False

    def _handle_redis_error(self, e):
        """Log error and switch flag to False to stop trying Redis."""
        logger.error(f"❌ Redis Error: {e}. Switching to RAM mode.")
        self.redis_available = False
        self.last_error = PersistenceError(f"Redis error: {e}")
