import asyncio
import logging
import random
from collections import deque
from typing import Awaitable, Callable, List, Optional

from dawak.application.order_book import OrderBook
from dawak.application.scheduler import StatusScheduler, advance_probabilities
from dawak.core.clock import now_ms
from dawak.core.config import Settings, settings
from dawak.domain.cart import Cart
from dawak.domain.errors import PersistenceError
from dawak.domain.models import Order
from dawak.interfaces.IOrderStore import IOrderStore

logger = logging.getLogger(__name__)


class PharmacySession:
    """Everything that lives while the pharmacist is logged in.

    One cart, one order book loaded from the store, and one scheduler.
    Order changes are written through to the store; a failed write keeps
    the in-memory orders and queues a warning for the next response.
    """

    def __init__(
        self,
        store: IOrderStore,
        config: Settings = settings,
        clock: Callable[[], int] = now_ms,
        rng: Optional[random.Random] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        release_preview: Optional[Callable[[str], None]] = None,
    ):
        self.store = store
        self.cart = Cart(clock=clock, release_preview=release_preview)
        self.order_book = OrderBook(
            store.load(),
            clock=clock,
            id_prefix=config.ORDER_ID_PREFIX,
            id_digits=config.ORDER_ID_DIGITS,
        )
        self.order_book.subscribe(self._write_through)
        self.scheduler = StatusScheduler(
            self.order_book,
            interval=config.TICK_INTERVAL_SECONDS,
            probabilities=advance_probabilities(config),
            rng=rng,
            sleep=sleep,
        )
        self._warnings = deque(maxlen=20)

        # A failed read already put the store in RAM mode; say so up front
        load_error = getattr(store, "last_error", None)
        if load_error is not None:
            logger.warning(f"⚠️ Order history unavailable from store: {load_error}")
            self._warnings.append(load_error)

    @property
    def orders(self) -> List[Order]:
        return self.order_book.orders

    def start(self):
        self.scheduler.start()
        logger.info(f"✅ Session started with {len(self.order_book)} stored order(s)")

    async def close(self):
        await self.scheduler.stop()
        self.cart.clear()
        logger.info("👋 Session closed")

    def drain_warnings(self) -> List[str]:
        messages = [str(w) for w in self._warnings]
        self._warnings.clear()
        return messages

    def _write_through(self, orders: List[Order]):
        if self.store.save(orders):
            return
        error = getattr(self.store, "last_error", None) or PersistenceError("Could not save orders")
        logger.warning(f"⚠️ Orders kept in memory only: {error}")
        self._warnings.append(error)
