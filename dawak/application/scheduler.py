import asyncio
import logging
import random
from typing import Awaitable, Callable, Dict, Mapping, Optional

from dawak.application.order_book import OrderBook
from dawak.core.config import Settings, settings
from dawak.domain.lifecycle import advance
from dawak.domain.models import OrderStatus

logger = logging.getLogger(__name__)


def advance_probabilities(config: Settings = settings) -> Dict[OrderStatus, float]:
    return {
        OrderStatus.PENDING: config.ACCEPT_PROBABILITY,
        OrderStatus.ACCEPTED: config.DISPATCH_PROBABILITY,
        OrderStatus.ON_DELIVERY: config.DELIVER_PROBABILITY,
    }


class StatusScheduler:
    """Simulates the pharmacy's side: nudges open orders along on a timer.

    Each tick draws one number from `rng` per non-terminal order, in
    collection order (newest first), and moves that order at most one step.
    Delivered orders draw nothing. `sleep` is awaited between ticks.
    """

    def __init__(
        self,
        order_book: OrderBook,
        interval: Optional[float] = None,
        probabilities: Optional[Mapping[OrderStatus, float]] = None,
        rng: Optional[random.Random] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.order_book = order_book
        self.interval = settings.TICK_INTERVAL_SECONDS if interval is None else interval
        self.probabilities = advance_probabilities() if probabilities is None else dict(probabilities)
        self.rng = rng or random.Random()
        self._sleep = sleep
        self._task: Optional[asyncio.Task] = None
        self.ticks = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def tick(self) -> bool:
        """Run one evaluation round. True if anything moved (and was committed)."""
        self.ticks += 1
        current = self.order_book.orders
        updated = []
        for order in current:
            if order.is_terminal:
                updated.append(order)
                continue
            moved = advance(order, self.rng.random(), self.probabilities)
            if moved is not order:
                logger.info(f"🚚 {order.order_id}: {order.status.value} -> {moved.status.value}")
            updated.append(moved)

        if updated == current:
            return False
        return self.order_book.commit(updated)

    def start(self):
        """Begin ticking on the running event loop."""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run(), name="status-scheduler")
        logger.info(f"⏱️ Status scheduler started (every {self.interval}s)")

    async def stop(self):
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("⏹️ Status scheduler stopped")

    async def _run(self):
        while True:
            await self._sleep(self.interval)
            try:
                self.tick()
            except Exception as e:
                logger.error(f"❌ Status tick failed: {e}", exc_info=True)
