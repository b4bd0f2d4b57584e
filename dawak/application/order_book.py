import logging
from typing import Callable, Iterable, List, Optional

from dawak.core.clock import now_ms
from dawak.core.config import settings
from dawak.domain.cart import Cart
from dawak.domain.errors import EmptyCartError
from dawak.domain.lifecycle import generate_order_id, seal_order
from dawak.domain.models import Order

logger = logging.getLogger(__name__)

Listener = Callable[[List[Order]], None]


class OrderBook:
    """Owns the order collection (newest first).

    Every committed change is announced to subscribers with the new
    collection; persistence hooks in as one of those subscribers.
    """

    def __init__(
        self,
        orders: Optional[Iterable[Order]] = None,
        clock: Callable[[], int] = now_ms,
        id_prefix: Optional[str] = None,
        id_digits: Optional[int] = None,
    ):
        self._orders: List[Order] = list(orders or [])
        self._clock = clock
        self._listeners: List[Listener] = []
        self.id_prefix = settings.ORDER_ID_PREFIX if id_prefix is None else id_prefix
        self.id_digits = settings.ORDER_ID_DIGITS if id_digits is None else id_digits

    @property
    def orders(self) -> List[Order]:
        return list(self._orders)

    def __len__(self) -> int:
        return len(self._orders)

    def get(self, order_id: str) -> Optional[Order]:
        for order in self._orders:
            if order.order_id == order_id:
                return order
        return None

    def subscribe(self, listener: Listener):
        self._listeners.append(listener)

    # --- Mutations ---

    def submit_order(self, cart: Cart) -> Order:
        """Seal the cart into a PENDING order and empty the cart."""
        if cart.is_empty():
            raise EmptyCartError()

        now = self._clock()
        order_id = generate_order_id(
            now,
            taken=(o.order_id for o in self._orders),
            prefix=self.id_prefix,
            digits=self.id_digits,
        )
        order = seal_order(cart.items, order_id, now)

        self.commit([order] + self._orders)
        cart.clear()
        logger.info(f"📦 Order {order.order_id} submitted with {len(order.items)} item(s)")
        return order

    def commit(self, orders: Iterable[Order]) -> bool:
        """Replace the whole collection in one step. No-op if nothing changed."""
        orders = list(orders)
        if orders == self._orders:
            return False
        self._orders = orders
        for listener in list(self._listeners):
            listener(self.orders)
        return True
