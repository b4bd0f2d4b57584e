"""
ORDER LIFECYCLE RULES

Pure functions: no store writes, no timers, no randomness of their own.
The roll that decides a probabilistic advance is always passed in.
"""

from typing import Dict, Iterable, Mapping, Optional, Sequence

from dawak.domain.errors import EmptyCartError
from dawak.domain.models import (
    STATUS_SEQUENCE,
    TERMINAL_STATUSES,
    LineItem,
    Order,
    OrderStatus,
)

# ============================================================
# STATE MACHINE
# ============================================================

DEFAULT_ADVANCE_PROBABILITIES: Dict[OrderStatus, float] = {
    OrderStatus.PENDING: 0.3,
    OrderStatus.ACCEPTED: 0.3,
    OrderStatus.ON_DELIVERY: 0.2,
}


def next_status(status: OrderStatus) -> Optional[OrderStatus]:
    """The single status that may follow `status`, or None when terminal."""
    if status in TERMINAL_STATUSES:
        return None
    return STATUS_SEQUENCE[STATUS_SEQUENCE.index(status) + 1]


def can_transition(*, from_status: OrderStatus, to_status: OrderStatus) -> bool:
    return next_status(from_status) == to_status


def advance(
    order: Order,
    roll: float,
    probabilities: Mapping[OrderStatus, float] = DEFAULT_ADVANCE_PROBABILITIES,
) -> Order:
    """Move `order` one step forward if `roll` lands under its status' probability.

    Returns the same object when the order is terminal or the roll misses.
    """
    target = next_status(order.status)
    if target is None:
        return order
    if roll >= probabilities.get(order.status, 0.0):
        return order
    return order.model_copy(update={"status": target})


# ============================================================
# SEALING
# ============================================================


def generate_order_id(
    now_ms: int,
    taken: Iterable[str] = (),
    prefix: str = "ORD-",
    digits: int = 6,
) -> str:
    """`prefix` + the last `digits` digits of the clock.

    Bumps the suffix while it clashes with an id already in `taken`.
    """
    taken = set(taken)
    modulus = 10 ** digits
    suffix = now_ms % modulus
    for _ in range(modulus):
        candidate = f"{prefix}{suffix:0{digits}d}"
        if candidate not in taken:
            return candidate
        suffix = (suffix + 1) % modulus
    raise RuntimeError(f"order id space exhausted for prefix {prefix!r}")


def seal_order(items: Sequence[LineItem], order_id: str, now_ms: int) -> Order:
    """Freeze cart items into a new PENDING order, dropping image handles."""
    if not items:
        raise EmptyCartError()
    snapshot = tuple(item.model_copy(update={"image_ref": None}) for item in items)
    return Order(
        order_id=order_id,
        created_at=now_ms,
        status=OrderStatus.PENDING,
        items=snapshot,
    )
