from enum import Enum
from typing import List, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    ON_DELIVERY = "ON_DELIVERY"
    DELIVERED = "DELIVERED"


# Delivery walks this sequence one step at a time, never backwards.
STATUS_SEQUENCE: Tuple[OrderStatus, ...] = (
    OrderStatus.PENDING,
    OrderStatus.ACCEPTED,
    OrderStatus.ON_DELIVERY,
    OrderStatus.DELIVERED,
)
TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED})

# What the pharmacist sees on the tracking list
STATUS_LABELS = {
    OrderStatus.PENDING: "Pending",
    OrderStatus.ACCEPTED: "Processing",
    OrderStatus.ON_DELIVERY: "On Way",
    OrderStatus.DELIVERED: "Delivered",
}


class ItemDraft(BaseModel):
    """The "new item" form state before it goes into the cart."""
    model_config = ConfigDict(populate_by_name=True)

    drug_name: str = Field("", alias="drugName")
    quantity: Optional[int] = 1
    notes: str = ""
    image_ref: Optional[str] = Field(None, alias="imageRef")


class LineItem(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    drug_name: str = Field(alias="drugName", min_length=1)
    quantity: int = Field(1, ge=1)
    notes: str = ""
    # Opaque preview handle from the image picker; never persisted.
    image_ref: Optional[str] = Field(None, alias="imageRef")


class Order(BaseModel):
    """A sealed cart. Only `status` ever changes after creation."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    order_id: str = Field(alias="orderId", min_length=1)
    # Epoch milliseconds. Older snapshots stored this as "timestamp".
    created_at: int = Field(
        validation_alias=AliasChoices("createdAt", "timestamp", "created_at"),
        serialization_alias="createdAt",
    )
    status: OrderStatus = OrderStatus.PENDING
    items: Tuple[LineItem, ...] = Field(min_length=1)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


OrderCollection = List[Order]
