import logging
from typing import Callable, List, Optional

from dawak.core.clock import now_ms
from dawak.domain.errors import ValidationError
from dawak.domain.models import ItemDraft, LineItem

logger = logging.getLogger(__name__)


class Cart:
    """Draft line items for the order being composed. Never persisted.

    Newest item first. Item ids come from the clock but are forced to be
    strictly increasing, so two adds in the same millisecond still differ.
    """

    def __init__(
        self,
        clock: Callable[[], int] = now_ms,
        release_preview: Optional[Callable[[str], None]] = None,
    ):
        self._clock = clock
        self._release_preview = release_preview
        self._items: List[LineItem] = []
        self._last_id = 0
        self.draft = ItemDraft()

    @property
    def items(self) -> List[LineItem]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def is_empty(self) -> bool:
        return not self._items

    # --- Draft form ---

    def attach_image(self, handle: Optional[str]):
        """Set (or clear) the picked image on the draft, releasing the old preview."""
        previous = self.draft.image_ref
        if previous and previous != handle:
            self._release(previous)
        self.draft = self.draft.model_copy(update={"image_ref": handle})

    # --- Items ---

    def add_item(self, draft: Optional[ItemDraft] = None) -> LineItem:
        draft = self.draft if draft is None else draft

        drug_name = (draft.drug_name or "").strip()
        if not drug_name:
            raise ValidationError("Please enter a drug name")

        quantity = 1 if draft.quantity is None else draft.quantity
        if quantity < 1:
            raise ValidationError("Quantity must be at least 1")

        item = LineItem(
            id=self._next_id(),
            drug_name=drug_name,
            quantity=quantity,
            notes=draft.notes or "",
            image_ref=draft.image_ref,
        )
        self._items.insert(0, item)

        # The form starts over; its preview now belongs to the item.
        leftover = self.draft.image_ref
        if leftover and leftover != item.image_ref:
            self._release(leftover)
        self.draft = ItemDraft()

        logger.debug(f"🛒 Added {item.quantity}x {item.drug_name} (item {item.id})")
        return item

    def remove_item(self, item_id: int) -> Optional[LineItem]:
        """Drop the item with `item_id`. Unknown ids are ignored."""
        for index, item in enumerate(self._items):
            if item.id == item_id:
                del self._items[index]
                if item.image_ref:
                    self._release(item.image_ref)
                return item
        return None

    def clear(self):
        for item in self._items:
            if item.image_ref:
                self._release(item.image_ref)
        self._items = []

    # --- Internals ---

    def _next_id(self) -> int:
        self._last_id = max(self._clock(), self._last_id + 1)
        return self._last_id

    def _release(self, handle: str):
        if self._release_preview is not None:
            self._release_preview(handle)
