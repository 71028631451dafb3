from __future__ import annotations

from dataclasses import dataclass

from .row_data import SourceRow

"""Order and LineItem domain models.

An Order is a shipment-level group of rows sharing consignee identity
(reference id, company, contact). Each constituent row becomes one LineItem.
"""

__all__ = [
    "LineItem",
    "Order",
]


@dataclass(frozen=True)
class LineItem:
    """One quantity-bearing unit within an Order."""
    position: int  # 1-based, contiguous within the order
    row: SourceRow

    @property
    def reference_id(self) -> str:
        return self.row.text("subscriptionNum")

    @property
    def identifier(self) -> str:
        return self.row.text("isbn")

    @property
    def quantity_text(self) -> str:
        return self.row.text("quantity")


@dataclass(frozen=True)
class Order:
    """Grouped order. ``order_number`` is None until the sequencer runs."""
    group_key: str
    reference_id: str
    line_items: tuple[LineItem, ...]
    order_number: int | None = None

    def __post_init__(self) -> None:
        if not self.line_items:
            raise ValueError(f"order '{self.group_key}' has no line items")

    @property
    def first_row(self) -> SourceRow:
        """Representative row supplying the order's address fields."""
        return self.line_items[0].row
