from __future__ import annotations

from collections.abc import Iterable

from ..models.order import LineItem, Order
from ..models.row_data import SourceRow
from .normalize import to_ascii

"""Row grouping: fold spreadsheet rows into multi-line-item orders.

Rows sharing reference id, delivery company and delivery contact become line
items of one order. Rows without a reference id are always their own order,
even when two of them are otherwise identical. A reference id shipped to two
different consignees yields two orders so shipments are never merged across
addresses.
"""

__all__ = [
    "KEY_SEPARATOR",
    "group_key",
    "group_rows",
]

KEY_SEPARATOR = "||"


def _cell(row: SourceRow, key: str) -> str:
    return to_ascii(row.text(key))


def group_key(row: SourceRow, index: int) -> tuple[str, ...]:
    """Composite grouping key; ``index`` makes reference-less keys unique."""
    ref = _cell(row, "subscriptionNum")
    if not ref:
        return ("row", str(index))
    return ("ref", ref, _cell(row, "deliveryCompany"), _cell(row, "deliveryName"))


def group_rows(rows: Iterable[SourceRow]) -> list[Order]:
    """Partition rows into orders, in first-appearance order of each key."""
    order_keys: list[tuple[str, ...]] = []
    grouped: dict[tuple[str, ...], list[SourceRow]] = {}
    for index, row in enumerate(rows):
        key = group_key(row, index)
        if key not in grouped:
            grouped[key] = []
            order_keys.append(key)
        grouped[key].append(row)

    orders: list[Order] = []
    for key in order_keys:
        members = grouped[key]
        items = tuple(LineItem(position=pos, row=r) for pos, r in enumerate(members, start=1))
        orders.append(
            Order(
                group_key=KEY_SEPARATOR.join(key[1:]),
                reference_id=_cell(members[0], "subscriptionNum"),
                line_items=items,
            )
        )
    return orders
