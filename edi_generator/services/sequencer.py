from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, replace
from datetime import datetime

from ..models.order import Order

"""Order numbering sequencer.

The seed is "3" followed by YYMMDDhhmm of the generation timestamp, read as
a 10-digit integer; order i (0-based, first-appearance order) is seed + i.
Two batches generated in the same calendar minute can produce overlapping
numbers. That is an accepted limitation of the receiving system's numbering
scheme and is not reported as an error.
"""

__all__ = [
    "ORDER_NUMBER_PREFIX",
    "OrderNumberSequencer",
    "order_seed",
]

ORDER_NUMBER_PREFIX = "3"


def order_seed(moment: datetime) -> int:
    """Seed integer for a batch generated at ``moment``."""
    return int(ORDER_NUMBER_PREFIX + moment.strftime("%y%m%d%H%M"))


@dataclass(frozen=True)
class OrderNumberSequencer:
    """Numbers orders from a seed captured once per run."""
    seed: int

    @classmethod
    def for_moment(cls, moment: datetime) -> OrderNumberSequencer:
        return cls(seed=order_seed(moment))

    def number_for(self, index: int) -> int:
        if index < 0:
            raise ValueError(f"order index must be >= 0, got {index}")
        return self.seed + index

    def assign(self, orders: Sequence[Order]) -> list[Order]:
        """Return copies of ``orders`` carrying their order numbers."""
        return [replace(order, order_number=self.number_for(i)) for i, order in enumerate(orders)]
