from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from datetime import datetime

from ..models.config_models import GenerationConfig
from ..models.order import LineItem, Order
from ..models.processing_result import EdiBatch
from ..models.row_data import SourceRow
from .normalize import is_alpha3_fallback, iso_to_alpha3, normalize_identifier, to_ascii

"""Fixed-width EDI record encoder (T1 layout, BLOUK variant).

Record structure per batch:

    $$HDR  file header marker            (not counted)
    H1     order header          350 chars
    H2     customer / address    358 chars
    H3     payment terms          20 chars
    D1     line item (xN)        266 chars
    $$EOF  footer with record count (counts H1/H2/H3/D1 only)

The receiving system's own counter ignores the two marker lines, so the
footer count must too. Unit price is always zero: the input carries no
pricing data.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "D1_WIDTH",
    "FOOTER_WIDTH",
    "H1_WIDTH",
    "H2_WIDTH",
    "H3_WIDTH",
    "HEADER_WIDTH",
    "EdiEncoder",
    "edi_filename",
    "file_timestamp",
    "pad",
    "pad_left",
    "parse_quantity",
    "select_address_lines",
]

H1_WIDTH = 350
H2_WIDTH = 358
H3_WIDTH = 20
D1_WIDTH = 266
HEADER_WIDTH = 35
FOOTER_WIDTH = 42

ORDER_NUMBER_WIDTH = 15
PDF_PLACEHOLDER = ".PDF"  # no invoice reference required

_LEADING_INT = re.compile(r"^[+-]?\d+")
_CONTROL = re.compile(r"[\r\n\t]")


def pad(value: object, length: int, fill: str = " ") -> str:
    """Coerce to text, truncate to ``length`` and right-pad with ``fill``."""
    text = "" if value is None else str(value)
    return text[:length].ljust(length, fill)


def pad_left(value: object, length: int, fill: str = "0") -> str:
    """Left-pad with ``fill`` to ``length`` then truncate to ``length``."""
    text = "" if value is None else str(value)
    return text.rjust(length, fill)[:length]


def select_address_lines(line1: str, line2: str, line3: str) -> tuple[str, str, str]:
    """Address slot contents for an H2 record.

    Slot 1 always carries line 1. Slots 2 and 3 take the first two non-empty
    lines among lines 2 and 3, in order, so a blank line 2 never leaves a gap
    before line 3.
    """
    rest = [line for line in (line2, line3) if line]
    rest += [""] * (2 - len(rest))
    return line1, rest[0], rest[1]


def parse_quantity(text: str) -> int | None:
    """Leading integer of ``text`` when it is >= 1, else None."""
    match = _LEADING_INT.match(text.strip())
    if match is None:
        return None
    qty = int(match.group(0))
    return qty if qty >= 1 else None


def file_timestamp(moment: datetime) -> str:
    """YYYYMMDDHHMMSS used in the $$HDR / $$EOF markers."""
    return moment.strftime("%Y%m%d%H%M%S")


def edi_filename(config: GenerationConfig, moment: datetime) -> str:
    """``{prefix}.{batchId}_{HHMM}_({DD-MM-YY}).txt``, e.g. T1.0027816_1423_(24-02-26).txt"""
    return f"{config.file_prefix.strip()}.{config.batch_id.strip()}_{moment:%H%M}_({moment:%d-%m-%y}).txt"


class EdiEncoder:
    """Render ordered, numbered orders into an EdiBatch.

    All settings come from the GenerationConfig and the single timestamp
    given at construction; nothing else is read while encoding.
    """

    def __init__(self, config: GenerationConfig, generated_at: datetime) -> None:
        self.config = config
        self.generated_at = generated_at
        self._sender = pad(to_ascii(config.sender_code), 4)
        self._batch = pad_left(to_ascii(config.batch_id.strip()), 7)
        self._currency = pad(to_ascii(config.currency), 3)
        self._terms = pad(to_ascii(config.payment_terms), 3)
        self._carrier = pad(to_ascii(config.carrier_code), 8)
        self._timestamp = file_timestamp(generated_at)
        self._date = generated_at.strftime("%Y%m%d")

    # ------------------------------------------------------------------
    # Markers
    # ------------------------------------------------------------------

    def header_marker(self) -> str:
        # Example: $$HDRBLOO  0027816   20260224160055
        return f"$$HDR{self._sender}  {self._batch}   {self._timestamp}"

    def footer_marker(self, record_count: int) -> str:
        return f"$$EOF{self._sender}  {self._batch}   {self._timestamp}{pad_left(record_count, 7)}"

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    @staticmethod
    def _clean(text: str) -> str:
        # embedded line breaks would split a record in two
        return _CONTROL.sub(" ", to_ascii(text))

    @classmethod
    def _cell(cls, row: SourceRow, key: str) -> str:
        return cls._clean(row.text(key))

    @staticmethod
    def _order_number(order: Order) -> str:
        if order.order_number is None:
            raise ValueError(f"order '{order.group_key}' has not been numbered")
        return pad(order.order_number, ORDER_NUMBER_WIDTH)

    def encode_h1(self, order: Order) -> str:
        """Order header: date, customer reference, carrier, currency."""
        ref = order.reference_id or self._clean(order.line_items[0].identifier)
        record = (
            "H1"
            + self._order_number(order)     # [2:17]
            + self._date                    # [17:25]
            + pad("", 30)                   # [25:55]
            + "C "                          # [55:57] currency flag
            + pad(ref, 28)                  # [57:85]
            + pad("", 7)                    # [85:92]
            + self._carrier                 # [92:100]
            + " N"                          # [100:102]
            + pad("", 30)                   # [102:132]
            + "0" * 57                      # [132:189]
            + " "                           # [189:190]
            + pad("", 5)                    # [190:195]
            + pad(PDF_PLACEHOLDER, 40)      # [195:235]
            + "  "                          # [235:237]
            + self._currency                # [237:240]
            + pad("", 110)                  # [240:350]
        )
        return pad(record, H1_WIDTH)

    def encode_h2(self, order: Order) -> str:
        """Customer name and delivery address, taken from the first row."""
        first = order.first_row
        customer_code = f"ST{order.reference_id}" if order.reference_id else "ST"
        line1, line2, line3 = select_address_lines(
            self._cell(first, "addr1"), self._cell(first, "addr2"), self._cell(first, "addr3")
        )
        record = (
            "H2"
            + self._order_number(order)                             # [2:17]
            + pad(customer_code, 27)                                # [17:44]
            + pad(self._cell(first, "deliveryName"), 50)            # [44:94]
            + pad(line1, 50)                                        # [94:144]
            + pad(line2, 50)                                        # [144:194]
            + pad(line3, 50)                                        # [194:244]
            + pad(self._cell(first, "email"), 50)                   # [244:294]
            + pad(self._cell(first, "deliveryCompany"), 32)         # [294:326]
            + pad(self._cell(first, "postcode"), 9)                 # [326:335]
            + pad(iso_to_alpha3(self._cell(first, "country")), 3)   # [335:338]
            + pad(self._cell(first, "phone"), 20)                   # [338:358]
        )
        return pad(record, H2_WIDTH)

    def encode_h3(self, order: Order) -> str:
        """Payment / Incoterms code."""
        return pad("H3" + self._order_number(order) + self._terms, H3_WIDTH)

    def quantity_for(self, item: LineItem) -> int:
        qty = parse_quantity(self._clean(item.quantity_text))
        return qty if qty is not None else self.config.default_quantity

    def encode_d1(self, order: Order, item: LineItem) -> str:
        """One line item. Item ref falls back to the zero-padded position."""
        item_ref = self._clean(item.reference_id) or str(item.position).zfill(9)
        qty_block = pad_left(self.quantity_for(item), 7) + "0" * 21
        identifier = normalize_identifier(self._clean(item.identifier))
        record = (
            "D1"
            + self._order_number(order)         # [2:17]
            + pad(item_ref, 25)                 # [17:42]
            + pad_left(item.position, 5)        # [42:47]
            + "   "                             # [47:50]
            + "0" * 18                          # [50:68]
            + pad("", 78)                       # [68:146]
            + qty_block                         # [146:174]
            + " " + pad_left(0, 9) + "  "       # [174:186] unit price
            + pad("", 40)                       # [186:226]
            + pad(identifier, 13)               # [226:239]
            + pad("", 27)                       # [239:266]
        )
        return pad(record, D1_WIDTH)

    def encode_order(self, order: Order) -> list[str]:
        lines = [self.encode_h1(order), self.encode_h2(order), self.encode_h3(order)]
        lines.extend(self.encode_d1(order, item) for item in order.line_items)
        return lines

    def country_warnings(self, order: Order) -> list[str]:
        raw = self._cell(order.first_row, "country")
        if not is_alpha3_fallback(raw):
            return []
        return [
            f"order {order.order_number}: country code '{raw.strip().upper()}' has no alpha-3 "
            f"mapping, written as '{iso_to_alpha3(raw)}' (row {order.first_row.row_number})"
        ]

    def encode(self, orders: Sequence[Order]) -> EdiBatch:
        """Encode numbered orders into a full batch with markers."""
        lines = [self.header_marker()]
        warnings: list[str] = []
        record_count = 0
        line_item_count = 0
        for order in orders:
            order_lines = self.encode_order(order)
            lines.extend(order_lines)
            record_count += len(order_lines)
            line_item_count += len(order.line_items)
            warnings.extend(self.country_warnings(order))
        lines.append(self.footer_marker(record_count))
        logger.debug(
            "encoded orders=%d line_items=%d records=%d", len(orders), line_item_count, record_count
        )
        return EdiBatch(
            lines=tuple(lines),
            orders=tuple(orders),
            record_count=record_count,
            line_item_count=line_item_count,
            warnings=tuple(warnings),
        )
