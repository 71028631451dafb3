from __future__ import annotations

from collections.abc import Sequence

from ..models.row_data import UNMAPPED, FieldDefinition, FieldMapping

"""Input templates and column -> field resolution.

Header names below are the exact template text, including the double space
in the title header and the trailing spaces on three others.
"""

__all__ = [
    "METADATA_FIELDS",
    "METADATA_TEMPLATE_COLUMNS",
    "ORDER_FIELDS",
    "ORDER_TEMPLATE_COLUMNS",
    "build_field_mapping",
]

ORDER_FIELDS: tuple[FieldDefinition, ...] = (
    FieldDefinition("subscriptionNum", "Order Ref", "Order Ref"),
    FieldDefinition("isbn", "ISSN", "ISSN"),
    FieldDefinition("title", "Journal/ Issue Title", "Journal/ Issue  Title"),
    FieldDefinition("volumeNumber", "Volume Number", "Volume Number "),
    FieldDefinition("volumePart", "Volume Part", "Volume Part"),
    FieldDefinition("year", "Year", "Year"),
    FieldDefinition("quantity", "Quantity", "Quantity"),
    FieldDefinition("deliveryName", "Delivery Name", "Delivery Name "),
    FieldDefinition("deliveryCompany", "Delivery Company name", "Delivery Company name"),
    FieldDefinition("addr1", "Delivery address line 1", "Delivery address line 1"),
    FieldDefinition("addr2", "Delivery address line 2", "Delivery address line 2"),
    FieldDefinition("addr3", "Delivery address line 3", "Delivery address line 3"),
    FieldDefinition("country", "Delivery Country", "Delivery Country"),
    FieldDefinition("postcode", "Post code", "Post code"),
    FieldDefinition("phone", "Telephone number", "Telephone number "),
    FieldDefinition("email", "Email address", "Email address"),
)

METADATA_FIELDS: tuple[FieldDefinition, ...] = (
    FieldDefinition("issn", "ISSN", "ISSN", aliases=("issn",)),
    FieldDefinition("title", "Title", "Title", aliases=("title",)),
    FieldDefinition(
        "pageExtent", "Page Extent", "Page Extent",
        aliases=("page extent", "pageextent", "pages", "extent"),
    ),
)

ORDER_TEMPLATE_COLUMNS: tuple[str, ...] = tuple(f.header for f in ORDER_FIELDS)
METADATA_TEMPLATE_COLUMNS: tuple[str, ...] = tuple(f.header for f in METADATA_FIELDS)


def build_field_mapping(headers: Sequence[str], fields: Sequence[FieldDefinition]) -> FieldMapping:
    """Resolve each field to a column: exact header match first, then alias.

    Exact matching ignores surrounding whitespace; alias matching is also
    case-insensitive. The first matching column wins. Unresolved fields map
    to UNMAPPED.
    """
    columns: dict[str, int] = {}
    stripped = [h.strip() for h in headers]
    lowered = [h.lower() for h in stripped]
    for f in fields:
        idx = UNMAPPED
        target = f.header.strip()
        if target in stripped:
            idx = stripped.index(target)
        else:
            for alias in f.aliases:
                if alias in lowered:
                    idx = lowered.index(alias)
                    break
        columns[f.key] = idx
    return FieldMapping(columns=columns, column_count=len(headers))
