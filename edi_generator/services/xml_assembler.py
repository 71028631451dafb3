from __future__ import annotations

import re
from collections.abc import Sequence
from xml.sax.saxutils import escape

from ..models.metadata_record import MetadataRecord

"""XML specification documents and the plain-text batch summary."""

__all__ = [
    "build_xml",
    "document_name",
    "render_metadata_summary",
    "xml_escape",
]

_XML_ENTITIES = {'"': "&quot;", "'": "&apos;"}
_UNSAFE_FILENAME = re.compile(r"[^A-Za-z0-9_\-]")
# characters XML 1.0 does not allow in a document at all
_XML_INVALID = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")

_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<book>
    <basic_info>
        <issn>{issn}</issn>
        <title>{title}</title>
    </basic_info>
    <specifications>
        <dimensions>
            <trim_height>{trim_height}</trim_height>
            <trim_width>{trim_width}</trim_width>
            <spine_size>{spine_size}</spine_size>
        </dimensions>
        <materials>
            <paper_type>{paper_type}</paper_type>
            <binding_style>{binding_style}</binding_style>
            <lamination>{lamination}</lamination>
        </materials>
        <page_extent>{page_extent}</page_extent>
    </specifications>
</book>
"""


def xml_escape(text: object) -> str:
    """Drop XML-invalid control characters, then escape & < > " '."""
    return escape(_XML_INVALID.sub("", str(text)), _XML_ENTITIES)


def document_name(identifier: str) -> str:
    return f"{_UNSAFE_FILENAME.sub('_', identifier)}.xml"


def build_xml(record: MetadataRecord) -> str:
    """Render one record. Dimensions are millimetres."""
    values = {
        "issn": record.identifier,
        "title": record.title,
        "trim_height": record.trim_height_mm,
        "trim_width": record.trim_width_mm,
        "spine_size": record.spine_mm,
        "paper_type": record.paper_type,
        "binding_style": record.binding_style,
        "lamination": record.lamination,
        "page_extent": record.page_extent,
    }
    return _TEMPLATE.format(**{k: xml_escape(v) for k, v in values.items()})


def render_metadata_summary(
    records: Sequence[MetadataRecord],
    skipped_rows: Sequence[int],
    source_name: str,
    generated_at: str,
) -> str:
    """Plain-text report: one line per generated document plus totals."""
    lines = [
        "XML metadata batch summary",
        f"source: {source_name}",
        f"generated: {generated_at}",
        "",
        f"{'ISSN':<13}  {'PAGES':>5}  {'PAPER':<6}  {'SPINE':>5}  TITLE",
    ]
    for r in records:
        lines.append(
            f"{r.identifier:<13}  {r.page_extent:>5}  {r.paper_type:<6}  {str(r.spine_mm) + 'mm':>5}  {r.title}"
        )
    lines.append("")
    lines.append(f"documents={len(records)} skipped={len(skipped_rows)}")
    if skipped_rows:
        lines.append("skipped rows (no ISSN): " + ", ".join(str(n) for n in skipped_rows))
    return "\n".join(lines) + "\n"
