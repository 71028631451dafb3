from __future__ import annotations

import re

"""Normalizers: raw cell text -> canonical field values.

All functions are pure. The EDI encoder counts characters, so any text that
reaches a fixed-width slot must first go through ``to_ascii``; a multi-byte
character left in place would shift every following field.
"""

__all__ = [
    "IDENTIFIER_LENGTH",
    "ISO_2_TO_3",
    "is_alpha3_fallback",
    "iso_to_alpha3",
    "normalize_identifier",
    "to_ascii",
]

IDENTIFIER_LENGTH = 13

# ISO 3166-1 alpha-2 -> alpha-3 for the territories seen in journal distribution
ISO_2_TO_3 = {
    "AR": "ARG", "AT": "AUT", "AU": "AUS", "BE": "BEL", "BR": "BRA",
    "CA": "CAN", "CH": "CHE", "CL": "CHL", "CN": "CHN", "CO": "COL",
    "CZ": "CZE", "DE": "DEU", "DK": "DNK", "EG": "EGY", "ES": "ESP",
    "FI": "FIN", "FR": "FRA", "GB": "GBR", "GR": "GRC", "HK": "HKG",
    "HU": "HUN", "ID": "IDN", "IE": "IRL", "IL": "ISR", "IN": "IND",
    "IT": "ITA", "JP": "JPN", "KE": "KEN", "KR": "KOR", "MX": "MEX",
    "MY": "MYS", "NG": "NGA", "NL": "NLD", "NO": "NOR", "NZ": "NZL",
    "PH": "PHL", "PL": "POL", "PT": "PRT", "RO": "ROU", "SE": "SWE",
    "SG": "SGP", "TH": "THA", "TR": "TUR", "TW": "TWN", "US": "USA",
    "VN": "VNM", "ZA": "ZAF",
}

_SEPARATORS = re.compile(r"[-\s]")
_NON_DIGITS = re.compile(r"[^0-9]")

_ASCII_REPLACEMENTS = (
    (re.compile("[\u2018\u2019\u201a\u201b]"), "'"),  # curly single quotes
    (re.compile("[\u201c\u201d\u201e\u201f]"), '"'),  # curly double quotes
    (re.compile("[\u2013\u2014\u2015]"), "-"),  # en/em dash, bar
    (re.compile("\u2026"), "..."),
    (re.compile("\u00a0"), " "),
)
_NON_ASCII = re.compile(r"[^\x00-\x7f]")


def normalize_identifier(value: object, length: int = IDENTIFIER_LENGTH) -> str:
    """Return a ``length``-digit string: digits only, truncated or zero-padded.

    >>> normalize_identifier("977-1472-6450-51")
    '9771472645051'
    >>> normalize_identifier("")
    '0000000000000'
    """
    text = "" if value is None else str(value)
    digits = _NON_DIGITS.sub("", _SEPARATORS.sub("", text))
    if len(digits) >= length:
        return digits[:length]
    return digits.rjust(length, "0")


def iso_to_alpha3(code: str | None) -> str:
    """Convert a country code to a 3-character alpha-3 code.

    Unknown 2-letter codes pass through padded with one space; callers that
    need to report that case use ``is_alpha3_fallback``.
    """
    if not code:
        return "   "
    code = code.strip().upper()
    if not code:
        return "   "
    if len(code) == 3:
        return code
    if len(code) == 2:
        return ISO_2_TO_3.get(code, code + " ")
    return code[:3]


def is_alpha3_fallback(code: str | None) -> bool:
    """True when ``iso_to_alpha3`` would emit a non-ISO padded 2-letter code."""
    if not code:
        return False
    code = code.strip().upper()
    return len(code) == 2 and code not in ISO_2_TO_3


def to_ascii(text: str) -> str:
    """Map common Unicode punctuation to ASCII and drop anything else."""
    for pattern, replacement in _ASCII_REPLACEMENTS:
        text = pattern.sub(replacement, text)
    return _NON_ASCII.sub("", text)
