from __future__ import annotations

from dataclasses import dataclass

"""Config dataclasses for the EDI / metadata generator.

GenerationConfig is the single settings value handed to the encoder. It is
built once by the config loader and never read from ambient state mid-encode.
"""

__all__ = [
    "GenerationConfig",
]


@dataclass(frozen=True)
class GenerationConfig:
    """Batch-level settings for one generation run.

    Environment variables (.env) override the YAML values; the CLI
    ``--batch-id`` flag overrides both.
    """
    sender_code: str  # 4 chars in $$HDR/$$EOF
    currency: str  # ISO currency code in H1
    payment_terms: str  # Incoterms code in H3 (FCA, DAP ...)
    default_quantity: int = 1  # used when a row has no usable quantity
    batch_id: str = "0"  # file id, zero-padded to 7 in markers
    file_prefix: str = "T1"
    output_directory: str = "./output"
    timezone: str = "UTC"  # wall-clock zone for timestamps and order seed
    carrier_code: str = "RMA"  # Royal Mail
