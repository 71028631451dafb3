"""Domain models for the EDI order file and metadata XML generator."""

from .config_models import GenerationConfig
from .metadata_record import MetadataRecord, PaperSpec
from .order import LineItem, Order
from .processing_result import EdiBatch, MetadataBatch
from .row_data import FieldDefinition, FieldMapping, SourceRow

__all__ = [
    # Configuration models
    "GenerationConfig",
    # Input models
    "FieldDefinition",
    "FieldMapping",
    "SourceRow",
    # Order path
    "Order",
    "LineItem",
    "EdiBatch",
    # Metadata path
    "MetadataRecord",
    "MetadataBatch",
    "PaperSpec",
]
