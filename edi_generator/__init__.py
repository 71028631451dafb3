"""Journal order EDI file and metadata XML generator."""

__version__ = "0.1.0"
