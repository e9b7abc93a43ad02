"""Content-defined chunking based duplicate content detection."""

__version__ = "0.1.0"
