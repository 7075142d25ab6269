"""Content-addressable storage for receipt metadata."""

from receiptoverse.storage.publisher import MetadataPublisher

__all__ = ["MetadataPublisher"]
