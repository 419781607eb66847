"""Exceptions raised when a collection cycle cannot produce a sample."""

from __future__ import annotations


class CollectionError(Exception):
    """A collection cycle failed and no sample should be emitted."""


class SourceUnavailableError(CollectionError):
    """The underlying data source could not be read or executed."""


class MalformedRecordError(CollectionError):
    """A data record did not have the shape the parser requires."""

    def __init__(self, path: str, field_count: int) -> None:
        super().__init__(
            f"Malformed process status file {path}: expected at least 3 fields, got {field_count}"
        )
        self.path = path
        self.field_count = field_count
