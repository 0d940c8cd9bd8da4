# tools/filesystem/__init__.py - Directory listing engine

from .entry import (
    Entry,
    EntryKind,
    EntryMetadataError,
    InvalidName,
    ListingError,
    ListingSerializationError,
    MissingSymlinkTarget,
    resolve_entry,
)
from .directory import parse_listing, scan_directory, serialize_entries, sort_entries

__all__ = [
    "Entry",
    "EntryKind",
    "EntryMetadataError",
    "InvalidName",
    "ListingError",
    "ListingSerializationError",
    "MissingSymlinkTarget",
    "parse_listing",
    "resolve_entry",
    "scan_directory",
    "serialize_entries",
    "sort_entries",
]
