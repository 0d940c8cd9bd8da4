# tools/filesystem/entry.py - Listing entries and per-entry resolution

import errno
import stat
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from ...utils.timestamp_utils import format_http_date, parse_http_date

# errno values meaning a symlink target cannot be reached
_STALE_LINK_ERRNOS = (errno.ENOENT, errno.ENOTDIR, errno.ELOOP)


def _printable(path: str) -> str:
    # Keep undecodable bytes visible without breaking log output
    return path.encode("utf-8", "backslashreplace").decode("utf-8")


class ListingError(Exception):
    """Base class for errors raised while building a listing"""

    def __init__(self, message: str, path: str):
        super().__init__(message)
        self.path = _printable(path)


class MissingSymlinkTarget(ListingError):
    """A child is a symlink whose target does not exist"""

    def __init__(self, path: str):
        super().__init__(f"Symlink to a non-existent target: {_printable(path)}", path)


class InvalidName(ListingError):
    """A child's name cannot be represented as UTF-8 text"""

    def __init__(self, path: str):
        super().__init__(f"Invalid file name: {_printable(path)}", path)


class EntryMetadataError(ListingError):
    """Metadata for a child could not be read"""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Cannot read metadata for {_printable(path)}: {reason}", path)


class ListingSerializationError(ListingError):
    """A sorted listing could not be encoded as UTF-8 JSON"""

    def __init__(self, reason: str):
        super().__init__(f"Listing is not valid UTF-8: {reason}", "")


class EntryKind(str, Enum):
    DIRECTORY = "directory"
    FILE = "file"


# Directories sort before files
_KIND_RANK = {EntryKind.DIRECTORY: 0, EntryKind.FILE: 1}


@dataclass(frozen=True)
class Entry:
    """
    One child of a listed directory

    Attributes:
        kind: Whether the child is a directory or anything else
        name: Base name of the child
        mtime: Last modification time as an HTTP-date string
        size: Byte length for files, None for directories
    """

    kind: EntryKind
    name: str
    mtime: str
    size: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, "kind", EntryKind(self.kind))
        if self.kind is EntryKind.DIRECTORY and self.size is not None:
            raise ValueError(f"Directory entry {self.name!r} cannot have a size")
        if self.kind is EntryKind.FILE and self.size is None:
            raise ValueError(f"File entry {self.name!r} requires a size")

    @classmethod
    def directory(cls, name: str, mtime: str) -> "Entry":
        return cls(EntryKind.DIRECTORY, name, mtime)

    @classmethod
    def file(cls, name: str, mtime: str, size: int) -> "Entry":
        return cls(EntryKind.FILE, name, mtime, size)

    def sort_key(self) -> Tuple[int, str]:
        # str comparison is by code point, which matches the byte order
        # of the UTF-8 encoding
        return (_KIND_RANK[self.kind], self.name)

    def to_dict(self) -> Dict[str, Any]:
        """Return the JSON object for this entry"""
        data: Dict[str, Any] = {
            'type': self.kind.value,
            'name': self.name,
            'mtime': self.mtime,
        }
        if self.kind is EntryKind.FILE:
            data['size'] = self.size
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Entry":
        """
        Build an entry from its JSON object

        Args:
            data: Object with 'type', 'name', 'mtime' and, for files, 'size'

        Returns:
            Entry instance

        Raises:
            ValueError: If the object does not describe a valid entry
        """
        try:
            kind = EntryKind(data['type'])
            name = data['name']
            mtime = data['mtime']
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Malformed listing entry: {data!r}") from e

        if not isinstance(mtime, str):
            raise ValueError(f"Entry mtime must be an HTTP-date string: {data!r}")
        parse_http_date(mtime)

        if kind is EntryKind.DIRECTORY:
            if 'size' in data:
                raise ValueError(f"Directory entry has a size: {data!r}")
            return cls.directory(name, mtime)

        size = data.get('size')
        if not isinstance(size, int) or isinstance(size, bool) or size < 0:
            raise ValueError(f"File entry needs a non-negative integer size: {data!r}")
        return cls.file(name, mtime, size)


def resolve_entry(dir_entry) -> Entry:
    """
    Turn one raw directory entry into an Entry

    Metadata is read following symlinks, so a link to a directory is
    listed as a directory and a link to a file reports the target's size.

    Args:
        dir_entry: An os.DirEntry from os.scandir

    Returns:
        Entry for the child

    Raises:
        MissingSymlinkTarget: The child is a symlink whose target is gone
        InvalidName: The child's name is not valid text
        EntryMetadataError: Any other failure reading metadata
    """
    path = dir_entry.path

    try:
        metadata = dir_entry.stat(follow_symlinks=True)
    except OSError as e:
        if e.errno in _STALE_LINK_ERRNOS and _is_symlink(dir_entry):
            raise MissingSymlinkTarget(path) from e
        raise EntryMetadataError(path, e.strerror or str(e)) from e

    name = dir_entry.name
    try:
        # Undecodable bytes come back from scandir as lone surrogates
        name.encode('utf-8')
    except UnicodeEncodeError as e:
        raise InvalidName(path) from e

    mtime = format_http_date(metadata.st_mtime)

    if stat.S_ISDIR(metadata.st_mode):
        return Entry.directory(name, mtime)

    return Entry.file(name, mtime, metadata.st_size)


def _is_symlink(dir_entry) -> bool:
    try:
        return dir_entry.is_symlink()
    except OSError:
        return False
