# tools/filesystem/directory.py - Directory scanning, ordering and JSON encoding

import json
import logging
import os
from concurrent.futures import Executor, ThreadPoolExecutor, as_completed
from typing import Iterable, List, Optional

from .entry import Entry, ListingSerializationError, MissingSymlinkTarget, resolve_entry

LOGGER = logging.getLogger(__name__)


def default_worker_count() -> int:
    """Number of worker threads to use when none is configured"""
    return os.cpu_count() or 1


def scan_directory(
    path: str,
    executor: Optional[Executor] = None,
    max_workers: Optional[int] = None,
    logger: Optional[logging.Logger] = None,
) -> List[Entry]:
    """
    List the immediate children of a directory

    Children are resolved concurrently on the executor. Symlinks whose
    target is missing are logged and left out; any other failure aborts
    the whole scan.

    Args:
        path: Absolute path of an existing directory
        executor: Executor for per-entry work; a private pool is created
            for this call when omitted
        max_workers: Size of the private pool (defaults to the CPU count)
        logger: Logger receiving the skipped-entry warnings

    Returns:
        Entries in no particular order

    Raises:
        OSError: If the directory cannot be opened or read
        ListingError: If any child other than a stale symlink fails
    """
    log = logger or LOGGER

    with os.scandir(path) as it:
        dir_entries = list(it)

    if not dir_entries:
        return []

    if executor is None:
        with ThreadPoolExecutor(
            max_workers=max_workers or default_worker_count(),
            thread_name_prefix='rindex-entry',
        ) as pool:
            return _resolve_all(dir_entries, pool, log)

    return _resolve_all(dir_entries, executor, log)


def _resolve_all(dir_entries: list, executor: Executor, log: logging.Logger) -> List[Entry]:
    futures = [executor.submit(resolve_entry, dir_entry) for dir_entry in dir_entries]
    entries: List[Entry] = []

    try:
        for future in as_completed(futures):
            try:
                entries.append(future.result())
            except MissingSymlinkTarget as e:
                log.warning(f"Skipping entry: {e}")
    except BaseException:
        for future in futures:
            future.cancel()
        raise

    return entries


def sort_entries(entries: Iterable[Entry]) -> List[Entry]:
    """
    Order entries for output: directories first, then files, each by name

    Args:
        entries: Entries in any order

    Returns:
        New sorted list
    """
    return sorted(entries, key=Entry.sort_key)


def serialize_entries(entries: Iterable[Entry]) -> str:
    """
    Encode entries as the JSON listing body, keeping their order

    Args:
        entries: Sorted entries

    Returns:
        JSON array text

    Raises:
        ListingSerializationError: If the result is not valid UTF-8 text
    """
    body = json.dumps(
        [entry.to_dict() for entry in entries],
        ensure_ascii=False,
        separators=(',', ':'),
    )

    try:
        body.encode('utf-8')
    except UnicodeEncodeError as e:
        raise ListingSerializationError(str(e)) from e

    return body


def parse_listing(text: str) -> List[Entry]:
    """
    Decode a JSON listing body back into entries

    Args:
        text: JSON array as produced by serialize_entries

    Returns:
        Entries in document order

    Raises:
        ValueError: If the text is not a listing
    """
    data = json.loads(text)
    if not isinstance(data, list):
        raise ValueError("Listing must be a JSON array")

    return [Entry.from_dict(item) for item in data]
