# service.py - Answer one listing request for a path under the served root

import logging
import os
import time
from concurrent.futures import Executor
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from .tools.filesystem.directory import scan_directory, serialize_entries, sort_entries
from .tools.filesystem.entry import Entry
from .utils.path_utils import (
    get_absolute_path,
    is_path_within,
    is_real_path_within,
    normalize_path,
)

LOGGER = logging.getLogger(__name__)

PATH_NOT_FOUND_MESSAGE = "Path not found!"
NOT_DIRECTORY_MESSAGE = "Not a directory!"


class QueryStatus(Enum):
    SUCCESS = "success"
    PATH_NOT_FOUND = "path_not_found"
    NOT_DIRECTORY = "not_directory"


@dataclass(frozen=True)
class QueryOutcome:
    """
    Result of one listing request

    Attributes:
        status: Which of the three answers applies
        body: JSON listing text, only for SUCCESS
        entries: Sorted entries behind the body, only for SUCCESS
    """

    status: QueryStatus
    body: Optional[str] = None
    entries: Tuple[Entry, ...] = ()

    @classmethod
    def success(cls, body: str, entries: Tuple[Entry, ...]) -> "QueryOutcome":
        return cls(QueryStatus.SUCCESS, body, entries)

    @classmethod
    def path_not_found(cls) -> "QueryOutcome":
        return cls(QueryStatus.PATH_NOT_FOUND)

    @classmethod
    def not_directory(cls) -> "QueryOutcome":
        return cls(QueryStatus.NOT_DIRECTORY)


def resolve_request_path(root: str, request_path: str, confine_symlinks: bool = False) -> Optional[str]:
    """
    Map a request path onto the filesystem

    Args:
        root: Absolute root directory being served
        request_path: Decoded URL path, with or without a leading slash
        confine_symlinks: Also reject paths whose real location leaves root

    Returns:
        Absolute path under root, or None if the path does not exist or
        points outside of root
    """
    abs_path = get_absolute_path(root, normalize_path(request_path))

    if not is_path_within(abs_path, root):
        return None

    if not os.path.exists(abs_path):
        return None

    if confine_symlinks and not is_real_path_within(abs_path, root):
        return None

    return abs_path


def query_directory(
    root: str,
    request_path: str,
    executor: Optional[Executor] = None,
    max_workers: Optional[int] = None,
    confine_symlinks: bool = False,
    logger: Optional[logging.Logger] = None,
) -> QueryOutcome:
    """
    Produce the listing answer for a request path

    The filesystem is read once. Nothing is retried.

    Args:
        root: Absolute root directory being served
        request_path: Decoded URL path relative to root
        executor: Executor for per-entry work during the scan
        max_workers: Pool size when no executor is given
        confine_symlinks: Reject paths whose real location leaves root
        logger: Logger for request events (defaults to this module's)

    Returns:
        QueryOutcome for the request

    Raises:
        OSError: If the directory cannot be read
        ListingError: If an entry cannot be listed
    """
    log = logger or LOGGER

    abs_path = resolve_request_path(root, request_path, confine_symlinks)
    if abs_path is None:
        log.warning(f"{PATH_NOT_FOUND_MESSAGE} {get_absolute_path(root, normalize_path(request_path))}")
        return QueryOutcome.path_not_found()

    if not os.path.isdir(abs_path):
        log.warning(f"{NOT_DIRECTORY_MESSAGE} {os.path.realpath(abs_path)}")
        return QueryOutcome.not_directory()

    absolute_path = os.path.realpath(abs_path)
    start_time = time.perf_counter()

    entries = sort_entries(
        scan_directory(absolute_path, executor=executor, max_workers=max_workers, logger=log)
    )
    body = serialize_entries(entries)

    elapsed = (time.perf_counter() - start_time) * 1000.0
    log.debug(f"Response: {len(entries)} items in {absolute_path} took {elapsed:.3f}ms")

    return QueryOutcome.success(body, tuple(entries))
