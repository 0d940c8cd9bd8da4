# utils/path_utils.py - Request path normalization and root confinement

import os
import re


def normalize_path(path: str) -> str:
    """
    Normalize a request path by converting backslashes to forward slashes
    and removing redundant separators

    Args:
        path: The decoded request path

    Returns:
        Normalized path string
    """
    # Replace backslashes with forward slashes
    normalized = path.replace('\\', '/')

    # Remove duplicate slashes
    normalized = re.sub(r'/+', '/', normalized)

    # Remove trailing slash
    if normalized != '/' and normalized.endswith('/'):
        normalized = normalized[:-1]

    return normalized


def get_absolute_path(base_path: str, relative_path: str) -> str:
    """
    Join a request path onto the root directory

    The result is normalized lexically, so '..' segments are collapsed
    before anything touches the filesystem. It may still point outside
    of base_path; use is_path_within to check.

    Args:
        base_path: The root directory being served
        relative_path: The path relative to the root directory

    Returns:
        Absolute path
    """
    if relative_path == '/' or relative_path == '':
        return os.path.normpath(base_path)

    # Strip leading slashes so the join stays under base_path
    relative_path = relative_path.lstrip('/')

    return os.path.normpath(os.path.join(base_path, relative_path))


def is_path_within(path: str, base_path: str) -> bool:
    """
    Check if a path is the base directory or lies beneath it

    Args:
        path: The path to check
        base_path: The root directory

    Returns:
        True if the path is inside base_path, False otherwise
    """
    norm_path = os.path.normpath(path)
    norm_base = os.path.normpath(base_path)

    try:
        common_path = os.path.commonpath([norm_path, norm_base])
    except ValueError:
        # Mixed absolute/relative paths or different drives
        return False

    return common_path == norm_base


def is_real_path_within(path: str, base_path: str) -> bool:
    """
    Check if a path stays inside the base directory once symlinks are resolved

    Args:
        path: An existing path
        base_path: The root directory

    Returns:
        True if the resolved path is inside the resolved base_path
    """
    return is_path_within(os.path.realpath(path), os.path.realpath(base_path))
