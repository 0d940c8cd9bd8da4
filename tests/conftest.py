import os
import sys

import pytest

# RFC 7231 example date: Tue, 15 Nov 1994 08:12:31 GMT
EXAMPLE_TIMESTAMP = 784887151
EXAMPLE_HTTP_DATE = "Tue, 15 Nov 1994 08:12:31 GMT"

requires_symlinks = pytest.mark.skipif(
    not hasattr(os, "symlink") or sys.platform == "win32",
    reason="symlinks not available",
)

requires_bytes_names = pytest.mark.skipif(
    not sys.platform.startswith("linux"),
    reason="arbitrary byte file names need a Linux filesystem",
)


def set_mtime(path, timestamp=EXAMPLE_TIMESTAMP):
    os.utime(path, (timestamp, timestamp))


@pytest.fixture
def mixed_dir(tmp_path):
    """Directory holding subdirectory 'b', 'a.txt' (10 bytes) and 'c.txt' (empty)"""
    root = tmp_path / "mixed"
    root.mkdir()
    (root / "b").mkdir()
    (root / "a.txt").write_bytes(b"0123456789")
    (root / "c.txt").write_bytes(b"")
    for name in ("b", "a.txt", "c.txt"):
        set_mtime(root / name)
    return root
