from __future__ import annotations

import codecs
import os
from pathlib import Path

from git2txt.config import PROBE_BYTES, ProbeResult


def relpath(path: Path, root: Path) -> str:
    """Send the relative path of path from root.

    Args:
        path (Path): the path to "relativise"
        root (Path): the root to relativise from

    Returns:
        str: the relative path from root to path, with POSIX separators.
            If path is not under root, returns the original path as a string.
    """
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return str(path)


def probe_file(path: Path, nbytes: int = PROBE_BYTES) -> ProbeResult:
    """Check if path points to a utf-8 encoded text file.

    The first `nbytes` are sampled: a NUL byte or an invalid UTF-8 sequence means binary.
    A multi-byte character cut at the end of the sample is not held against the file.

    Args:
        path (Path): path to test.
        nbytes (int, optional): number of bytes to read for testing. Defaults to 8000.

    Returns:
        ProbeResult: TEXT, BINARY, or FAILED when the file cannot be opened or read.
    """
    try:
        with path.open("rb") as f:
            chunk = f.read(nbytes)
    except OSError:
        return ProbeResult.FAILED
    if b"\x00" in chunk:
        return ProbeResult.BINARY
    try:
        codecs.getincrementaldecoder("utf-8")().decode(chunk, final=False)
    except UnicodeDecodeError:
        return ProbeResult.BINARY
    return ProbeResult.TEXT


def read_content(path: Path, limit: int | None = None) -> str:
    """Read a file as UTF-8 text, optionally only its first `limit` bytes.

    Undecodable bytes are replaced rather than rejected. When `limit` cuts a
    multi-byte character, its leading bytes are dropped, so the decoded text never
    encodes to more than `limit` bytes for valid UTF-8 input.

    Args:
        path (Path): the file path to read
        limit (int | None): maximum number of bytes to read; None reads everything

    Raises:
        OSError: when the file cannot be opened or read.

    Returns:
        str: the decoded content
    """
    with path.open("rb") as f:
        if limit is None:
            return f.read().decode("utf-8", errors="replace")
        data = f.read(limit)
    return codecs.getincrementaldecoder("utf-8")(errors="replace").decode(data, final=False)


def sorted_entries(directory: Path) -> list[os.DirEntry[str]]:
    """List a directory's entries sorted by name.

    Raises:
        OSError: when the directory cannot be listed.
    """
    with os.scandir(directory) as it:
        entries = list(it)
    return sorted(entries, key=lambda e: e.name)
