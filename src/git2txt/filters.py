from __future__ import annotations

import glob
import re
from typing import TYPE_CHECKING

from git2txt.config import BUILTIN_IGNORE_PATTERNS, normalize_globs

if TYPE_CHECKING:
    from collections.abc import Sequence


def compile_glob(pattern: str) -> re.Pattern[str]:
    """Compile a path glob into a case-sensitive regular expression.

    `*` and `?` stay within one path segment, `**` spans any number of segments
    (including none) and wildcards also match names starting with a dot.

    Args:
        pattern (str): the glob pattern, relative to the repository root

    Returns:
        re.Pattern[str]: a compiled pattern to be used with `match`
    """
    pattern = pattern.removeprefix("./")
    return re.compile(glob.translate(pattern, recursive=True, include_hidden=True, seps="/"))


class PathFilter:
    """Decide whether a repository-relative path is ignored.

    The built-in patterns (version-control metadata and dependency cache directories)
    are always active on top of the user-supplied ones.
    """

    def __init__(self, ignore_patterns: Sequence[str] = ()) -> None:
        self.patterns: tuple[str, ...] = (*normalize_globs(list(ignore_patterns)), *BUILTIN_IGNORE_PATTERNS)
        self._compiled = [compile_glob(p) for p in self.patterns]

    def is_ignored(self, relative_path: str, *, is_dir: bool = False) -> bool:
        """Check a path against every ignore pattern.

        Directories are additionally tested with a trailing slash so that `build/**`
        prunes `build` itself rather than only its descendants.

        Args:
            relative_path (str): POSIX path relative to the repository root
            is_dir (bool): whether the path names a directory

        Returns:
            bool: True if any pattern matches
        """
        candidates = [relative_path]
        if is_dir:
            candidates.append(relative_path.rstrip("/") + "/")
        return any(rx.match(c) for rx in self._compiled for c in candidates)

    def __repr__(self) -> str:
        return f"PathFilter(patterns={list(self.patterns)!r})"
