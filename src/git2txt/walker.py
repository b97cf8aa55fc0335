"""Traversal of a materialized repository into one aggregated text.

Files of a directory are emitted before any of its subdirectories are entered, and
entries are visited in name order, so the output (and which files fall past the
max-files cutoff) is deterministic for a given tree.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from git2txt.classification import classify, needs_probe
from git2txt.config import SKIP_STATUS, Classification, FileEntry, FileStatus, RunResult, WalkState
from git2txt.exceptions import ProcessingError
from git2txt.file_manipulation import probe_file, read_content, relpath, sorted_entries
from git2txt.filters import PathFilter
from git2txt.logging import logger as default_logger
from git2txt.output_construction import (
    render_cutoff,
    render_directory,
    render_file,
    render_omitted_summary,
    truncation_marker,
)

if TYPE_CHECKING:
    import os

    import structlog

    from git2txt.config import ProcessingOptions


class TreeWalker:
    """Walk one repository tree and aggregate the selected files.

    A walker owns its counters and text buffer; `run` resets them, so an instance
    may be reused for several runs but never concurrently.
    """

    def __init__(
        self,
        root: Path,
        options: ProcessingOptions,
        *,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.root = Path(root)
        self.options = options
        self.path_filter = PathFilter(options.ignore_patterns)
        self.logger = logger or default_logger
        self.state = WalkState.IDLE
        self._resolved_root = self.root.resolve()
        self._reset()

    def _reset(self) -> None:
        self._fragments: list[str] = []
        self._entries: list[FileEntry] = []
        self._failed_directories: list[str] = []
        self._processed = 0
        self._skipped = 0
        self._omitted = 0
        self._cutoff_index: int | None = None
        self._first_omitted = ""

    @property
    def cutoff_reached(self) -> bool:
        return bool(self.options.max_files) and self._processed >= self.options.max_files

    def run(self) -> RunResult:
        """Traverse the tree and build the aggregate.

        Raises:
            ProcessingError: when the repository root itself cannot be listed.

        Returns:
            RunResult: the aggregated text and its counters
        """
        self._reset()
        self.state = WalkState.WALKING
        self.logger.info("walk_started", root=str(self.root), options=self.options.model_dump(mode="json"))
        try:
            entries = sorted_entries(self.root)
        except OSError as e:
            self.state = WalkState.FAILED
            self.logger.error("walk_failed", root=str(self.root), error=str(e))
            raise ProcessingError(message=f"Cannot list repository root {self.root}: {e}", root=self.root) from e

        self._walk_directory(entries)

        fragments = list(self._fragments)
        if self._cutoff_index is not None:
            fragments.insert(self._cutoff_index, render_cutoff(self._first_omitted, self._omitted))
        if self._omitted:
            fragments.append(render_omitted_summary(self._omitted))

        self.state = WalkState.SUCCEEDED
        self.logger.info(
            "walk_finished",
            processed=self._processed,
            skipped=self._skipped,
            omitted=self._omitted,
            failed_directories=len(self._failed_directories),
        )
        return RunResult(
            aggregated_text="".join(fragments),
            processed_count=self._processed,
            skipped_count=self._skipped,
            omitted_count=self._omitted,
            failed_directories=tuple(self._failed_directories),
            entries=tuple(self._entries),
        )

    def _walk_directory(self, entries: list[os.DirEntry[str]]) -> None:
        subdirs: list[Path] = []
        for entry in entries:
            if entry.is_symlink() and entry.is_dir():
                self.logger.debug("symlinked_directory_skipped", path=relpath(Path(entry.path), self.root))
                continue
            if entry.is_dir(follow_symlinks=False):
                subdirs.append(Path(entry.path))
                continue
            if entry.is_file() or entry.is_symlink():
                self._visit_file(Path(entry.path))

        for sub in subdirs:
            rel = relpath(sub, self.root)
            if self.path_filter.is_ignored(rel, is_dir=True):
                self.logger.debug("directory_ignored", path=rel)
                continue
            try:
                sub_entries = sorted_entries(sub)
            except OSError as e:
                self.logger.warning("directory_list_failed", path=rel, error=str(e))
                self._failed_directories.append(rel)
                continue
            self._fragments.append(render_directory(rel))
            self._walk_directory(sub_entries)

    def _record(self, path: Path, rel: str, size: int, status: FileStatus) -> None:
        self._entries.append(FileEntry(relative_path=rel, absolute_path=path, size_bytes=size, status=status))
        if status is FileStatus.INCLUDED:
            self._processed += 1
        elif status is FileStatus.OMITTED:
            self._omitted += 1
        else:
            self._skipped += 1
            self.logger.debug("file_skipped", path=rel, reason=str(status))

    def _visit_file(self, path: Path) -> None:
        rel = relpath(path, self.root)
        if self.path_filter.is_ignored(rel):
            self._record(path, rel, 0, FileStatus.SKIPPED_IGNORED)
            return

        if path.is_symlink() and not path.resolve().is_relative_to(self._resolved_root):
            self.logger.warning("symlink_outside_root_skipped", path=rel)
            self._record(path, rel, 0, FileStatus.SKIPPED_ERROR)
            return

        try:
            size = path.stat().st_size
        except OSError as e:
            self.logger.debug("file_stat_failed", path=rel, error=str(e))
            self._record(path, rel, 0, FileStatus.SKIPPED_ERROR)
            return

        probe = probe_file(path) if needs_probe(self.options) else None
        decision = classify(size, probe, self.options)
        if decision.is_skip:
            self._record(path, rel, size, SKIP_STATUS[decision])
            return

        if self.cutoff_reached:
            if self._cutoff_index is None:
                self._cutoff_index = len(self._fragments)
                self._first_omitted = rel
                self.logger.info("max_files_reached", max_files=self.options.max_files, first_omitted=rel)
            self._record(path, rel, size, FileStatus.OMITTED)
            return

        truncated = decision is Classification.INCLUDE_TRUNCATED
        try:
            content = read_content(path, self.options.size_threshold_bytes if truncated else None)
        except OSError as e:
            self.logger.debug("file_read_failed", path=rel, error=str(e))
            self._record(path, rel, size, FileStatus.SKIPPED_ERROR)
            return
        if truncated:
            content += truncation_marker(self.options.size_threshold_bytes)

        self._fragments.append(render_file(rel, size, content))
        self._record(path, rel, size, FileStatus.INCLUDED)
        self.logger.debug("file_processed", path=rel, size=size, truncated=truncated)


def process_files(
    root: Path,
    options: ProcessingOptions,
    *,
    logger: structlog.BoundLogger | None = None,
) -> RunResult:
    """Run a fresh TreeWalker over `root`."""
    return TreeWalker(root, options, logger=logger).run()
