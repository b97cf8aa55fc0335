from __future__ import annotations

from typing import TYPE_CHECKING

from git2txt.config import Classification, ProbeResult

if TYPE_CHECKING:
    from git2txt.config import ProcessingOptions


def classify(size_bytes: int, probe: ProbeResult | None, options: ProcessingOptions) -> Classification:
    """Decide how a candidate file is treated.

    Precedence:
    1) `include_all` short-circuits the binary and size checks.
    2) A failed probe means the file is unreadable (never binary).
    3) A binary probe skips the file, whatever `truncate_oversized` says.
    4) Oversized files are truncated when `truncate_oversized` is set, skipped otherwise.

    Args:
        size_bytes (int): the file size on disk
        probe (ProbeResult | None): the content probe, None when no probe was taken
        options (ProcessingOptions): the run options

    Returns:
        Classification: the inclusion decision
    """
    if options.include_all:
        return Classification.INCLUDE_FULL
    if probe is None or probe is ProbeResult.FAILED:
        return Classification.SKIP_UNREADABLE
    if probe is ProbeResult.BINARY:
        return Classification.SKIP_BINARY
    if size_bytes > options.size_threshold_bytes:
        if options.truncate_oversized:
            return Classification.INCLUDE_TRUNCATED
        return Classification.SKIP_LARGE
    return Classification.INCLUDE_FULL


def needs_probe(options: ProcessingOptions) -> bool:
    """Whether files must be sampled before classification."""
    return not options.include_all
