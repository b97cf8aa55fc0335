from __future__ import annotations

from enum import StrEnum, auto
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

_ = Path()

BUILTIN_IGNORE_PATTERNS: tuple[str, ...] = (
    "**/.git",
    "**/node_modules",
)

DEFAULT_THRESHOLD_MB = 0.1
BYTES_PER_MB = 1024 * 1024
PROBE_BYTES = 8000


class Classification(StrEnum):
    """Outcome of the per-file inclusion policy."""

    INCLUDE_FULL = "include-full"
    INCLUDE_TRUNCATED = "include-truncated"
    SKIP_LARGE = "skip-large"
    SKIP_BINARY = "skip-binary"
    SKIP_UNREADABLE = "skip-unreadable"

    @property
    def is_skip(self) -> bool:
        """Whether the file contributes no content."""
        return self.value.startswith("skip-")


class ProbeResult(StrEnum):
    """Result of sampling the head of a file for text content."""

    TEXT = auto()
    BINARY = auto()
    FAILED = auto()


class FileStatus(StrEnum):
    """Final fate of a visited file entry."""

    INCLUDED = auto()
    OMITTED = auto()
    SKIPPED_LARGE = auto()
    SKIPPED_BINARY = auto()
    SKIPPED_IGNORED = auto()
    SKIPPED_ERROR = auto()


SKIP_STATUS: dict[Classification, FileStatus] = {
    Classification.SKIP_LARGE: FileStatus.SKIPPED_LARGE,
    Classification.SKIP_BINARY: FileStatus.SKIPPED_BINARY,
    Classification.SKIP_UNREADABLE: FileStatus.SKIPPED_ERROR,
}


class WalkState(StrEnum):
    """Lifecycle of a TreeWalker."""

    IDLE = auto()
    WALKING = auto()
    SUCCEEDED = auto()
    FAILED = auto()


def normalize_globs(globs: list[str] | tuple[str, ...]) -> list[str]:
    """Normalize a sequence of path glob patterns.

    Strip whitespace, replace backslashes with forward slashes and drop empty entries,
    keeping the original order.

    Args:
        globs: the glob patterns to normalize

    Returns:
        list[str]: the normalized glob patterns
    """
    out: list[str] = []
    for g in globs:
        g2 = (g or "").strip()
        if not g2:
            continue
        out.append(g2.replace("\\", "/"))
    return out


class ProcessingOptions(BaseModel):
    """Per-run knobs of the aggregation pipeline.

    Attributes:
        size_threshold_bytes: files strictly larger than this are skipped or truncated.
        include_all: bypass both the binary and the size checks.
        truncate_oversized: emit the head of oversized files instead of skipping them.
        max_files: stop emitting content after this many files; 0 means unlimited.
        ignore_patterns: user glob patterns, matched against repository-relative paths.
    """

    model_config = ConfigDict(frozen=True)

    size_threshold_bytes: int = Field(
        default=int(DEFAULT_THRESHOLD_MB * BYTES_PER_MB),
        ge=0,
        description="Size threshold in bytes",
    )
    include_all: bool = Field(default=False, description="Include every non-ignored file")
    truncate_oversized: bool = Field(default=False, description="Truncate instead of skipping")
    max_files: int = Field(default=0, ge=0, description="Maximum files to emit, 0 = unlimited")
    ignore_patterns: tuple[str, ...] = Field(default=(), description="Ignore globs")

    @field_validator("ignore_patterns", mode="before")
    @classmethod
    def _normalize_patterns(cls, value: object) -> tuple[str, ...]:
        if isinstance(value, str):
            value = value.split(",")
        return tuple(normalize_globs(list(value or ())))  # type: ignore[arg-type]


class FileEntry(BaseModel):
    """One file visited during a run."""

    model_config = ConfigDict(frozen=True)

    relative_path: str = Field(..., description="POSIX path relative to the repository root")
    absolute_path: Path = Field(..., description="Absolute file path")
    size_bytes: int = Field(default=0, ge=0, description="File size in bytes (0 when unknown)")
    status: FileStatus


class RunResult(BaseModel):
    """Everything a run hands back to its caller."""

    model_config = ConfigDict(frozen=True)

    aggregated_text: str = ""
    processed_count: int = Field(default=0, ge=0)
    skipped_count: int = Field(default=0, ge=0)
    omitted_count: int = Field(default=0, ge=0)
    failed_directories: tuple[str, ...] = ()
    entries: tuple[FileEntry, ...] = ()

    @property
    def visited_count(self) -> int:
        """Total file entries visited (directories are never counted)."""
        return self.processed_count + self.skipped_count + self.omitted_count
