from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Git2TxtError(Exception):
    """Base exception for errors in the git2txt package."""

    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class InvalidInputError(Git2TxtError):
    """Raised when the repository reference is missing or malformed."""


@dataclass(frozen=True)
class FetchError(Git2TxtError):
    """Raised when the repository cannot be materialized locally."""


@dataclass(frozen=True)
class GitCommandError(FetchError):
    """Raised when a git command fails."""

    command: str = ""
    returncode: int = 0
    stdout: str = ""
    stderr: str = ""


@dataclass(frozen=True)
class ProcessingError(Git2TxtError):
    """Raised when the root of the traversal cannot be listed."""

    root: Path | None = None


@dataclass(frozen=True)
class OutputWriteError(Git2TxtError):
    """Raised when the aggregated text cannot be persisted."""

    path: Path | None = None


@dataclass(frozen=True)
class AggregateFormatError(Git2TxtError):
    """Raised when an aggregated text cannot be split back into file records."""

    position: int = 0
