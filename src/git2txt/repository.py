from __future__ import annotations

import re
import shutil
import subprocess  # noqa: S404
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from git2txt.exceptions import FetchError, GitCommandError, InvalidInputError
from git2txt.logging import logger

if TYPE_CHECKING:
    from collections.abc import Sequence

_SHORTHAND_RE = re.compile(r"^[\w-]+/[\w-]+$")
TEMP_PREFIX = "git2txt-"


class FetchedRepository(BaseModel):
    """A repository cloned into a temporary directory."""

    model_config = ConfigDict(frozen=True)

    root: Path = Field(..., description="Absolute path of the working tree")
    name: str = Field(..., description="Logical repository name, used for the default output file")


def validate_input(args: Sequence[str] | None) -> str:
    """Check the positional arguments and return the repository reference.

    Args:
        args (Sequence[str] | None): positional CLI arguments

    Raises:
        InvalidInputError: when no reference is given, or it does not point to GitHub.

    Returns:
        str: the repository reference, untouched
    """
    if not args:
        raise InvalidInputError(message="Repository URL is required")
    url = args[0]
    if "github.com" not in url and not _SHORTHAND_RE.match(url):
        raise InvalidInputError(message="Only GitHub repositories are supported")
    return url


def normalize_github_url(url: str) -> str:
    """Normalize the accepted GitHub reference formats to a cloneable URL.

    - `git@github.com:owner/repo(.git)` and `https://github.com/...` are kept,
    - `owner/repo` becomes `https://github.com/owner/repo`,
    - trailing slashes are dropped.

    Args:
        url (str): the repository reference

    Raises:
        InvalidInputError: for any other format.

    Returns:
        str: the normalized URL
    """
    stripped = url.rstrip("/")
    if stripped.startswith(("git@github.com:", "https://github.com/")):
        return stripped
    if _SHORTHAND_RE.match(stripped):
        return f"https://github.com/{stripped}"
    raise InvalidInputError(message=f"Invalid GitHub URL: {url}")


def repository_name(url: str) -> str:
    """Return the last path segment of a repository reference, without `.git`."""
    last = url.rstrip("/").rsplit("/", 1)[-1].rsplit(":", 1)[-1]
    return last.removesuffix(".git")


def cleanup(directory: Path) -> None:
    """Remove a temporary clone; failures are logged, never raised."""
    try:
        shutil.rmtree(directory)
    except FileNotFoundError:
        return
    except OSError as e:
        logger.warning("cleanup_failed", path=str(directory), error=str(e))


def download_repository(url: str, *, git: str = "git") -> FetchedRepository:
    """Shallow-clone a public GitHub repository into a fresh temporary directory.

    Args:
        url (str): the repository reference (any format accepted by `normalize_github_url`)
        git (str): the git executable to invoke

    Raises:
        InvalidInputError: if the reference cannot be normalized.
        GitCommandError: if `git clone` exits with a non-zero status.
        FetchError: if git cannot be run or the clone is empty.

    Returns:
        FetchedRepository: the clone location and the repository name
    """
    normalized = normalize_github_url(url)
    name = repository_name(url)
    temp_dir = Path(tempfile.mkdtemp(prefix=TEMP_PREFIX))
    command = [git, "clone", "--depth", "1", normalized, str(temp_dir)]
    logger.info("clone_started", url=normalized, destination=str(temp_dir))
    try:
        subprocess.run(  # noqa: S603
            command,
            text=True,
            capture_output=True,
            check=True,
        )
        if not any(temp_dir.iterdir()):
            raise FetchError(message="Repository appears to be empty")
    except subprocess.CalledProcessError as e:
        cleanup(temp_dir)
        logger.error("clone_failed", url=normalized, returncode=e.returncode, stderr=e.stderr)
        raise GitCommandError(
            message=f"Could not access the repository {normalized}",
            command=" ".join(command),
            returncode=e.returncode,
            stdout=e.stdout or "",
            stderr=e.stderr or "",
        ) from e
    except OSError as e:
        cleanup(temp_dir)
        logger.error("clone_failed", url=normalized, error=str(e))
        raise FetchError(message=f"Could not run {git}: {e}") from e
    except FetchError:
        cleanup(temp_dir)
        raise
    logger.info("clone_finished", url=normalized, destination=str(temp_dir))
    return FetchedRepository(root=temp_dir, name=name)
