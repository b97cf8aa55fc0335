from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import find_dotenv
from pydantic import BaseModel, ConfigDict, Field

from git2txt.config import BYTES_PER_MB, DEFAULT_THRESHOLD_MB, ProcessingOptions
from git2txt.exceptions import InvalidInputError

ENV_FILE = find_dotenv(usecwd=True)
ENV_PREFIX = "GIT2TXT_"


def _env(name: str, default: str = "") -> str:
    return os.environ.get(f"{ENV_PREFIX}{name}", default)


class Settings(BaseModel):
    """Configuration settings for one git2txt invocation."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    repository: str = Field(default="", description="GitHub repository URL or owner/repo.")
    output: Path | None = Field(default=None, description="Output file (default: <repo>.txt).")
    threshold: float = Field(default=DEFAULT_THRESHOLD_MB, ge=0, description="File size threshold in MB.")
    truncate: bool = Field(default=False, description="Truncate large files instead of skipping them.")
    max_files: int = Field(default=0, ge=0, description="Maximum files to process, 0 = unlimited.")
    include_all: bool = Field(default=False, description="Include all files regardless of size or type.")
    ignore: str = Field(default="", description="Comma-separated glob patterns to ignore.")
    debug: bool = Field(default=False, description="Verbose logging.")
    log_file: str = Field(default_factory=lambda: _env("LOG_FILE"), description="Log file path.")
    config: str = Field(default="", description="YAML file providing default settings.")
    git: str = Field(default_factory=lambda: _env("GIT", "git"), description="git executable.")

    def processing_options(self) -> ProcessingOptions:
        """Derive the immutable options handed to the tree walker."""
        return ProcessingOptions(
            size_threshold_bytes=int(self.threshold * BYTES_PER_MB),
            include_all=self.include_all,
            truncate_oversized=self.truncate,
            max_files=self.max_files,
            ignore_patterns=self.ignore,
        )

    def output_path(self, repository_name: str) -> Path:
        """Where the aggregate is written when no explicit output was given."""
        return self.output if self.output is not None else Path(f"{repository_name}.txt")


def load_config_file(path: str | Path) -> dict[str, Any]:
    """Load default settings from a YAML mapping.

    Keys are Settings field names; hyphens are accepted in place of underscores and
    list values for `ignore` are joined with commas.

    Args:
        path (str | Path): the YAML file

    Raises:
        InvalidInputError: if the file cannot be read, is not a mapping, or has unknown keys.

    Returns:
        dict[str, Any]: settings values, ready to be overridden by CLI flags
    """
    try:
        data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        raise InvalidInputError(message=f"Cannot load config file {path}: {e}") from e
    if not isinstance(data, dict):
        raise InvalidInputError(message=f"Config file {path} must contain a mapping")

    out: dict[str, Any] = {}
    for key, value in data.items():
        name = str(key).replace("-", "_")
        if name not in Settings.model_fields or name == "config":
            raise InvalidInputError(message=f"Unknown setting {key!r} in {path}")
        if name == "ignore" and isinstance(value, list):
            value = ",".join(str(v) for v in value)  # noqa: PLW2901
        out[name] = value
    return out
