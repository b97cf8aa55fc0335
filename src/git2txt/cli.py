"""
git2txt: convert a public GitHub repository into a single readable text file.

Overview
--------
The repository is shallow-cloned into a temporary directory, its tree is walked
(files of a directory first, then its subdirectories, in name order) and every
selected file is appended to one text artifact as a self-delimited fragment:

    **** File: src/app.py, size: 1.2 kB, bytes: 1204, chars: 1204

    <content>

Binary files and files above the size threshold are skipped unless `--include-all`
is given; `--truncate` keeps the head of oversized text files instead. `--ignore`
takes comma-separated globs (`build/**`, `**/*.lock`); `.git` and `node_modules`
are always ignored.

Usage
-----
    git2txt https://github.com/username/repository
    git2txt username/repository --output=output.txt --threshold 0.5 --truncate
    git2txt username/repository --max-files 100 --ignore "docs/**,**/*.svg"
    git2txt username/repository --config git2txt.yaml --log-file run.log
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import TYPE_CHECKING, Any

from dotenv import load_dotenv
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from git2txt import __version__
from git2txt.exceptions import FetchError, Git2TxtError, InvalidInputError, OutputWriteError, ProcessingError
from git2txt.logging import logger, setup_logging
from git2txt.repository import cleanup, download_repository, validate_input
from git2txt.settings import ENV_FILE, Settings, load_config_file
from git2txt.walker import process_files

if TYPE_CHECKING:
    from collections.abc import Sequence

    from git2txt.repository import FetchedRepository

FETCH_HINTS = (
    "The repository exists and is public",
    "You have the correct repository URL",
    "GitHub is accessible from your network",
    "Git is installed and accessible from command line",
)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser.

    Defaults are suppressed so that only flags given explicitly override values
    coming from a `--config` file; the Settings model owns the real defaults.
    """
    p = argparse.ArgumentParser(
        prog="git2txt",
        description="Convert a GitHub repository into a single text file.",
        argument_default=argparse.SUPPRESS,
    )
    p.add_argument("repository", nargs="?", help="GitHub repository URL or owner/repo.")
    p.add_argument("-o", "--output", type=str, help="Output file path (default: <repo>.txt).")
    p.add_argument("-t", "--threshold", type=float, help="File size threshold in MB (default: 0.1).")
    p.add_argument(
        "--max-files",
        type=int,
        help="Maximum number of files to process, 0 for unlimited (default: 0).",
    )
    p.add_argument("--truncate", action="store_true", help="Truncate large files instead of skipping them.")
    p.add_argument(
        "--include-all",
        action="store_true",
        help="Include all files regardless of size or type.",
    )
    p.add_argument("--ignore", type=str, help="Comma-separated list of glob patterns to ignore.")
    p.add_argument("--debug", action="store_true", help="Enable debug logging.")
    p.add_argument("--log-file", type=str, help="Log file path.")
    p.add_argument("--config", type=str, help="YAML file with default settings.")
    p.add_argument("--git", type=str, help="git executable (default: $GIT2TXT_GIT or git).")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return p


def parse_args(argv: Sequence[str] | None = None) -> Settings:
    """Parse CLI arguments into Settings, layered over an optional config file.

    Raises:
        InvalidInputError: if the config file or a flag value is invalid.
    """
    args: dict[str, Any] = vars(build_parser().parse_args(argv))
    data: dict[str, Any] = {}
    if args.get("config"):
        data.update(load_config_file(args["config"]))
    data.update(args)
    try:
        return Settings(**data)
    except ValidationError as e:
        raise InvalidInputError(message=f"Invalid options: {e}") from e


def write_output(content: str, output_path: Path) -> None:
    """Persist the aggregate verbatim, line endings included.

    Raises:
        OutputWriteError: if the file cannot be written.
    """
    try:
        output_path.write_text(content, encoding="utf-8", newline="")
    except OSError as e:
        raise OutputWriteError(message=f"Failed to write output file {output_path}: {e}", path=output_path) from e
    logger.info("output_written", path=str(output_path), chars=len(content))


def report_error(console: Console, error: Git2TxtError) -> None:
    console.print(f"[red]Error:[/red] {escape(str(error))}")
    if isinstance(error, FetchError):
        console.print("[red]Could not access the repository. Please check:[/red]")
        for idx, hint in enumerate(FETCH_HINTS, start=1):
            console.print(f"[yellow]  {idx}. {hint}[/yellow]")


def main(argv: Sequence[str] | None = None) -> int:
    """Run git2txt end to end and return the process exit status."""
    load_dotenv(ENV_FILE)
    console = Console(stderr=True)
    fetched: FetchedRepository | None = None
    try:
        settings = parse_args(argv)
        if settings.log_file or settings.debug:
            setup_logging(settings.log_file or None, debug=settings.debug)
        url = validate_input([settings.repository] if settings.repository else [])

        with console.status("Downloading repository..."):
            fetched = download_repository(url, git=settings.git)
        console.print("[green]✔[/green] Repository downloaded successfully")

        with console.status("Processing files..."):
            result = process_files(fetched.root, settings.processing_options())
        console.print(
            f"[green]✔[/green] Processed {result.processed_count} files successfully "
            f"({result.skipped_count} skipped, {result.omitted_count} omitted)",
        )
        if not result.aggregated_text:
            raise ProcessingError(message="No content was generated from the repository", root=fetched.root)

        output_path = settings.output_path(fetched.name)
        with console.status("Writing output file..."):
            write_output(result.aggregated_text, output_path)
        console.print(f"[green]✔[/green] Output saved to [green]{escape(str(output_path))}[/green]")
    except Git2TxtError as e:
        logger.error("run_failed", error=str(e), kind=type(e).__name__)
        report_error(console, e)
        return 1
    finally:
        if fetched is not None:
            cleanup(fetched.root)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
