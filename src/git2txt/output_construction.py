from __future__ import annotations

import re
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from git2txt.exceptions import AggregateFormatError

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

FILE_MARKER = "**** File: "
DIRECTORY_MARKER = "**** Directory: "
OMITTED_MARKER = "**** Omitted: "

_SIZE_UNITS = ("B", "kB", "MB", "GB", "TB", "PB")

_FILE_HEADER_RE = re.compile(
    r"\*\*\*\* File: (?P<path>.*), size: (?P<human>[^,\n]*), bytes: (?P<size>\d+), chars: (?P<chars>\d+)\n\n",
)
_SKIPPED_LINE_RE = re.compile(
    r"(?:\*\*\*\* (?:Directory|Omitted): [^\n]*|Total \d+ files were omitted due to the max-files limit)(?:\n|\Z)",
)


def format_size(size_bytes: int) -> str:
    """Render a byte count the way humans read it (decimal units, two decimals at most).

    Args:
        size_bytes (int): the size to render

    Returns:
        str: e.g. "5 B", "1.2 kB", "1.05 MB"
    """
    value = float(size_bytes)
    unit = _SIZE_UNITS[0]
    for unit in _SIZE_UNITS:
        if value < 1000 or unit == _SIZE_UNITS[-1]:  # noqa: PLR2004
            break
        value /= 1000
    if unit == "B":
        return f"{int(value)} B"
    return f"{round(value, 2):g} {unit}"


def truncation_marker(threshold_bytes: int) -> str:
    """Marker appended to content cut at the size threshold."""
    return f"\n\n[Truncated: file size exceeds {format_size(threshold_bytes)}]\n"


def render_file(relative_path: str, size_bytes: int, content: str) -> str:
    """Format a single file as a self-delimited fragment.

    The header carries the character length of the content so a reader can split
    the aggregate back into files whatever the files themselves contain.

    Args:
        relative_path (str): path relative to the repository root
        size_bytes (int): the on-disk size of the file
        content (str): the final (possibly truncated) content

    Returns:
        str: the fragment
    """
    header = (
        f"{FILE_MARKER}{relative_path}, size: {format_size(size_bytes)}, "
        f"bytes: {size_bytes}, chars: {len(content)}"
    )
    return f"\n{header}\n\n{content}\n"


def render_directory(relative_path: str) -> str:
    return f"\n{DIRECTORY_MARKER}{relative_path}\n"


def render_cutoff(first_omitted: str, omitted_count: int) -> str:
    """Format the one-time marker emitted where the max-files cutoff is first crossed."""
    return f"\n{OMITTED_MARKER}{first_omitted}, {omitted_count} files omitted due to max-files limit\n"


def render_omitted_summary(omitted_count: int) -> str:
    return f"\n\nTotal {omitted_count} files were omitted due to the max-files limit\n"


class ParsedFragment(BaseModel):
    """A file recovered from an aggregated text."""

    model_config = ConfigDict(frozen=True)

    relative_path: str = Field(..., description="Path relative to the repository root")
    size_bytes: int = Field(..., ge=0, description="On-disk size recorded in the header")
    content: str = Field(..., description="Emitted content, truncation marker included")


def iter_fragments(text: str) -> Iterator[ParsedFragment]:
    """Split an aggregated text back into file fragments, in order.

    Directory headers, the cutoff marker and the omission summary are skipped.

    Args:
        text (str): the aggregate produced by a run

    Raises:
        AggregateFormatError: when the text does not follow the fragment format.

    Yields:
        ParsedFragment: one record per emitted file
    """
    pos = 0
    end = len(text)
    while pos < end:
        if text[pos] == "\n":
            pos += 1
            continue
        m = _FILE_HEADER_RE.match(text, pos)
        if m:
            start = m.end()
            stop = start + int(m.group("chars"))
            if stop >= end or text[stop] != "\n":
                raise AggregateFormatError(
                    message=f"Truncated fragment for {m.group('path')!r}",
                    position=pos,
                )
            yield ParsedFragment(
                relative_path=m.group("path"),
                size_bytes=int(m.group("size")),
                content=text[start:stop],
            )
            pos = stop + 1
            continue
        m = _SKIPPED_LINE_RE.match(text, pos)
        if m:
            pos = m.end()
            continue
        raise AggregateFormatError(message="Unexpected text outside of a fragment", position=pos)


def parse_aggregate(text: str) -> list[ParsedFragment]:
    """Eager variant of `iter_fragments`."""
    return list(iter_fragments(text))


def read_aggregate(path: Path) -> list[ParsedFragment]:
    """Parse an aggregate file written by git2txt.

    The file is read without newline translation: `chars` counts in the headers
    include any carriage returns of the original files.

    Raises:
        OSError: when the file cannot be read.
        AggregateFormatError: when the text does not follow the fragment format.
    """
    with path.open(encoding="utf-8", newline="") as f:
        return parse_aggregate(f.read())
