from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from git2txt.config import ProcessingOptions

TreeFactory = Callable[[Path, dict[str, str | bytes]], Path]


def _make_tree(root: Path, files: dict[str, str | bytes]) -> Path:
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def make_tree() -> TreeFactory:
    """Materialize a mapping of relative path -> content under a root directory."""
    return _make_tree


@pytest.fixture
def sample_repo(tmp_path: Path) -> Path:
    return _make_tree(
        tmp_path / "repo",
        {
            "a.txt": "hello",
            "b.bin": b"\x00\x01\x02\xff\xfe",
            "sub/c.txt": "world",
        },
    )


@pytest.fixture
def default_options() -> ProcessingOptions:
    return ProcessingOptions(size_threshold_bytes=1024 * 1024)
