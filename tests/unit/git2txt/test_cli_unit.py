from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from git2txt import __version__, cli
from git2txt.config import ProcessingOptions
from git2txt.exceptions import GitCommandError, InvalidInputError, OutputWriteError
from git2txt.output_construction import read_aggregate
from git2txt.repository import FetchedRepository
from git2txt.walker import process_files

if TYPE_CHECKING:
    from collections.abc import Callable

    from pytest_mock import MockerFixture


@pytest.mark.unit
def test_parse_args_parses_flags() -> None:
    settings = cli.parse_args(
        [
            "octocat/Spoon-Knife",
            "-o",
            "out.txt",
            "-t",
            "0.5",
            "--max-files",
            "10",
            "--truncate",
            "--ignore",
            "docs/**,*.svg",
        ],
    )

    assert settings.repository == "octocat/Spoon-Knife"
    assert settings.output == Path("out.txt")
    assert settings.threshold == 0.5
    assert settings.max_files == 10
    assert settings.truncate is True
    assert settings.include_all is False
    assert settings.ignore == "docs/**,*.svg"
    assert settings.processing_options().ignore_patterns == ("docs/**", "*.svg")


@pytest.mark.unit
def test_parse_args_cli_overrides_config_file(tmp_path: Path) -> None:
    config = tmp_path / "git2txt.yaml"
    config.write_text("max_files: 5\ntruncate: true\nthreshold: 2\n", encoding="utf-8")

    settings = cli.parse_args(["octocat/demo", "--config", str(config), "--max-files", "7"])

    assert settings.max_files == 7
    assert settings.truncate is True
    assert settings.threshold == 2


@pytest.mark.unit
def test_parse_args_rejects_negative_values() -> None:
    with pytest.raises(InvalidInputError, match="Invalid options"):
        cli.parse_args(["octocat/demo", "--max-files", "-1"])


@pytest.mark.unit
def test_parse_args_version_flag(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli.parse_args(["--version"])

    assert exc_info.value.code == 0
    assert __version__ in capsys.readouterr().out


@pytest.mark.unit
def test_write_output_wraps_os_errors(tmp_path: Path) -> None:
    target = tmp_path / "missing-dir" / "out.txt"

    with pytest.raises(OutputWriteError) as exc_info:
        cli.write_output("content", target)

    assert exc_info.value.path == target


@pytest.mark.unit
def test_written_output_keeps_crlf_and_parses_back(tmp_path: Path) -> None:
    repo = tmp_path / "repo"
    repo.mkdir()
    (repo / "win.txt").write_bytes(b"a\r\nb\r\n")
    (repo / "x.txt").write_bytes(b"x")
    result = process_files(repo, ProcessingOptions())
    target = tmp_path / "out.txt"

    cli.write_output(result.aggregated_text, target)

    assert target.read_bytes() == result.aggregated_text.encode("utf-8")
    assert [(p.relative_path, p.content) for p in read_aggregate(target)] == [
        ("win.txt", "a\r\nb\r\n"),
        ("x.txt", "x"),
    ]


@pytest.mark.unit
def test_main_without_repository_fails(mocker: MockerFixture) -> None:
    download = mocker.patch.object(cli, "download_repository")

    assert cli.main([]) == 1
    download.assert_not_called()


@pytest.mark.unit
def test_main_fetch_failure_writes_nothing(tmp_path: Path, mocker: MockerFixture) -> None:
    mocker.patch.object(
        cli,
        "download_repository",
        side_effect=GitCommandError(message="Could not access the repository", returncode=128),
    )
    output = tmp_path / "out.txt"

    assert cli.main(["octocat/missing", "--output", str(output)]) == 1
    assert not output.exists()


@pytest.mark.unit
def test_main_writes_aggregate_and_cleans_up(
    tmp_path: Path,
    mocker: MockerFixture,
    make_tree: Callable[..., Path],
) -> None:
    clone = make_tree(tmp_path / "clone", {"a.txt": "hello", "sub/c.txt": "world"})
    mocker.patch.object(cli, "download_repository", return_value=FetchedRepository(root=clone, name="demo"))
    output = tmp_path / "out.txt"

    assert cli.main(["octocat/demo", "--output", str(output)]) == 0

    content = output.read_text(encoding="utf-8")
    assert "**** File: a.txt, size: 5 B" in content
    assert "world" in content
    assert not clone.exists()


@pytest.mark.unit
def test_main_empty_aggregate_is_an_error(tmp_path: Path, mocker: MockerFixture) -> None:
    clone = tmp_path / "clone"
    clone.mkdir()
    (clone / "blob.bin").write_bytes(b"\x00\x00")
    mocker.patch.object(cli, "download_repository", return_value=FetchedRepository(root=clone, name="demo"))
    output = tmp_path / "out.txt"

    assert cli.main(["octocat/demo", "--output", str(output)]) == 1
    assert not output.exists()
    assert not clone.exists()
