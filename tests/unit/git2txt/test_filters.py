from __future__ import annotations

import pytest

from git2txt.filters import PathFilter, compile_glob


@pytest.mark.unit
@pytest.mark.parametrize(
    ("rel", "is_dir"),
    [(".git", True), ("vendor/node_modules", True), (".git", False), ("node_modules", True)],
)
def test_builtin_patterns_are_always_active(rel: str, is_dir: bool) -> None:
    assert PathFilter([]).is_ignored(rel, is_dir=is_dir)


@pytest.mark.unit
def test_empty_pattern_list_ignores_nothing_else() -> None:
    path_filter = PathFilter([])

    assert not path_filter.is_ignored("a.txt")
    assert not path_filter.is_ignored("src", is_dir=True)
    assert not path_filter.is_ignored(".github/workflows/ci.yml")


@pytest.mark.unit
def test_directory_glob_matches_directory_itself_and_descendants() -> None:
    path_filter = PathFilter(["build/**"])

    assert path_filter.is_ignored("build", is_dir=True)
    assert path_filter.is_ignored("build/out/app.js")
    assert not path_filter.is_ignored("src/build", is_dir=True)
    assert not path_filter.is_ignored("build.py")


@pytest.mark.unit
def test_single_star_stays_within_a_segment() -> None:
    path_filter = PathFilter(["*.log"])

    assert path_filter.is_ignored("debug.log")
    assert not path_filter.is_ignored("logs/debug.log")


@pytest.mark.unit
def test_double_star_spans_zero_or_more_segments() -> None:
    path_filter = PathFilter(["**/*.log"])

    assert path_filter.is_ignored("debug.log")
    assert path_filter.is_ignored("a/b/c/debug.log")


@pytest.mark.unit
def test_question_mark_and_bracket_classes() -> None:
    path_filter = PathFilter(["a?.txt", "[xy].md"])

    assert path_filter.is_ignored("ab.txt")
    assert not path_filter.is_ignored("abc.txt")
    assert path_filter.is_ignored("x.md")
    assert not path_filter.is_ignored("z.md")


@pytest.mark.unit
def test_matching_is_case_sensitive() -> None:
    path_filter = PathFilter(["*.TXT"])

    assert not path_filter.is_ignored("a.txt")
    assert path_filter.is_ignored("A.TXT")


@pytest.mark.unit
def test_patterns_are_normalized() -> None:
    path_filter = PathFilter(["  docs\\** ", "", "./dist/**"])

    assert path_filter.patterns[:2] == ("docs/**", "./dist/**")
    assert path_filter.is_ignored("docs", is_dir=True)
    assert path_filter.is_ignored("dist/bundle.js")


@pytest.mark.unit
def test_wildcards_match_dotfiles() -> None:
    assert compile_glob("*").match(".env")
