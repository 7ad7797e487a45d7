from __future__ import annotations

import pytest

from quick_capture.capture_parsing import normalize_names, parse_capture


def test_leading_markers_are_extracted() -> None:
    result = parse_capture("#work +Health walk the dog")
    assert result.tags == ["work"]
    assert result.projects == ["Health"]
    assert result.cleaned_content == "walk the dog"


def test_trailing_markers_are_extracted() -> None:
    result = parse_capture("walk the dog #work +Health")
    assert result.tags == ["work"]
    assert result.projects == ["Health"]
    assert result.cleaned_content == "walk the dog"


def test_middle_marker_is_incidental_text() -> None:
    result = parse_capture("walk #work the dog")
    assert result.tags == []
    assert result.projects == []
    assert result.cleaned_content == "walk #work the dog"


def test_quoted_project_name() -> None:
    result = parse_capture('+"Project Two" call client')
    assert result.projects == ["Project Two"]
    assert result.cleaned_content == "call client"


def test_duplicate_tags_keep_first_casing() -> None:
    result = parse_capture("#Work #work")
    assert result.tags == ["Work"]
    assert result.cleaned_content == ""


def test_raw_content_is_preserved_and_whitespace_trimmed() -> None:
    raw = "  #errand   buy  milk  "
    result = parse_capture(raw)
    assert result.raw_content == raw
    assert result.tags == ["errand"]
    assert result.cleaned_content == "buy milk"


def test_tag_with_embedded_newline_is_not_extracted() -> None:
    result = parse_capture("#work\n buy milk")
    assert result.tags == []
    assert result.cleaned_content.startswith("#work\n")


def test_empty_input() -> None:
    result = parse_capture("")
    assert result.tags == []
    assert result.projects == []
    assert result.cleaned_content == ""


@pytest.mark.parametrize(
    "text",
    [
        "#work +Health walk the dog",
        "walk #work the dog",
        "#a walk #b the",
        "x #bad! #c y",
        '+"Project Two" call client #urgent',
        "#ok #bad! #also walk",
    ],
)
def test_cleaning_is_idempotent(text: str) -> None:
    first = parse_capture(text)
    second = parse_capture(first.cleaned_content)
    assert second.tags == []
    assert second.projects == []
    assert second.cleaned_content == first.cleaned_content


def test_normalize_names_dedupes_case_insensitively() -> None:
    assert normalize_names(["Work", " work ", "", "home", "HOME"]) == ["Work", "home"]
