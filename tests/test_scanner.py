"""Tests for tocgen.scanner."""

from __future__ import annotations

import pytest

from tocgen.errors import DecodeError
from tocgen.models import HeadingRecord
from tocgen.scanner import (
    HeadingScanner,
    decode_document,
    front_matter_end,
    scan_headings,
    split_lines,
)


def _summary(text: str, **kwargs) -> list[tuple[int, str, int]]:
    return [(h.level, h.text, h.source_line) for h in scan_headings(text, **kwargs)]


def test_scan_recognises_atx_levels_in_order() -> None:
    text = "# One\nbody\n## Two\n### Three\n"
    assert _summary(text) == [(1, "One", 0), (2, "Two", 2), (3, "Three", 3)]


def test_scan_strips_closing_sequence_and_whitespace() -> None:
    assert _summary("##   Title  ##  \n") == [(2, "Title", 0)]
    assert _summary("# C# notes\n") == [(1, "C# notes", 0)]


def test_marker_without_text_is_an_empty_heading() -> None:
    assert _summary("#\n##   \n") == [(1, "", 0), (2, "", 1)]


def test_marker_run_beyond_ceiling_is_plain_text() -> None:
    assert _summary("####### seven\n") == []
    assert _summary("#### four\n# one\n", max_level=3) == [(1, "one", 1)]


def test_hash_without_space_is_not_a_heading() -> None:
    assert _summary("#hashtag\n") == []


def test_headings_inside_fenced_blocks_are_ignored() -> None:
    text = "```python\n# comment\n```\n# Real\n"
    assert _summary(text) == [(1, "Real", 3)]


def test_fence_closes_only_on_matching_character_and_length() -> None:
    text = "~~~\n# a\n```\n# b\n~~~~\n# c\n"
    assert _summary(text) == [(1, "c", 5)]


def test_unclosed_fence_runs_to_end_of_document() -> None:
    assert _summary("# Before\n```\n# inside\n") == [(1, "Before", 0)]


def test_setext_headings() -> None:
    text = "Title\n=====\n\nSub\n---\n"
    records = list(scan_headings(text))
    assert records == [
        HeadingRecord(level=1, text="Title", source_line=0, style="setext"),
        HeadingRecord(level=2, text="Sub", source_line=3, style="setext"),
    ]
    assert records[0].last_line == 1


def test_thematic_break_and_list_items_are_not_setext() -> None:
    assert _summary("Text\n\n---\n") == []
    assert _summary("- item\n---\n") == []
    assert _summary("<!-- comment -->\n---\n") == []


def test_setext_can_be_disabled() -> None:
    scanner = HeadingScanner(setext=False)
    assert list(scanner.scan("Title\n=====\n")) == []


def test_front_matter_is_verbatim() -> None:
    text = "---\ntitle: Notes\n---\n# Real\n"
    assert _summary(text) == [(1, "Real", 3)]


@pytest.mark.parametrize(
    "text, expected",
    [
        ("---\ntitle: Notes\n---\n# Real\n", 3),
        ("---\na: 1\n...\n", 3),
        ("# Real\n---\n", 0),
        ("\n---\ntitle: x\n---\n", 0),
        ("---\nnever closed\n", 0),
        ("", 0),
    ],
)
def test_front_matter_end(text: str, expected: int) -> None:
    assert front_matter_end(split_lines(text)) == expected


def test_skipped_lines_never_yield_headings() -> None:
    text = "# Doc\n<!-- begin -->\n## Inside\nTitle\n-----\n<!-- end -->\n## After\n"
    records = HeadingScanner().scan(text, skip=range(1, 6))
    assert [(h.text, h.source_line) for h in records] == [("Doc", 0), ("After", 6)]


def test_skipped_lines_still_track_fences() -> None:
    text = "```\n# hidden\n```\n# Shown\n"
    records = HeadingScanner().scan(text, skip={0})
    assert [h.text for h in records] == ["Shown"]


def test_empty_document_yields_nothing() -> None:
    assert _summary("") == []


def test_scan_is_lazy() -> None:
    records = scan_headings("# A\n")
    assert iter(records) is records
    assert next(records).text == "A"
    with pytest.raises(StopIteration):
        next(records)


def test_crlf_lines_are_handled() -> None:
    assert _summary("# A\r\n## B\r\n") == [(1, "A", 0), (2, "B", 1)]


def test_split_lines_round_trips_text() -> None:
    text = "a\r\nb\n\nc"
    lines = split_lines(text)
    assert lines == ["a\r\n", "b\n", "\n", "c"]
    assert "".join(lines) == text


def test_decode_document_rejects_invalid_bytes() -> None:
    with pytest.raises(DecodeError) as excinfo:
        decode_document(b"# ok\n\xff\xfe", source="bad.md")
    assert excinfo.value.source == "bad.md"


def test_decode_document_keeps_bom_and_scanner_ignores_it() -> None:
    text = decode_document(b"\xef\xbb\xbf# Title\n")
    assert text.startswith("\ufeff")
    assert _summary(text) == [(1, "Title", 0)]
