"""Tests for tocgen.patcher."""

from __future__ import annotations

import pytest

from tocgen.errors import MalformedTocBlock
from tocgen.models import HeadingRecord, TocBlock
from tocgen.patcher import (
    DocumentPatcher,
    InsertionPolicy,
    MarkerConfig,
    find_toc_block,
    patch_document,
)
from tocgen.scanner import scan_headings, split_lines

BEGIN = "<!-- tocgen:begin -->"
END = "<!-- tocgen:end -->"


def test_replaces_existing_block_and_keeps_surroundings() -> None:
    original = f"# T\n\nintro\n{BEGIN}\n- [Old](#old)\n{END}\ntail\n"
    result = patch_document(original, "- [New](#new)\n")
    assert result == f"# T\n\nintro\n{BEGIN}\n- [New](#new)\n{END}\ntail\n"


def test_marker_lines_are_preserved_verbatim() -> None:
    original = f"text\n  {BEGIN}  \nstale\n\t{END}\nmore"
    result = patch_document(original, "- x\n")
    assert result == f"text\n  {BEGIN}  \n- x\n\t{END}\nmore"


def test_inserts_after_first_top_level_heading() -> None:
    original = "# Title\nBody\n"
    result = patch_document(original, "- x\n", headings=scan_headings(original))
    assert result == f"# Title\n\n{BEGIN}\n- x\n{END}\n\nBody\n"


def test_first_heading_is_top_level_whatever_its_level() -> None:
    original = "## Preface\n\n# Main\nBody\n"
    result = patch_document(original, "- x\n", headings=scan_headings(original))
    assert result == f"## Preface\n\n{BEGIN}\n- x\n{END}\n\n# Main\nBody\n"


def test_inserts_after_setext_underline() -> None:
    original = "Title\n=====\nBody\n"
    result = patch_document(original, "- x\n", headings=scan_headings(original))
    assert result == f"Title\n=====\n\n{BEGIN}\n- x\n{END}\n\nBody\n"


def test_inserts_at_start_without_top_level_heading() -> None:
    result = patch_document("Just text\n", "")
    assert result == f"{BEGIN}\n{END}\n\nJust text\n"


def test_empty_document_gets_empty_block() -> None:
    assert patch_document("", "") == f"{BEGIN}\n{END}\n"


def test_bottom_policy_terminates_final_line() -> None:
    result = patch_document("# A\ntext", "- x\n", policy=InsertionPolicy.BOTTOM)
    assert result == f"# A\ntext\n\n{BEGIN}\n- x\n{END}\n"


def test_top_policy_ignores_headings() -> None:
    original = "# A\n"
    result = patch_document(
        original, "- x\n", policy=InsertionPolicy.TOP, headings=scan_headings(original)
    )
    assert result == f"{BEGIN}\n- x\n{END}\n\n# A\n"


def test_top_policy_keeps_front_matter_first() -> None:
    original = "---\ntitle: Notes\n---\n# A\n"
    result = patch_document(
        original, "- x\n", policy=InsertionPolicy.TOP, headings=scan_headings(original)
    )
    assert result == f"---\ntitle: Notes\n---\n\n{BEGIN}\n- x\n{END}\n\n# A\n"


def test_document_start_is_below_front_matter() -> None:
    result = patch_document("---\ntitle: Notes\n---\n\nJust text\n", "")
    assert result == f"---\ntitle: Notes\n---\n\n{BEGIN}\n{END}\n\nJust text\n"


def test_crlf_documents_keep_their_line_endings() -> None:
    original = "# A\r\nBody\r\n"
    result = patch_document(original, "- x\n", headings=scan_headings(original))
    assert result == f"# A\r\n\r\n{BEGIN}\r\n- x\r\n{END}\r\n\r\nBody\r\n"


def test_custom_markers() -> None:
    markers = MarkerConfig(start="<!-- toc -->", end="<!-- /toc -->")
    original = "intro\n<!-- toc -->\nold\n<!-- /toc -->\n"
    assert patch_document(original, "- y\n", markers) == "intro\n<!-- toc -->\n- y\n<!-- /toc -->\n"


def test_start_without_end_is_malformed() -> None:
    with pytest.raises(MalformedTocBlock) as excinfo:
        patch_document(f"# A\n{BEGIN}\n- x\n", "")
    assert excinfo.value.line == 2


def test_two_blocks_are_malformed() -> None:
    original = f"{BEGIN}\n{END}\ntext\n{BEGIN}\n{END}\n"
    with pytest.raises(MalformedTocBlock) as excinfo:
        patch_document(original, "")
    assert excinfo.value.line == 4


def test_stray_end_marker_is_malformed() -> None:
    with pytest.raises(MalformedTocBlock):
        patch_document(f"text\n{END}\n", "")


def test_markers_inside_fences_are_ignored() -> None:
    original = f"```\n{BEGIN}\n```\n# A\n"
    lines = split_lines(original)
    assert find_toc_block(lines, MarkerConfig()) is None
    result = patch_document(original, "", headings=scan_headings(original))
    assert result == f"```\n{BEGIN}\n```\n# A\n\n{BEGIN}\n{END}\n"


def test_find_toc_block_reports_span() -> None:
    lines = split_lines(f"a\n{BEGIN}\nb\n{END}\nc\n")
    assert find_toc_block(lines, MarkerConfig()) == TocBlock(start=1, end=3)


def test_patcher_reuses_existing_block_after_insertion() -> None:
    patcher = DocumentPatcher()
    headings = [HeadingRecord(level=1, text="A", source_line=0)]
    first = patcher.patch("# A\nBody\n", "- [A](#a)\n", headings)
    assert patcher.patch(first, "- [A](#a)\n", headings) == first


def test_insertion_policy_parse() -> None:
    assert InsertionPolicy.parse("after_first_heading") is InsertionPolicy.AFTER_FIRST_HEADING
    assert InsertionPolicy.parse(" TOP ") is InsertionPolicy.TOP
    with pytest.raises(ValueError):
        InsertionPolicy.parse("middle")
