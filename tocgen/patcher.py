"""Managed TOC block replacement and insertion."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional

from .errors import MalformedTocBlock
from .logging import get_logger
from .models import HeadingRecord, TocBlock
from .scanner import FenceTracker, front_matter_end, line_content, split_lines

DEFAULT_START_MARKER = "<!-- tocgen:begin -->"
DEFAULT_END_MARKER = "<!-- tocgen:end -->"


@dataclass(frozen=True)
class MarkerConfig:
    """Sentinel lines that bracket the generated block."""

    start: str = DEFAULT_START_MARKER
    end: str = DEFAULT_END_MARKER

    def is_start(self, line: str) -> bool:
        return line_content(line).strip() == self.start

    def is_end(self, line: str) -> bool:
        return line_content(line).strip() == self.end


class InsertionPolicy(str, Enum):
    """Where a new TOC block goes when the document has none."""

    AFTER_FIRST_HEADING = "after-first-heading"
    TOP = "top"
    BOTTOM = "bottom"

    @classmethod
    def parse(cls, value: str) -> "InsertionPolicy":
        normalised = value.strip().lower().replace("_", "-")
        for policy in cls:
            if policy.value == normalised:
                return policy
        choices = ", ".join(policy.value for policy in cls)
        raise ValueError(f"Unknown insertion policy {value!r} (expected one of: {choices})")


def find_toc_block(lines: Iterable[str], markers: MarkerConfig) -> Optional[TocBlock]:
    """Locate the single TOC block in ``lines``.

    Markers inside fenced code blocks are ignored. A start marker without an
    end marker, a second block, or a stray end marker raises
    :class:`MalformedTocBlock`.
    """
    fences = FenceTracker()
    start: Optional[int] = None
    found: Optional[TocBlock] = None
    for index, line in enumerate(lines):
        if fences.feed(line):
            continue
        if markers.is_start(line):
            if start is not None:
                raise MalformedTocBlock(
                    f"nested start marker {markers.start!r}", line=index + 1
                )
            if found is not None:
                raise MalformedTocBlock(
                    "document contains more than one TOC block", line=index + 1
                )
            start = index
        elif markers.is_end(line):
            if start is None:
                raise MalformedTocBlock(
                    f"end marker {markers.end!r} without a start marker", line=index + 1
                )
            found = TocBlock(start=start, end=index)
            start = None
    if start is not None:
        raise MalformedTocBlock(
            f"start marker {markers.start!r} has no matching end marker", line=start + 1
        )
    return found


def detect_newline(lines: List[str]) -> str:
    for line in lines:
        if line.endswith("\r\n"):
            return "\r\n"
        if line.endswith("\n"):
            return "\n"
    return "\n"


class DocumentPatcher:
    """Replaces or inserts the marker-delimited TOC block in a document."""

    def __init__(
        self,
        markers: MarkerConfig | None = None,
        policy: InsertionPolicy = InsertionPolicy.AFTER_FIRST_HEADING,
    ) -> None:
        self.markers = markers or MarkerConfig()
        self.policy = policy
        self.logger = get_logger("patcher")

    def patch(
        self,
        original: str,
        fragment: str,
        headings: Iterable[HeadingRecord] = (),
    ) -> str:
        """Return ``original`` with the TOC block set to ``fragment``.

        ``headings`` is only consulted when a block has to be inserted.
        """
        lines = split_lines(original)
        newline = detect_newline(lines)
        body = self._body_lines(fragment, newline)

        block = find_toc_block(lines, self.markers)
        if block is not None:
            self.logger.debug("Replacing TOC block at lines %d-%d", block.start + 1, block.end + 1)
            # Marker lines are kept verbatim, terminators included.
            return "".join(
                lines[: block.start + 1] + body + lines[block.end :]
            )

        position = self._insertion_index(lines, headings)
        self.logger.debug("Inserting TOC block before line %d (%s)", position + 1, self.policy.value)
        return self._insert(lines, position, body, newline)

    def _insertion_index(self, lines: List[str], headings: Iterable[HeadingRecord]) -> int:
        # Document start is below any front matter block.
        start = front_matter_end(lines)
        if self.policy is InsertionPolicy.TOP:
            return start
        if self.policy is InsertionPolicy.BOTTOM:
            return len(lines)
        # The first heading is always a top-level child of the outline root.
        first = next(iter(headings), None)
        if first is None:
            return start
        return first.last_line + 1

    def _insert(self, lines: List[str], position: int, body: List[str], newline: str) -> str:
        before = lines[:position]
        after = lines[position:]
        inserted: List[str] = []
        if before:
            if not before[-1].endswith("\n"):
                inserted.append(newline)
            if line_content(before[-1]).strip():
                inserted.append(newline)
        inserted.append(self.markers.start + newline)
        inserted.extend(body)
        inserted.append(self.markers.end + newline)
        if after and line_content(after[0]).strip():
            inserted.append(newline)
        return "".join(before + inserted + after)

    @staticmethod
    def _body_lines(fragment: str, newline: str) -> List[str]:
        return [line_content(line) + newline for line in split_lines(fragment)]


def patch_document(
    original: str,
    fragment: str,
    markers: MarkerConfig | None = None,
    policy: InsertionPolicy = InsertionPolicy.AFTER_FIRST_HEADING,
    headings: Iterable[HeadingRecord] = (),
) -> str:
    """Functional wrapper around :class:`DocumentPatcher`."""
    return DocumentPatcher(markers, policy).patch(original, fragment, headings)


__all__ = [
    "DEFAULT_END_MARKER",
    "DEFAULT_START_MARKER",
    "DocumentPatcher",
    "InsertionPolicy",
    "MarkerConfig",
    "detect_newline",
    "find_toc_block",
    "patch_document",
]
