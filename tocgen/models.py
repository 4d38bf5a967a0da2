"""Core data models shared across tocgen components."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple


@dataclass(frozen=True)
class HeadingRecord:
    """A heading recognised by the scanner."""

    level: int
    text: str
    source_line: int
    style: str = "atx"

    @property
    def line_span(self) -> int:
        """Number of source lines the heading occupies (setext adds an underline)."""
        return 2 if self.style == "setext" else 1

    @property
    def last_line(self) -> int:
        return self.source_line + self.line_span - 1


@dataclass
class OutlineNode:
    """Node in the heading hierarchy; the root carries no heading."""

    heading: Optional[HeadingRecord] = None
    anchor: str = ""
    children: List["OutlineNode"] = field(default_factory=list)

    @property
    def level(self) -> int:
        return self.heading.level if self.heading is not None else 0

    @property
    def text(self) -> str:
        return self.heading.text if self.heading is not None else ""

    def walk(self) -> Iterator[Tuple[int, "OutlineNode"]]:
        """Yield ``(depth, node)`` in document order, excluding this node.

        Children of this node have depth 1. Uses an explicit stack so deeply
        nested outlines do not hit the recursion limit.
        """
        stack: List[Tuple[int, OutlineNode]] = [(1, child) for child in reversed(self.children)]
        while stack:
            depth, node = stack.pop()
            yield depth, node
            stack.extend((depth + 1, child) for child in reversed(node.children))

    def anchors(self) -> List[str]:
        return [node.anchor for _, node in self.walk()]


@dataclass(frozen=True)
class TocBlock:
    """Line span of an existing TOC block, marker lines included."""

    start: int
    end: int


__all__ = ["HeadingRecord", "OutlineNode", "TocBlock"]
