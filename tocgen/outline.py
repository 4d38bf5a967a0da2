"""Assembles the heading hierarchy from a flat heading sequence."""

from __future__ import annotations

from typing import Iterable, List, Tuple

from .models import HeadingRecord, OutlineNode


class OutlineBuilder:
    """Stack-based tree builder.

    Each heading becomes the last child of the nearest preceding heading with
    a lower level. Skipped levels are not padded with placeholder nodes.
    """

    def build(self, entries: Iterable[Tuple[HeadingRecord, str]]) -> OutlineNode:
        root = OutlineNode()
        stack: List[Tuple[int, OutlineNode]] = [(0, root)]
        for heading, anchor in entries:
            while stack[-1][0] >= heading.level:
                stack.pop()
            node = OutlineNode(heading=heading, anchor=anchor)
            stack[-1][1].children.append(node)
            stack.append((heading.level, node))
        return root


def build_outline(entries: Iterable[Tuple[HeadingRecord, str]]) -> OutlineNode:
    """Return the synthetic root of the outline for ``(heading, anchor)`` pairs."""
    return OutlineBuilder().build(entries)


__all__ = ["OutlineBuilder", "build_outline"]
