"""Markdown rendering of heading outlines."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from .models import OutlineNode

_ESCAPE = re.compile(r"([\\\[\]])")


@dataclass(frozen=True)
class RenderOptions:
    """Controls how the outline is serialised."""

    max_depth: Optional[int] = None
    min_level: int = 1
    ordered: bool = False
    link_prefix: str = "#"
    bullet: str = "-"
    indent: Optional[int] = None
    title: Optional[str] = None


def escape_text(text: str) -> str:
    """Backslash-escape characters that would break link text."""
    return _ESCAPE.sub(r"\\\1", text)


class TocRenderer:
    """Serialises an outline into a nested Markdown list."""

    def __init__(self, options: RenderOptions | None = None) -> None:
        self.options = options or RenderOptions()

    def render(self, root: OutlineNode) -> str:
        items = list(self._visible(root))
        if not items:
            return ""

        lines: List[str] = []
        if self.options.title:
            lines.extend([f"**{self.options.title}**", ""])

        counters: List[int] = []
        offsets: List[int] = [0]
        for depth, node in items:
            del counters[depth + 1 :]
            counters.extend([0] * (depth + 1 - len(counters)))
            counters[depth] += 1

            marker = f"{counters[depth]}." if self.options.ordered else self.options.bullet
            column = self._column(depth, offsets)
            del offsets[depth + 1 :]
            offsets.append(column + len(marker) + 1)

            link = f"{self.options.link_prefix}{node.anchor}"
            lines.append(f"{' ' * column}{marker} [{escape_text(node.text)}]({link})")
        return "\n".join(lines) + "\n"

    def _column(self, depth: int, offsets: List[int]) -> int:
        if self.options.indent is not None:
            return depth * self.options.indent
        # Nested items line up with the text of their parent item.
        return offsets[depth] if depth < len(offsets) else offsets[-1]

    def _visible(self, root: OutlineNode) -> Iterator[Tuple[int, OutlineNode]]:
        """Yield ``(render depth, node)`` pairs, zero-based, honouring the level filters."""
        max_depth = self.options.max_depth
        min_level = self.options.min_level
        stack: List[Tuple[int, OutlineNode]] = [(0, child) for child in reversed(root.children)]
        while stack:
            depth, node = stack.pop()
            if max_depth is not None and node.level > max_depth:
                continue
            if node.level < min_level:
                child_depth = depth
            else:
                yield depth, node
                child_depth = depth + 1
            stack.extend((child_depth, child) for child in reversed(node.children))


def render_toc(root: OutlineNode, options: RenderOptions | None = None) -> str:
    """Render ``root`` into a Markdown fragment; an empty outline renders ``""``."""
    return TocRenderer(options).render(root)


__all__ = ["RenderOptions", "TocRenderer", "escape_text", "render_toc"]
