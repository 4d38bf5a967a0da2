"""Heading detection for Markdown documents."""

from __future__ import annotations

import codecs
import re
from typing import Container, Iterable, Iterator, List, Optional, Tuple

from .errors import DecodeError
from .models import HeadingRecord

MAX_HEADING_LEVEL = 6

_ATX_PATTERN = re.compile(r"^ {0,3}(#+)(?:[ \t]+(.*))?$")
_ATX_CLOSING = re.compile(r"(?:^|[ \t]+)#+[ \t]*$")
_SETEXT_UNDERLINE = re.compile(r"^ {0,3}(=+|-+)[ \t]*$")
_FENCE_OPEN = re.compile(r"^ {0,3}(`{3,}|~{3,})(.*)$")
_FENCE_CLOSE = re.compile(r"^ {0,3}(`{3,}|~{3,})[ \t]*$")
_NOT_PARAGRAPH = re.compile(r"^(?: {4,}|\t| {0,3}(?:[-+*]|\d{1,9}[.)])(?:[ \t]|$)| {0,3}[>|<])")
_FRONT_MATTER_CLOSE = {"---", "..."}


def iter_lines(text: str) -> Iterator[str]:
    """Yield lines split on ``\\n`` only, each keeping its terminator."""
    position = 0
    length = len(text)
    while position < length:
        newline = text.find("\n", position)
        if newline == -1:
            yield text[position:]
            return
        yield text[position : newline + 1]
        position = newline + 1


def split_lines(text: str) -> List[str]:
    """Return ``iter_lines`` as a list; ``"".join`` of the result is ``text``."""
    return list(iter_lines(text))


def line_content(line: str) -> str:
    """Strip the line terminator and a leading byte order mark."""
    return line.rstrip("\r\n").lstrip("\ufeff")


def decode_document(data: bytes, *, encoding: str = "utf-8", source: str = "<input>") -> str:
    """Decode raw document bytes, raising :class:`DecodeError` for non-text input."""
    try:
        text = codecs.decode(data, encoding)
    except UnicodeDecodeError as exc:
        raise DecodeError(source, f"invalid {encoding} at byte {exc.start}") from exc
    except LookupError as exc:
        raise DecodeError(source, f"unknown encoding {encoding!r}") from exc
    if "\x00" in text:
        raise DecodeError(source, "contains NUL characters")
    return text


class FenceTracker:
    """Tracks whether lines fall inside a verbatim region.

    Verbatim regions are fenced code blocks and a leading YAML front matter
    block. ``feed`` must see every line of the document in order.
    """

    def __init__(self) -> None:
        self._fence: Optional[str] = None
        self._front_matter = False
        self._line_index = 0

    @property
    def inside(self) -> bool:
        return self._fence is not None or self._front_matter

    @property
    def in_front_matter(self) -> bool:
        return self._front_matter

    def feed(self, line: str) -> bool:
        """Consume one line and return True if it belongs to a verbatim region."""
        content = line_content(line)
        first_line = self._line_index == 0
        self._line_index += 1

        if self._front_matter:
            if content.rstrip() in _FRONT_MATTER_CLOSE:
                self._front_matter = False
            return True
        if first_line and content.rstrip() == "---":
            self._front_matter = True
            return True

        if self._fence is not None:
            match = _FENCE_CLOSE.match(content)
            if match and match.group(1)[0] == self._fence[0] and len(match.group(1)) >= len(self._fence):
                self._fence = None
            return True

        match = _FENCE_OPEN.match(content)
        if match:
            fence, info = match.groups()
            # Backtick fences cannot carry backticks in their info string.
            if fence[0] == "`" and "`" in info:
                return False
            self._fence = fence
            return True
        return False


def front_matter_end(lines: Iterable[str]) -> int:
    """Return the index of the first line after a leading front matter block.

    Documents without front matter, or whose front matter is never closed,
    start at line 0.
    """
    tracker = FenceTracker()
    for index, line in enumerate(lines):
        tracker.feed(line)
        if not tracker.in_front_matter:
            return index + 1 if index > 0 else 0
    return 0


class HeadingScanner:
    """Produces :class:`HeadingRecord` items from document text in one forward pass."""

    def __init__(self, *, max_level: int = MAX_HEADING_LEVEL, setext: bool = True) -> None:
        if not 1 <= max_level <= MAX_HEADING_LEVEL:
            raise ValueError(f"max_level must be between 1 and {MAX_HEADING_LEVEL}")
        self.max_level = max_level
        self.setext = setext

    def scan(self, text: str, *, skip: Container[int] = ()) -> Iterator[HeadingRecord]:
        return self.scan_lines(iter_lines(text), skip=skip)

    def scan_lines(
        self, lines: Iterable[str], *, skip: Container[int] = ()
    ) -> Iterator[HeadingRecord]:
        """Yield headings from ``lines``; line indices in ``skip`` are never headings."""
        fences = FenceTracker()
        # Candidate setext heading text: (line index, stripped text).
        pending: Optional[Tuple[int, str]] = None

        for index, line in enumerate(lines):
            # feed() sees every line, skipped or not.
            if fences.feed(line) or index in skip:
                pending = None
                continue
            content = line_content(line)

            if self.setext and pending is not None:
                underline = _SETEXT_UNDERLINE.match(content)
                if underline:
                    level = 1 if underline.group(1)[0] == "=" else 2
                    if level <= self.max_level:
                        yield HeadingRecord(
                            level=level,
                            text=pending[1],
                            source_line=pending[0],
                            style="setext",
                        )
                        pending = None
                        continue

            atx = self._match_atx(content)
            # Runs longer than six markers are ordinary paragraph text.
            if atx is not None and atx[0] <= MAX_HEADING_LEVEL:
                level, text = atx
                pending = None
                if level <= self.max_level:
                    yield HeadingRecord(level=level, text=text, source_line=index)
                continue

            if content.strip() and not _NOT_PARAGRAPH.match(content):
                pending = (index, content.strip())
            else:
                pending = None

    @staticmethod
    def _match_atx(content: str) -> Optional[Tuple[int, str]]:
        match = _ATX_PATTERN.match(content)
        if match is None:
            return None
        text = (match.group(2) or "").strip()
        text = _ATX_CLOSING.sub("", text).strip()
        return len(match.group(1)), text


def scan_headings(
    text: str, *, max_level: int = MAX_HEADING_LEVEL, setext: bool = True
) -> Iterator[HeadingRecord]:
    """Lazily scan ``text`` for headings in document order."""
    return HeadingScanner(max_level=max_level, setext=setext).scan(text)


__all__ = [
    "FenceTracker",
    "HeadingScanner",
    "MAX_HEADING_LEVEL",
    "decode_document",
    "front_matter_end",
    "iter_lines",
    "line_content",
    "scan_headings",
    "split_lines",
]
