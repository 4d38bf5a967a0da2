"""Error types surfaced by the tocgen engine."""

from __future__ import annotations


class TocgenError(RuntimeError):
    """Base class for failures reported to the CLI and service layers."""


class DecodeError(TocgenError):
    """Raised when document bytes are not valid text."""

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"{source}: not a text document ({reason})")
        self.source = source
        self.reason = reason


class MalformedTocBlock(TocgenError):
    """Raised when TOC markers in a document cannot be paired unambiguously."""

    def __init__(self, message: str, *, line: int | None = None) -> None:
        detail = f"line {line}: {message}" if line is not None else message
        super().__init__(detail)
        self.line = line


__all__ = ["DecodeError", "MalformedTocBlock", "TocgenError"]
