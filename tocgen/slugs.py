"""Anchor generation for heading text."""

from __future__ import annotations

import re
import unicodedata
from typing import Iterable, List, Set

PLACEHOLDER = "section"

_WHITESPACE = re.compile(r"\s+")
_DISALLOWED = re.compile(r"[^a-z0-9 -]")


def normalise(text: str) -> str:
    """Return the bare slug candidate for ``text`` without deduplication."""
    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(char for char in decomposed if not unicodedata.combining(char))
    slug = _WHITESPACE.sub(" ", stripped.lower())
    slug = _DISALLOWED.sub("", slug)
    slug = _WHITESPACE.sub("-", slug)
    return slug.strip("-") or PLACEHOLDER


def slugify(text: str, seen: Set[str]) -> str:
    """Return a unique anchor for ``text`` and record it in ``seen``.

    The first occurrence of a candidate keeps the bare slug; later collisions
    take the smallest free numeric suffix (``-1``, ``-2``, ...).
    """
    candidate = normalise(text)
    slug = candidate
    suffix = 0
    while slug in seen:
        suffix += 1
        slug = f"{candidate}-{suffix}"
    seen.add(slug)
    return slug


class SlugRegistry:
    """Owns the set of anchors issued during a single document run."""

    def __init__(self) -> None:
        self._seen: Set[str] = set()
        self._issued: List[str] = []

    def __contains__(self, slug: object) -> bool:
        return slug in self._seen

    def __len__(self) -> int:
        return len(self._issued)

    def slug(self, text: str) -> str:
        anchor = slugify(text, self._seen)
        self._issued.append(anchor)
        return anchor

    def slug_all(self, texts: Iterable[str]) -> List[str]:
        return [self.slug(text) for text in texts]

    @property
    def issued(self) -> List[str]:
        """Anchors in the order they were handed out."""
        return list(self._issued)


__all__ = ["PLACEHOLDER", "SlugRegistry", "normalise", "slugify"]
