"""Document discovery for batch runs."""

from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterable, Iterator, List, Sequence

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".venv",
    "venv",
    "node_modules",
    "__pycache__",
    ".pytest_cache",
    ".mypy_cache",
    ".tox",
    ".idea",
}


@dataclass
class ExcludeRule:
    """A gitignore-style exclusion pattern."""

    pattern: str
    directory_only: bool
    anchored: bool

    @classmethod
    def parse(cls, raw: str) -> "ExcludeRule | None":
        pattern = raw.strip()
        if not pattern:
            return None
        directory_only = pattern.endswith("/")
        pattern = pattern.rstrip("/")
        anchored = pattern.startswith("/") or "/" in pattern
        return cls(pattern=pattern.lstrip("/"), directory_only=directory_only, anchored=anchored)

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if self.directory_only and not is_dir:
            return False
        if self.anchored:
            return fnmatchcase(rel_path, self.pattern)
        return any(fnmatchcase(part, self.pattern) for part in rel_path.split("/"))


def _rules(patterns: Iterable[str]) -> List[ExcludeRule]:
    rules: List[ExcludeRule] = []
    for pattern in patterns:
        rule = ExcludeRule.parse(pattern)
        if rule is not None:
            rules.append(rule)
    return rules


def _walk(root: Path, include: Sequence[str], rules: Sequence[ExcludeRule]) -> Iterator[Path]:
    for current, dirnames, filenames in os.walk(root):
        current_path = Path(current)
        rel_dir = current_path.relative_to(root).as_posix()
        prefix = "" if rel_dir == "." else f"{rel_dir}/"

        kept = []
        for name in sorted(dirnames):
            if name in _EXCLUDED_DIRS:
                continue
            if any(rule.matches(prefix + name, True) for rule in rules):
                continue
            kept.append(name)
        dirnames[:] = kept

        for name in sorted(filenames):
            if not any(fnmatchcase(name, pattern) for pattern in include):
                continue
            if any(rule.matches(prefix + name, False) for rule in rules):
                continue
            yield current_path / name


def discover_documents(
    paths: Iterable[Path],
    *,
    include: Sequence[str] = ("*.md", "*.markdown"),
    exclude: Sequence[str] = (),
) -> List[Path]:
    """Expand ``paths`` into document files.

    Files are returned as given. Directories are walked recursively in sorted
    order, keeping files whose name matches one of ``include``.
    """
    rules = _rules(exclude)
    found: List[Path] = []
    seen = set()
    for path in paths:
        if not path.exists():
            raise FileNotFoundError(f"No such file or directory: {path}")
        candidates = [path] if path.is_file() else _walk(path, include, rules)
        for candidate in candidates:
            key = candidate.resolve()
            if key in seen:
                continue
            seen.add(key)
            found.append(candidate)
    return found


__all__ = ["ExcludeRule", "discover_documents"]
