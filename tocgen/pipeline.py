"""Runs the scan, slug, build, render and patch stages for a document."""

from __future__ import annotations

import difflib
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Tuple

from .config import TocConfig
from .errors import MalformedTocBlock
from .logging import get_logger
from .models import HeadingRecord, OutlineNode
from .outline import OutlineBuilder
from .patcher import DocumentPatcher, InsertionPolicy, MarkerConfig, find_toc_block
from .render import RenderOptions, TocRenderer
from .scanner import MAX_HEADING_LEVEL, HeadingScanner, decode_document, split_lines
from .slugs import SlugRegistry


@dataclass
class TocOptions:
    """Everything the engine needs for one document run."""

    max_level: int = MAX_HEADING_LEVEL
    setext: bool = True
    render: RenderOptions = field(default_factory=RenderOptions)
    markers: MarkerConfig = field(default_factory=MarkerConfig)
    insert: InsertionPolicy = InsertionPolicy.AFTER_FIRST_HEADING
    encoding: str = "utf-8"

    @classmethod
    def from_config(cls, config: TocConfig) -> "TocOptions":
        toc = config.toc
        return cls(
            max_level=config.headings.max_level,
            setext=config.headings.setext,
            render=RenderOptions(
                max_depth=toc.max_depth,
                min_level=toc.min_level,
                ordered=toc.ordered,
                link_prefix=toc.link_prefix,
                bullet=toc.bullet,
                indent=toc.indent,
                title=toc.title,
            ),
            markers=MarkerConfig(start=config.markers.start, end=config.markers.end),
            insert=config.insert,
            encoding=config.encoding,
        )


@dataclass
class TocResult:
    """Intermediate products of a pipeline run."""

    headings: List[HeadingRecord]
    outline: OutlineNode
    fragment: str
    text: str

    @property
    def anchors(self) -> List[str]:
        return self.outline.anchors()


@dataclass
class UpdateOutcome:
    """Result of updating a document on disk."""

    path: Path
    changed: bool
    diff: str
    dry_run: bool


def _block_lines(text: str, markers: MarkerConfig, *, strict: bool) -> range:
    """Line indices of the existing TOC block, markers included."""
    try:
        block = find_toc_block(split_lines(text), markers)
    except MalformedTocBlock as exc:
        if strict:
            raise
        get_logger("pipeline").warning("Scanning past malformed TOC markers: %s", exc)
        return range(0)
    if block is None:
        return range(0)
    return range(block.start, block.end + 1)


def _collect(
    text: str, options: TocOptions, *, strict: bool = True
) -> Tuple[List[HeadingRecord], OutlineNode]:
    scanner = HeadingScanner(max_level=options.max_level, setext=options.setext)
    registry = SlugRegistry()
    headings: List[HeadingRecord] = []
    entries: List[Tuple[HeadingRecord, str]] = []
    # Headings inside the managed block are generated output, never sources.
    skip = _block_lines(text, options.markers, strict=strict)
    for heading in scanner.scan(text, skip=skip):
        headings.append(heading)
        entries.append((heading, registry.slug(heading.text)))
    return headings, OutlineBuilder().build(entries)


def collect_outline(text: str, options: TocOptions | None = None) -> OutlineNode:
    """Scan ``text`` and return the root of its heading outline.

    Malformed TOC markers are logged and otherwise ignored.
    """
    return _collect(text, options or TocOptions(), strict=False)[1]


def run_pipeline(text: str, options: TocOptions | None = None) -> TocResult:
    """Run every stage on ``text`` and return all intermediate products."""
    options = options or TocOptions()
    headings, outline = _collect(text, options)
    fragment = TocRenderer(options.render).render(outline)
    patcher = DocumentPatcher(options.markers, options.insert)
    final = patcher.patch(text, fragment, headings)
    return TocResult(headings=headings, outline=outline, fragment=fragment, text=final)


def generate_toc(text: str, options: TocOptions | None = None) -> str:
    """Return only the rendered TOC fragment for ``text``."""
    options = options or TocOptions()
    return TocRenderer(options.render).render(collect_outline(text, options))


def update_text(text: str, options: TocOptions | None = None) -> str:
    """Return ``text`` with its TOC block inserted or refreshed."""
    return run_pipeline(text, options).text


def render_diff(original: str, updated: str, name: str) -> str:
    diff = difflib.unified_diff(
        original.splitlines(keepends=True),
        updated.splitlines(keepends=True),
        fromfile=f"{name} (original)",
        tofile=f"{name} (updated)",
    )
    return "".join(diff)


class TocGenerator:
    """Applies the pipeline to files on disk."""

    def __init__(self, options: TocOptions | None = None) -> None:
        self.options = options or TocOptions()
        self.logger = get_logger("pipeline")

    def read(self, path: Path) -> str:
        return decode_document(
            path.read_bytes(), encoding=self.options.encoding, source=str(path)
        )

    def process(self, text: str) -> TocResult:
        result = run_pipeline(text, self.options)
        self.logger.debug(
            "Found %d heading(s), rendered %d TOC line(s)",
            len(result.headings),
            result.fragment.count("\n"),
        )
        return result

    def update_file(self, path: Path, *, dry_run: bool = False) -> UpdateOutcome:
        """Refresh the TOC block in ``path``; nothing is written on error or dry-run."""
        original = self.read(path)
        updated = self.process(original).text
        if updated == original:
            self.logger.info("TOC already up to date in %s", path)
            return UpdateOutcome(path=path, changed=False, diff="", dry_run=dry_run)

        diff_text = render_diff(original, updated, path.name)
        if dry_run:
            self.logger.info("Dry-run completed; %s not written", path)
            return UpdateOutcome(path=path, changed=True, diff=diff_text, dry_run=True)

        path.write_bytes(updated.encode(self.options.encoding))
        self.logger.info("TOC updated in %s", path)
        return UpdateOutcome(path=path, changed=True, diff=diff_text, dry_run=False)

    def check_file(self, path: Path) -> bool:
        """Return True when the TOC block in ``path`` is current."""
        original = self.read(path)
        current = self.process(original).text == original
        if not current:
            self.logger.debug("TOC out of date in %s", path)
        return current


__all__ = [
    "TocGenerator",
    "TocOptions",
    "TocResult",
    "UpdateOutcome",
    "collect_outline",
    "generate_toc",
    "render_diff",
    "run_pipeline",
    "update_text",
]
