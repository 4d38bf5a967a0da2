"""Table-of-contents generation for Markdown documents."""

from .errors import DecodeError, MalformedTocBlock, TocgenError
from .models import HeadingRecord, OutlineNode, TocBlock
from .outline import build_outline
from .patcher import InsertionPolicy, MarkerConfig, patch_document
from .pipeline import TocGenerator, TocOptions, generate_toc, update_text
from .render import RenderOptions, render_toc
from .scanner import decode_document, scan_headings
from .slugs import SlugRegistry, slugify

__version__ = "0.1.0"

__all__ = [
    "DecodeError",
    "HeadingRecord",
    "InsertionPolicy",
    "MalformedTocBlock",
    "MarkerConfig",
    "OutlineNode",
    "RenderOptions",
    "SlugRegistry",
    "TocBlock",
    "TocGenerator",
    "TocOptions",
    "TocgenError",
    "build_outline",
    "decode_document",
    "generate_toc",
    "patch_document",
    "render_toc",
    "scan_headings",
    "slugify",
    "update_text",
    "__version__",
]
