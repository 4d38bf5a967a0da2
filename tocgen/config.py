"""Configuration loading for tocgen (.tocgen.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .errors import TocgenError
from .patcher import DEFAULT_END_MARKER, DEFAULT_START_MARKER, InsertionPolicy
from .scanner import MAX_HEADING_LEVEL

CONFIG_FILENAME = ".tocgen.yml"


class ConfigError(TocgenError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class HeadingConfig:
    """Which heading markers the scanner recognises."""

    max_level: int = MAX_HEADING_LEVEL
    setext: bool = True


@dataclass
class RenderConfig:
    """TOC list rendering settings."""

    max_depth: Optional[int] = None
    min_level: int = 1
    ordered: bool = False
    link_prefix: str = "#"
    bullet: str = "-"
    indent: Optional[int] = None
    title: Optional[str] = None


@dataclass
class MarkerSettings:
    """Sentinel comments bracketing the TOC block."""

    start: str = DEFAULT_START_MARKER
    end: str = DEFAULT_END_MARKER


@dataclass
class TocConfig:
    """Represents the settings defined in .tocgen.yml."""

    root: Path
    headings: HeadingConfig = field(default_factory=HeadingConfig)
    toc: RenderConfig = field(default_factory=RenderConfig)
    markers: MarkerSettings = field(default_factory=MarkerSettings)
    insert: InsertionPolicy = InsertionPolicy.AFTER_FIRST_HEADING
    encoding: str = "utf-8"
    include: List[str] = field(default_factory=lambda: ["*.md", "*.markdown"])
    exclude_paths: List[str] = field(default_factory=list)


def load_config(config_path: Path) -> TocConfig:
    """Load configuration from disk; a missing file yields the defaults."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return TocConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")
    return parse_config(data, root=root)


def parse_config(data: Dict[str, Any], *, root: Path) -> TocConfig:
    """Build a validated :class:`TocConfig` from an already-parsed mapping."""
    config = TocConfig(root=root)

    heading_data = _as_dict(data.get("headings"))
    if heading_data:
        max_level = _as_int(heading_data.get("max_level"))
        if max_level is not None:
            if not 1 <= max_level <= MAX_HEADING_LEVEL:
                raise ConfigError(
                    f"headings.max_level must be between 1 and {MAX_HEADING_LEVEL}"
                )
            config.headings.max_level = max_level
        setext = _as_bool(heading_data.get("setext"))
        if setext is not None:
            config.headings.setext = setext

    toc_data = _as_dict(data.get("toc"))
    if toc_data:
        render = config.toc
        render.max_depth = _positive(toc_data, "max_depth", render.max_depth)
        render.min_level = _positive(toc_data, "min_level", render.min_level) or 1
        render.indent = _positive(toc_data, "indent", render.indent)
        ordered = _as_bool(toc_data.get("ordered"))
        if ordered is not None:
            render.ordered = ordered
        link_prefix = _as_str(toc_data.get("link_prefix"))
        if link_prefix is not None:
            render.link_prefix = link_prefix
        bullet = _as_str(toc_data.get("bullet"))
        if bullet is not None:
            if bullet not in {"-", "*", "+"}:
                raise ConfigError("toc.bullet must be one of '-', '*', '+'")
            render.bullet = bullet
        render.title = _as_str(toc_data.get("title")) or render.title

    marker_data = _as_dict(data.get("markers"))
    if marker_data:
        config.markers.start = (_as_str(marker_data.get("start")) or config.markers.start).strip()
        config.markers.end = (_as_str(marker_data.get("end")) or config.markers.end).strip()
    _validate_markers(config.markers)

    insert = _as_str(data.get("insert"))
    if insert is not None:
        try:
            config.insert = InsertionPolicy.parse(insert)
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc

    encoding = _as_str(data.get("encoding"))
    if encoding:
        config.encoding = encoding

    if "include" in data:
        config.include = _as_str_list(data.get("include"))
    config.exclude_paths = _as_str_list(data.get("exclude_paths"))
    return config


def _validate_markers(markers: MarkerSettings) -> None:
    if not markers.start or not markers.end:
        raise ConfigError("markers.start and markers.end must be non-empty")
    if markers.start == markers.end:
        raise ConfigError("markers.start and markers.end must differ")
    for marker in (markers.start, markers.end):
        if "\n" in marker or "\r" in marker:
            raise ConfigError("TOC markers must fit on a single line")
        # HTML comments never scan as headings, setext text, or fences.
        if not (marker.startswith("<!--") and marker.endswith("-->")):
            raise ConfigError(f"TOC marker {marker!r} must be an HTML comment (<!-- ... -->)")


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.suffix not in {".yml", ".yaml"}:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _positive(data: Dict[str, Any], key: str, default: Optional[int]) -> Optional[int]:
    if key not in data:
        return default
    raw = data.get(key)
    if raw is None:
        return None
    value = _as_int(raw)
    if value is None or value < 1:
        raise ConfigError(f"toc.{key} must be a positive integer")
    return value


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return None
    return str(value) if isinstance(value, (str, int, float)) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "HeadingConfig",
    "MarkerSettings",
    "RenderConfig",
    "TocConfig",
    "load_config",
    "parse_config",
]
