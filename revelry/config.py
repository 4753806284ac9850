"""Project configuration for Revelry.

A project is configured by ``Revfile.json`` in its root. This module loads
that file, applies defaults, validates every entry and writes it back.

Key objects:
- Config: Validated in-memory representation of Revfile.json.
- load_config: Read and validate the project's Revfile.json.
- write_config: Persist a Config as Revfile.json.
- load_data: Load extra template data from ``data/*.yaml``.
"""

from __future__ import annotations

import copy
import json
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError, UnknownMetaShape
from .framework import (
    DEFAULT_HIGHLIGHT_THEME,
    DEFAULT_PLUGINS,
    DEFAULT_THEME,
    highlight_stylesheet,
    plugin_for,
    theme_stylesheet,
)

CONFIG_FILENAME = "Revfile.json"

DEFAULT_CONFIG: dict[str, Any] = {
    "title": "",
    "description": "",
    "author": None,
    "theme": DEFAULT_THEME,
    "highlight_theme": DEFAULT_HIGHLIGHT_THEME,
    "options": {},
    "plugins": DEFAULT_PLUGINS,
    "meta": {},
}

_OPTION_TYPES = (bool, str, int, float)


@dataclass
class Config:
    """Settings of a presentation project.

    Attributes:
        title: Presentation title.
        description: Presentation description (also the description meta tag).
        author: Author name; no author meta tag is emitted when unset.
        theme: reveal.js presentation theme.
        highlight_theme: Stylesheet used by the highlight plugin.
        options: reveal.js runtime options set by the project.
        plugins: Enabled plugins, in load order.
        meta: Extra ``<meta>`` tags, keyed by name attribute.
        extra: Unrecognised top-level keys, kept for round trips.
    """

    title: str = ""
    description: str = ""
    author: str | None = None
    theme: str = DEFAULT_THEME
    highlight_theme: str = DEFAULT_HIGHLIGHT_THEME
    options: dict[str, bool | str | int | float] = field(default_factory=dict)
    plugins: list[str] = field(default_factory=lambda: list(DEFAULT_PLUGINS))
    meta: dict[str, str] = field(default_factory=dict)
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any, source_path: Path | None = None) -> Config:
        """Build a validated Config from decoded JSON.

        Args:
            data: Decoded Revfile.json document.
            source_path: File the data came from, used in error messages.

        Returns:
            Config with defaults applied.

        Raises:
            UnknownMetaShape: If an entry has the wrong type.
            UnknownPlugin: If a plugin is not bundled.
            UnknownTheme: If a theme or highlight theme is not bundled.
        """
        if not isinstance(data, dict):
            raise UnknownMetaShape("Revfile", "expected a JSON object", source_path)
        merged = copy.deepcopy(DEFAULT_CONFIG)
        merged.update(data)

        for key in ("title", "description", "theme", "highlight_theme"):
            if not isinstance(merged[key], str):
                raise UnknownMetaShape(key, "expected a string", source_path)
        author = merged["author"]
        if author is not None and not isinstance(author, str):
            raise UnknownMetaShape("author", "expected a string or null", source_path)

        config = cls(
            title=merged["title"],
            description=merged["description"],
            author=author or None,
            theme=merged["theme"],
            highlight_theme=merged["highlight_theme"],
            options=_validate_options(merged["options"], source_path),
            plugins=_validate_plugins(merged["plugins"], source_path),
            meta=_validate_meta(merged["meta"], source_path),
            extra={k: v for k, v in data.items() if k not in DEFAULT_CONFIG},
        )
        try:
            theme_stylesheet(config.theme)
            highlight_stylesheet(config.highlight_theme)
        except ConfigError as exc:
            exc.source_path = source_path
            raise
        return config

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-serialisable form written to Revfile.json."""
        data: dict[str, Any] = {
            "title": self.title,
            "description": self.description,
        }
        if self.author:
            data["author"] = self.author
        data.update(
            {
                "theme": self.theme,
                "highlight_theme": self.highlight_theme,
                "options": dict(self.options),
                "plugins": list(self.plugins),
                "meta": dict(self.meta),
            }
        )
        data.update(self.extra)
        return data

    def context(self) -> dict[str, Any]:
        """Return the flattened view of the config used as render context."""
        return {
            "title": self.title,
            "description": self.description,
            "author": self.author or "",
            "theme": self.theme,
            "highlight_theme": self.highlight_theme,
            "options": dict(self.options),
            "plugins": list(self.plugins),
            "meta": dict(self.meta),
        }


def _validate_options(value: Any, source_path: Path | None) -> dict:
    if not isinstance(value, dict):
        raise UnknownMetaShape("options", "expected an object", source_path)
    for key, option in value.items():
        if not isinstance(option, _OPTION_TYPES):
            raise UnknownMetaShape(
                "options",
                f"{key!r} must be a boolean, string or number",
                source_path,
            )
        # json accepts NaN and Infinity, which have no JavaScript literal form.
        if isinstance(option, float) and not math.isfinite(option):
            raise UnknownMetaShape("options", f"{key!r} must be a finite number", source_path)
    return dict(value)


def _validate_plugins(value: Any, source_path: Path | None) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(p, str) for p in value):
        raise UnknownMetaShape("plugins", "expected a list of strings", source_path)
    seen: set[str] = set()
    for name in value:
        if name in seen:
            raise UnknownMetaShape("plugins", f"{name!r} listed twice", source_path)
        seen.add(name)
        try:
            plugin_for(name)
        except ConfigError as exc:
            exc.source_path = source_path
            raise
    return list(value)


def _validate_meta(value: Any, source_path: Path | None) -> dict[str, str]:
    if not isinstance(value, dict):
        raise UnknownMetaShape("meta", "expected an object", source_path)
    for key, content in value.items():
        if not isinstance(content, str):
            raise UnknownMetaShape("meta", f"{key!r} must map to a string", source_path)
    return dict(value)


def load_config(project_root: Path) -> Config:
    """Load and validate the project's Revfile.json.

    Args:
        project_root: Root directory of the project.

    Returns:
        Validated Config.

    Raises:
        ConfigError: If the file is missing, is not valid JSON, or holds an
            invalid entry.
    """
    config_path = project_root / CONFIG_FILENAME
    if not config_path.exists():
        raise ConfigError(f"Expected {CONFIG_FILENAME} at {config_path}", config_path)
    try:
        with open(config_path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as exc:
        raise ConfigError(
            f"Invalid JSON on line {exc.lineno}: {exc.msg}", config_path, exc
        ) from exc
    return Config.from_dict(data, config_path)


def write_config(project_root: Path, config: Config) -> Path:
    """Write ``config`` to the project's Revfile.json.

    Args:
        project_root: Root directory of the project.
        config: Configuration to persist.

    Returns:
        Path of the written file.
    """
    config_path = project_root / CONFIG_FILENAME
    config_path.write_text(
        json.dumps(config.to_dict(), indent=2, ensure_ascii=False) + "\n",
        encoding="utf-8",
    )
    return config_path


def load_data(project_root: Path) -> dict[str, Any]:
    """Load template data from YAML files in the data directory.

    Each ``data/<stem>.yaml`` document becomes ``data[stem]`` in the render
    context. Documents that are not mappings are ignored.

    Args:
        project_root: Root directory of the project.

    Returns:
        Dictionary keyed by file stem.
    """
    data_dir = project_root / "data"
    data: dict[str, Any] = {}
    if not data_dir.exists():
        return data
    for path in sorted(data_dir.glob("*.yaml")):
        try:
            with open(path, encoding="utf-8") as f:
                payload = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML: {exc}", path, exc) from exc
        if not isinstance(payload, dict):
            continue
        data[path.stem] = payload
    return data
