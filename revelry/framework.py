"""Catalogue of the bundled reveal.js distribution.

Revelry ships a copy of the reveal.js tree inside the package (``reveal/``).
This module is the single place that knows its layout: which files make up
the core runtime, which plugins and themes exist, and which runtime options
the framework documents as defaults.

Key objects:
- FRAMEWORK_DIR: Location of the bundled tree.
- PLUGINS: Logical plugin name to Plugin description.
- DEFAULT_OPTIONS: reveal.js defaults emitted for options the config leaves unset.
- format_options_literal: Serialize options as ``key:value`` JavaScript entries.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .errors import UnknownPlugin, UnknownTheme

FRAMEWORK_DIR = Path(__file__).parent / "reveal"

# Copied into every build regardless of configuration.
CORE_PATHS = (
    "js",
    "css/reveal.min.css",
    "css/print",
    "lib/js",
)

DEFAULT_THEME = "default"
THEMES = ("default", "beige", "moon", "night", "serif", "simple", "sky", "solarized")

DEFAULT_HIGHLIGHT_THEME = "zenburn"
HIGHLIGHT_THEMES = ("zenburn", "monokai")

DEFAULT_OPTIONS: dict[str, bool | str] = {
    "controls": True,
    "progress": True,
    "history": True,
    "center": True,
    "transition": "default",
}

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


@dataclass(frozen=True)
class Script:
    """A JavaScript file loaded through reveal.js ``dependencies``.

    Attributes:
        src: Path of the script relative to the output root.
        condition: JavaScript expression; the script loads only when truthy.
        callback: JavaScript statement run once the script has loaded.
        load_async: Whether reveal.js may load the script asynchronously.
    """

    src: str
    condition: str | None = None
    callback: str | None = None
    load_async: bool = False

    def dependency_entry(self) -> str:
        """Return the object literal for this script in ``dependencies``."""
        parts = [f"src: '{self.src}'"]
        if self.load_async:
            parts.append("async: true")
        if self.callback:
            parts.append(f"callback: function() {{ {self.callback} }}")
        if self.condition:
            parts.append(f"condition: function() {{ return {self.condition}; }}")
        return "{ " + ", ".join(parts) + " }"


@dataclass(frozen=True)
class Plugin:
    """A reveal.js plugin shipped in the bundled tree.

    Attributes:
        name: Logical name used in Revfile.json.
        path: Plugin directory relative to the framework root.
        scripts: Scripts registered as reveal.js dependencies, in load order.
        uses_highlight_theme: Whether the plugin needs the code highlight stylesheet.
    """

    name: str
    path: str
    scripts: tuple[Script, ...] = field(default_factory=tuple)
    uses_highlight_theme: bool = False


_MARKDOWN_CONDITION = "!!document.querySelector( '[data-markdown]' )"

PLUGINS: dict[str, Plugin] = {
    "markdown": Plugin(
        "markdown",
        "plugin/markdown",
        (
            Script("plugin/markdown/marked.js", condition=_MARKDOWN_CONDITION),
            Script("plugin/markdown/markdown.js", condition=_MARKDOWN_CONDITION),
        ),
    ),
    "highlight": Plugin(
        "highlight",
        "plugin/highlight",
        (
            Script(
                "plugin/highlight/highlight.js",
                callback="hljs.initHighlightingOnLoad();",
                load_async=True,
            ),
        ),
        uses_highlight_theme=True,
    ),
    "zoom": Plugin(
        "zoom", "plugin/zoom-js", (Script("plugin/zoom-js/zoom.js", load_async=True),)
    ),
    "notes": Plugin(
        "notes", "plugin/notes", (Script("plugin/notes/notes.js", load_async=True),)
    ),
    "search": Plugin(
        "search", "plugin/search", (Script("plugin/search/search.js", load_async=True),)
    ),
    "math": Plugin(
        "math", "plugin/math", (Script("plugin/math/math.js", load_async=True),)
    ),
}

DEFAULT_PLUGINS = ["markdown", "notes"]


def plugin_for(name: str) -> Plugin:
    """Return the plugin registered under ``name``.

    Raises:
        UnknownPlugin: If the bundled tree has no such plugin.
    """
    try:
        return PLUGINS[name]
    except KeyError:
        raise UnknownPlugin(name) from None


def theme_stylesheet(theme: str) -> str:
    """Return the stylesheet path for a presentation theme.

    Raises:
        UnknownTheme: If the theme is not bundled.
    """
    if theme not in THEMES:
        raise UnknownTheme(theme)
    return f"css/theme/{theme}.css"


def highlight_stylesheet(theme: str) -> str:
    """Return the stylesheet path for a code highlight theme.

    Raises:
        UnknownTheme: If the highlight theme is not bundled.
    """
    if theme not in HIGHLIGHT_THEMES:
        raise UnknownTheme(theme, kind="highlight theme")
    return f"lib/css/{theme}.css"


def framework_files(subpath: str, root: Path | None = None) -> list[str]:
    """List the files under a framework sub-path.

    Args:
        subpath: File or directory relative to the framework root.
        root: Framework root; defaults to the bundled tree.

    Returns:
        Sorted POSIX paths relative to the framework root. Empty if the
        sub-path does not exist.
    """
    base = root or FRAMEWORK_DIR
    target = base / subpath
    if target.is_file():
        return [subpath]
    if not target.is_dir():
        return []
    return sorted(
        p.relative_to(base).as_posix() for p in target.rglob("*") if p.is_file()
    )


def _format_value(value: bool | str | int | float) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    return json.dumps(value, ensure_ascii=False)


def _format_key(key: str) -> str:
    return key if _IDENTIFIER_RE.match(key) else json.dumps(key, ensure_ascii=False)


def format_options_literal(options: Mapping[str, bool | str | int | float]) -> str:
    """Serialize options as comma-separated JavaScript ``key:value`` entries.

    Booleans are written as the bare words ``true`` and ``false``, numbers
    bare, and strings JSON-quoted. Entries keep the mapping's order.

    Examples:
        >>> format_options_literal({"controls": False, "transition": "fade"})
        'controls:false,\\ntransition:"fade"'
    """
    return ",\n".join(
        f"{_format_key(key)}:{_format_value(value)}" for key, value in options.items()
    )


def default_options_literal(configured: Iterable[str]) -> str:
    """Serialize the framework defaults for options the config leaves unset.

    Args:
        configured: Option keys already present in the config.

    Returns:
        The ``key:value`` literal for the remaining defaults.
    """
    taken = set(configured)
    return format_options_literal(
        {key: value for key, value in DEFAULT_OPTIONS.items() if key not in taken}
    )
