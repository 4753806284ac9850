"""Utility functions for Revelry.

Small helpers shared across the build pipeline: template dialect detection,
file writes and output directory housekeeping.

Key functions:
    dialect_for: Return the template dialect for a file name.
    is_template: Check if a path is a template in either dialect.
    template_candidates: File names tried for a logical template name.
    write_text_if_changed: Write a file only when its content differs.
    remove_empty_dirs: Delete directories left empty under a root.
"""

from __future__ import annotations

from pathlib import Path

MUSTACHE = "mustache"
PUG = "pug"

# Lookup order matters: a logical name resolves to the first extension found.
DIALECT_EXTENSIONS: dict[str, str] = {
    ".html": MUSTACHE,
    ".mustache": MUSTACHE,
    ".hbs": MUSTACHE,
    ".pug": PUG,
    ".jade": PUG,
}


def dialect_for(path: Path | str) -> str | None:
    """Return the template dialect for a file, decided by its extension.

    Args:
        path: File name or path.

    Returns:
        MUSTACHE or PUG, or None for files that are not templates.

    Examples:
        >>> dialect_for("slides.pug")
        'pug'

        >>> dialect_for("custom.scss") is None
        True
    """
    return DIALECT_EXTENSIONS.get(Path(path).suffix.lower())


def is_template(path: Path) -> bool:
    """Check if a path is a template in one of the supported dialects."""
    return dialect_for(path) is not None


def template_candidates(name: str) -> list[str]:
    """Return the file names that may hold the template ``name``.

    A name that already carries a template extension is used as-is.

    Args:
        name: Logical template name, e.g. "slides" or "moreinfo.html".

    Returns:
        Candidate file names in lookup order.
    """
    if is_template(Path(name)):
        return [name]
    return [f"{name}{ext}" for ext in DIALECT_EXTENSIONS]


def write_text_if_changed(path: Path, content: str) -> bool:
    """Write ``content`` to ``path`` unless the file already holds it.

    Args:
        path: Destination file.
        content: Text to write (UTF-8).

    Returns:
        True if the file was written.
    """
    if path.is_file() and path.read_text(encoding="utf-8") == content:
        return False
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return True


def remove_empty_dirs(root: Path) -> None:
    """Remove every empty directory below ``root`` (``root`` itself is kept).

    Args:
        root: Directory to tidy.
    """
    if not root.is_dir():
        return
    for item in sorted(
        (p for p in root.rglob("*") if p.is_dir()),
        key=lambda p: len(p.parts),
        reverse=True,
    ):
        if not any(item.iterdir()):
            item.rmdir()
