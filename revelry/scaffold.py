"""Project scaffolding for Revelry.

Creates a new presentation project from the skeleton bundled with the
package: a Revfile.json, a slide template in either dialect and the
``custom/`` directory holding the header snippet and SCSS stylesheet.
"""

from __future__ import annotations

import shutil
from pathlib import Path

from .config import Config, write_config

SKELETON_DIR = Path(__file__).parent / "skeleton"

_SLIDE_TEMPLATES = {False: "slides.html", True: "slides.pug"}


def create_project(root: Path, config: Config, pug: bool = False) -> Path:
    """Scaffold a project in ``root``.

    Args:
        root: Directory to create the project in; must be missing or empty.
        config: Initial configuration written to Revfile.json.
        pug: Start from a Pug slide template instead of HTML.

    Returns:
        The project root.

    Raises:
        FileExistsError: If ``root`` exists and is not empty.
    """
    if root.exists() and any(root.iterdir()):
        raise FileExistsError(f"Refusing to initialize into non-empty directory: {root}")
    skipped = _SLIDE_TEMPLATES[not pug]
    for src_path in SKELETON_DIR.rglob("*"):
        if src_path.is_dir():
            continue
        rel_path = src_path.relative_to(SKELETON_DIR)
        if rel_path.as_posix() == skipped:
            continue
        dest_path = root / rel_path
        dest_path.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(src_path, dest_path)
    write_config(root, config)
    return root
