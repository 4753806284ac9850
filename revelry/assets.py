"""Framework asset selection and output-tree reconciliation for Revelry.

Only part of the bundled reveal.js tree belongs in a given deck: the core
runtime always, the selected theme, and the directories of enabled plugins.
The selection is a pure function of the config (AssetManifest). Writing it
out is a reconciliation: every build removes whatever the output holds that
the manifest does not list, then copies what is missing or stale. Removing a
plugin from the config therefore removes its directory on the next build.

Key components:
- AssetManifest: Files that must exist in the output after a build.
- select_assets: Compute the manifest for a config.
- TreeCopier: FileCopier implementation backed by shutil.
- AssetPipeline: Reconcile an output directory against a manifest.
"""

from __future__ import annotations

import filecmp
import shutil
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .config import Config
from .errors import IOFailure
from .framework import (
    CORE_PATHS,
    FRAMEWORK_DIR,
    framework_files,
    highlight_stylesheet,
    plugin_for,
    theme_stylesheet,
)
from .protocols import FileCopier
from .utils import remove_empty_dirs, write_text_if_changed

INDEX_FILE = "index.html"
CUSTOM_CSS_FILE = "css/custom.css"


@dataclass(frozen=True)
class AssetManifest:
    """Relative paths that must exist in the output tree after a build.

    Attributes:
        framework_files: Files copied from the bundled framework tree.
        generated_files: Files written by the build itself.
        plugin_dirs: Plugin directories included, in plugin load order.
        theme_stylesheet: Stylesheet of the presentation theme.
        highlight_stylesheet: Code highlight stylesheet, when a plugin needs one.
        css_fragments: SCSS fragments compiled ahead of the custom stylesheet.
    """

    framework_files: tuple[str, ...]
    generated_files: tuple[str, ...] = (INDEX_FILE, CUSTOM_CSS_FILE)
    plugin_dirs: tuple[str, ...] = ()
    theme_stylesheet: str = ""
    highlight_stylesheet: str | None = None
    css_fragments: tuple[str, ...] = field(default_factory=tuple)

    @property
    def paths(self) -> frozenset[str]:
        """Return every path the output tree must hold."""
        return frozenset(self.framework_files) | frozenset(self.generated_files)


def select_assets(config: Config, framework_root: Path | None = None) -> AssetManifest:
    """Compute the asset manifest for ``config``.

    Args:
        config: Project configuration.
        framework_root: Framework tree to select from; defaults to the bundled one.

    Returns:
        AssetManifest for the config.

    Raises:
        UnknownPlugin: If a configured plugin is not bundled.
        UnknownTheme: If the theme or a needed highlight theme is not bundled.
    """
    plugins = [plugin_for(name) for name in config.plugins]
    theme_css = theme_stylesheet(config.theme)
    highlight_css = None
    if any(plugin.uses_highlight_theme for plugin in plugins):
        highlight_css = highlight_stylesheet(config.highlight_theme)

    subpaths = [*CORE_PATHS, theme_css, *(plugin.path for plugin in plugins)]
    if highlight_css:
        subpaths.append(highlight_css)
    files = sorted(
        {path for subpath in subpaths for path in framework_files(subpath, framework_root)}
    )

    fragments = [f'$theme: "{config.theme}";']
    if highlight_css:
        fragments.append(f'$highlight-theme: "{config.highlight_theme}";')

    return AssetManifest(
        framework_files=tuple(files),
        plugin_dirs=tuple(plugin.path for plugin in plugins),
        theme_stylesheet=theme_css,
        highlight_stylesheet=highlight_css,
        css_fragments=tuple(fragments),
    )


class TreeCopier:
    """Copies framework files into an output tree and prunes stale ones.

    Attributes:
        source_root: Framework tree files are copied from.
        target_root: Output directory.
    """

    def __init__(self, source_root: Path, target_root: Path):
        self.source_root = source_root
        self.target_root = target_root

    def copy(self, paths: Iterable[str]) -> None:
        """Copy each relative path unless the output already has identical content.

        Raises:
            IOFailure: If a file cannot be copied.
        """
        for rel in paths:
            source = self.source_root / rel
            dest = self.target_root / rel
            try:
                if dest.is_file() and filecmp.cmp(source, dest, shallow=False):
                    continue
                dest.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(source, dest)
            except OSError as exc:
                raise IOFailure(f"Cannot copy {rel}: {exc}", source, exc) from exc

    def prune(self, keep: Iterable[str]) -> None:
        """Delete output files not listed in ``keep`` and any emptied directories.

        Raises:
            IOFailure: If a file cannot be removed.
        """
        if not self.target_root.exists():
            return
        wanted = set(keep)
        for item in sorted(self.target_root.rglob("*")):
            if item.is_dir() and not item.is_symlink():
                continue
            rel = item.relative_to(self.target_root).as_posix()
            if rel in wanted:
                continue
            try:
                item.unlink()
            except OSError as exc:
                raise IOFailure(f"Cannot remove {rel}: {exc}", item, exc) from exc
        try:
            remove_empty_dirs(self.target_root)
        except OSError as exc:
            raise IOFailure(f"Cannot tidy {self.target_root}: {exc}", self.target_root, exc) from exc


class AssetPipeline:
    """Brings an output directory in line with an asset manifest.

    The pipeline delegates file operations to a FileCopier so the
    reconciliation strategy can be exercised without touching the disk.

    Attributes:
        output_dir: Directory the deck is written to.
        copier: Collaborator performing copies and removals.
    """

    def __init__(
        self,
        output_dir: Path,
        copier: FileCopier | None = None,
        framework_root: Path | None = None,
    ):
        """Initialize the asset pipeline.

        Args:
            output_dir: Directory where the deck is written.
            copier: Optional custom copier.
            framework_root: Framework tree used by the default copier.
        """
        self.output_dir = output_dir
        self.copier = copier or TreeCopier(framework_root or FRAMEWORK_DIR, output_dir)

    def run(self, manifest: AssetManifest, generated: Mapping[str, str]) -> None:
        """Reconcile the output tree: prune, copy, then write generated files.

        Args:
            manifest: Manifest computed for the current config.
            generated: Generated file contents keyed by relative path.

        Raises:
            IOFailure: If any file operation fails.
        """
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise IOFailure(f"Cannot create {self.output_dir}: {exc}", self.output_dir, exc) from exc
        self.copier.prune(manifest.paths | frozenset(generated))
        self.copier.copy(manifest.framework_files)
        for rel, content in generated.items():
            try:
                write_text_if_changed(self.output_dir / rel, content)
            except OSError as exc:
                raise IOFailure(f"Cannot write {rel}: {exc}", self.output_dir / rel, exc) from exc
