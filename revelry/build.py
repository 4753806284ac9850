"""Presentation building for Revelry.

This module contains the core logic for building a deck from a project
directory. It loads the configuration and data, resolves and renders the
page template, splices in config-derived fragments, compiles the custom
stylesheet and reconciles the output directory.

Every stage that depends on user input runs in memory before the output
directory is touched, so a configuration, template or stylesheet error
leaves the previous build intact. A failure while writing files can leave
the output partially updated; the next successful build reconciles it.

Key functions:
- build_site: Build the deck for a project.
- render_page: Resolve, render and splice the page without writing it.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .assets import CUSTOM_CSS_FILE, INDEX_FILE, AssetManifest, AssetPipeline, select_assets
from .config import CONFIG_FILENAME, Config, load_config, load_data
from .errors import BuildError, ConfigError, TemplateError
from .framework import default_options_literal
from .html_utils import inject_into_head, splice_at_marker
from .namespace import ROOT_TEMPLATE, TemplateNamespace, project_namespace
from .partials import PartialResolver
from .projector import Projection, project_options
from .protocols import FileCopier, StylesheetCompiler
from .renderers import TemplateRenderer
from .stylesheets import compile_project_stylesheet

DEFAULT_TARGET = "www"

META_MARKER = "<!-- revelry:meta -->"
STYLESHEETS_MARKER = "<!-- revelry:stylesheets -->"
OPTIONS_MARKER = "/* revelry:options */"
DEPENDENCIES_MARKER = "/* revelry:dependencies */"


@dataclass
class BuildResult:
    """Result of a presentation build.

    Attributes:
        output_dir: Directory the deck was written to.
        config: Configuration the build used.
        manifest: Assets selected for the build.
        html: Final page markup.
    """

    output_dir: Path
    config: Config
    manifest: AssetManifest
    html: str


def build_context(config: Config, data: dict[str, Any]) -> dict[str, Any]:
    """Return the render context: config fields plus project data."""
    context = config.context()
    context["data"] = data
    return context


def render_page(
    namespace: TemplateNamespace,
    config: Config,
    data: dict[str, Any],
    renderer: TemplateRenderer | None = None,
) -> str:
    """Resolve and render the root template, then splice in config fragments.

    Args:
        namespace: Template namespace of the project.
        config: Project configuration.
        data: Extra template data.
        renderer: Optional custom renderer.

    Returns:
        Final page markup.

    Raises:
        TemplateError: If a partial is missing, cyclic or malformed.
        ConfigError: If the config names an unknown plugin or theme.
    """
    resolved = PartialResolver(namespace).resolve(ROOT_TEMPLATE)
    renderer = renderer or TemplateRenderer()
    try:
        html = renderer.render(resolved, build_context(config, data))
    except BuildError:
        raise
    except Exception as exc:
        raise TemplateError(_format_error_message(exc), resolved.path, exc) from exc
    return splice_projection(html, project_options(config), config)


def splice_projection(html: str, projection: Projection, config: Config) -> str:
    """Insert meta tags, stylesheets, options and dependencies into the page.

    Meta tags go to the meta marker, or before ``</head>`` when the page
    has none. Configured options come after the framework defaults for the
    options the config leaves unset.
    """
    html = inject_into_head(html, META_MARKER, "\n".join(projection.meta_tags))
    html = splice_at_marker(html, STYLESHEETS_MARKER, "\n".join(projection.stylesheets))

    entries = [
        literal
        for literal in (
            default_options_literal(config.options),
            projection.options_literal,
        )
        if literal
    ]
    options = ",\n".join(entries)
    html = splice_at_marker(html, OPTIONS_MARKER, f"{options}," if options else "")
    return splice_at_marker(html, DEPENDENCIES_MARKER, ",\n".join(projection.dependencies))


def check_output_dir(project_root: Path, output_dir: Path) -> None:
    """Refuse output directories that would hold the project itself.

    Reconciling the output prunes everything the manifest does not list, so
    an output directory equal to the project root, or above it, would
    delete the project's own files.

    Raises:
        ConfigError: If ``output_dir`` is the project root or one of its parents.
    """
    root = project_root.resolve()
    out = output_dir.resolve()
    if out == root or out in root.parents:
        raise ConfigError(
            f"Output directory {output_dir} contains the project; "
            "choose a target inside or beside it",
            root / CONFIG_FILENAME,
        )


def build_site(
    project_root: Path,
    target: Path | str | None = None,
    copier: FileCopier | None = None,
    compiler: StylesheetCompiler | None = None,
    namespace: TemplateNamespace | None = None,
) -> BuildResult:
    """Build the presentation for a project.

    Args:
        project_root: Root directory of the project.
        target: Output directory; relative paths are taken from the project
            root. Defaults to ``www``.
        copier: Optional FileCopier collaborator.
        compiler: Optional StylesheetCompiler collaborator.
        namespace: Optional template namespace; defaults to the project's.

    Returns:
        BuildResult describing the written deck.

    Raises:
        BuildError: The first failure hit by any stage.
    """
    config = load_config(project_root)
    data = load_data(project_root)
    output_dir = project_root / (target or DEFAULT_TARGET)
    check_output_dir(project_root, output_dir)

    html = render_page(namespace or project_namespace(project_root), config, data)
    manifest = select_assets(config)
    css = compile_project_stylesheet(project_root, manifest.css_fragments, compiler)

    AssetPipeline(output_dir, copier).run(
        manifest, {INDEX_FILE: html, CUSTOM_CSS_FILE: css}
    )
    return BuildResult(output_dir=output_dir, config=config, manifest=manifest, html=html)


def _format_error_message(exc: Exception) -> str:
    """Format an exception into a user-friendly error message.

    Args:
        exc: The exception to format.

    Returns:
        A human-readable error message.
    """
    error_type = type(exc).__name__
    error_msg = str(exc)

    if error_type == "UndefinedError":
        return f"Undefined variable: {error_msg}"
    if error_type == "TypeError":
        return f"Type error: {error_msg}"
    if error_type == "AttributeError":
        return f"Attribute error: {error_msg}"

    return f"{error_type}: {error_msg}"
