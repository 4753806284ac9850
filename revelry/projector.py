"""Projection of a project's config onto the generated page.

The projector turns a Config into the pieces of markup and JavaScript that
the build splices into the rendered page: meta tags, the reveal.js runtime
options literal, plugin dependency entries and plugin stylesheets. It also
reports which plugin directories the build must ship.

The projector emits only what the config states. Options the config leaves
unset are filled in from the framework's documented defaults by the build,
see ``framework.default_options_literal``.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .config import Config
from .framework import format_options_literal, highlight_stylesheet, plugin_for
from .html_utils import meta_tag, stylesheet_link


@dataclass
class Projection:
    """Config-derived fragments for one build.

    Attributes:
        meta_tags: Author tag (when set) followed by one self-closing tag
            per meta entry.
        options_literal: ``key:value`` entries for the configured options.
        required_plugin_paths: Plugin directories, in plugin load order.
        dependencies: reveal.js ``dependencies`` entries, in load order.
        stylesheets: Link tags for stylesheets the enabled plugins need.
    """

    meta_tags: list[str] = field(default_factory=list)
    options_literal: str = ""
    required_plugin_paths: list[str] = field(default_factory=list)
    dependencies: list[str] = field(default_factory=list)
    stylesheets: list[str] = field(default_factory=list)


def project_options(config: Config) -> Projection:
    """Project ``config`` onto page fragments.

    Args:
        config: Project configuration.

    Returns:
        Projection for the config.

    Raises:
        UnknownPlugin: If a configured plugin is not bundled.
        UnknownTheme: If an enabled plugin needs an unknown highlight theme.
    """
    meta_tags = []
    if config.author:
        meta_tags.append(meta_tag("author", config.author))
    meta_tags.extend(
        meta_tag(name, content, self_closing=True) for name, content in config.meta.items()
    )

    plugins = [plugin_for(name) for name in config.plugins]
    stylesheets = []
    if any(plugin.uses_highlight_theme for plugin in plugins):
        stylesheets.append(stylesheet_link(highlight_stylesheet(config.highlight_theme)))

    return Projection(
        meta_tags=meta_tags,
        options_literal=format_options_literal(config.options),
        required_plugin_paths=[plugin.path for plugin in plugins],
        dependencies=[
            script.dependency_entry() for plugin in plugins for script in plugin.scripts
        ],
        stylesheets=stylesheets,
    )
