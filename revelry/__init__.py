"""Revelry presentation builder.

This package builds static reveal.js presentations from a project directory
containing a slide template, a ``Revfile.json`` configuration and optional
custom assets (header snippets, SCSS stylesheets, partial templates).

The main entry point is the CLI module, which provides commands for
scaffolding new projects, building decks, and running a preview server.

Build pipeline, leaves first:
- config: Load and validate Revfile.json.
- namespace / partials: Look up templates and expand partials across dialects.
- renderers: Render Mustache-like and Pug templates against one context.
- projector: Turn config into meta tags, runtime options and plugin paths.
- assets: Select and reconcile the bundled framework files in the output.
- build: Sequence the stages above.
"""

__all__ = ["__version__"]
__version__ = "0.3.0"
