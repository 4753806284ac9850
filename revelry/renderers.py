"""Template renderers for Revelry.

This module contains one renderer per template dialect. Each renderer
handles a single dialect (SRP); TemplateRenderer dispatches a resolved
template to the right one and stitches embedded spans back in.

- MustacheRenderer: Mustache rendered by chevron. ``{{key}}`` is
  HTML-escaped and unknown keys render as the empty string.
- PugRenderer: Pug markup compiled to Jinja2 by pypugjs, then rendered.

Line numbers in syntax errors refer to the text handed to the renderer;
TemplateRenderer maps them back to the partial the line came from.

Key classes:
- RendererRegistry: Maps a dialect to its renderer.
- TemplateRenderer: Renders a ResolvedSource against one context.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

import chevron
from jinja2 import ChainableUndefined, Environment
from jinja2 import TemplateSyntaxError as JinjaSyntaxError
from pypugjs.ext.jinja import Compiler as PugCompiler
from pypugjs.ext.jinja import PyPugJSExtension
from pypugjs.utils import process as compile_pug

from .errors import TemplateError, TemplateSyntaxError
from .partials import ResolvedSource
from .protocols import DialectRenderer
from .utils import MUSTACHE, PUG

_LINE_RE = re.compile(r"\bline (\d+)")


def _line_from_message(message: str) -> int | None:
    """Return the last line number mentioned in an engine error message."""
    found = _LINE_RE.findall(message)
    return int(found[-1]) if found else None


def _environment(extensions: list | None = None) -> Environment:
    return Environment(
        autoescape=True,
        keep_trailing_newline=True,
        undefined=ChainableUndefined,
        extensions=extensions or [],
    )


class MustacheRenderer:
    """Renders the brace-substitution dialect.

    ``{{key}}`` (and dotted lookups such as ``{{data.site.venue}}``) are
    substituted from the context and HTML-escaped. Missing keys render as
    the empty string rather than failing. Anything that is not a Mustache
    tag, including ``{%`` and ``{#``, is plain text.
    """

    @property
    def dialect(self) -> str:
        """Return the dialect identifier."""
        return MUSTACHE

    def render(self, text: str, context: Mapping[str, Any], name: str = "") -> str:
        """Render template text against ``context``.

        Args:
            text: Expanded template text.
            context: Template variables.
            name: Logical template name, for error messages.

        Returns:
            Rendered HTML.

        Raises:
            TemplateSyntaxError: If a tag is unclosed or sections do not nest.
        """
        try:
            # Partials are expanded before rendering; never load them from disk.
            return chevron.render(text, dict(context), partials_path=None, partials_dict={})
        except chevron.ChevronError as exc:
            detail = " ".join(str(exc).split())
            raise TemplateSyntaxError(
                name, _line_from_message(str(exc)), detail, original_error=exc
            ) from exc


class PugRenderer:
    """Renders the indentation-based Pug dialect.

    Indentation encodes nesting, ``tag.class(attr="value")`` declares
    elements inline and a trailing ``= key`` fills the element with the
    escaped value of ``key``. pypugjs compiles the markup to a Jinja2
    template which is then rendered with autoescaping; unknown keys render
    as the empty string.
    """

    def __init__(self):
        # The extension installs the runtime helpers pypugjs-generated code calls.
        self.env = _environment([PyPugJSExtension])

    @property
    def dialect(self) -> str:
        """Return the dialect identifier."""
        return PUG

    def compile(self, text: str, name: str = "") -> str:
        """Compile Pug markup to Jinja2 template text.

        Raises:
            TemplateSyntaxError: If pypugjs rejects the markup.
        """
        try:
            return compile_pug(text, filename=name or None, compiler=PugCompiler, pretty=False)
        except Exception as exc:  # pypugjs reports lexer/parser errors as plain exceptions
            raise TemplateSyntaxError(
                name, _line_from_message(str(exc)), str(exc), original_error=exc
            ) from exc

    def render(self, text: str, context: Mapping[str, Any], name: str = "") -> str:
        """Compile and render Pug markup against ``context``.

        Args:
            text: Expanded Pug source.
            context: Template variables.
            name: Logical template name, for error messages.

        Returns:
            Rendered HTML.

        Raises:
            TemplateSyntaxError: If the markup or generated template is malformed.
        """
        compiled = self.compile(text, name)
        try:
            template = self.env.from_string(compiled)
        except JinjaSyntaxError as exc:
            # Jinja counts lines of the generated template, not of the Pug source.
            raise TemplateSyntaxError(name, None, exc.message or str(exc), original_error=exc) from exc
        return template.render(**context)


class RendererRegistry:
    """Registry of dialect renderers.

    New dialects can be added by registering a renderer, without touching
    the resolver or the orchestrator.
    """

    def __init__(self):
        """Initialize the registry with the default renderers."""
        self._renderers: dict[str, DialectRenderer] = {}
        self.register(MustacheRenderer())
        self.register(PugRenderer())

    def register(self, renderer: DialectRenderer) -> None:
        """Register a renderer, replacing any previous one for its dialect."""
        self._renderers[renderer.dialect] = renderer

    def get_renderer(self, dialect: str) -> DialectRenderer | None:
        """Return the renderer for ``dialect``, or None."""
        return self._renderers.get(dialect)


class TemplateRenderer:
    """Renders a resolved template, including spans in the other dialect.

    Every span is rendered against the same context as the root, then
    substituted for its placeholder in the host's output.

    Attributes:
        registry: Registry used to find a renderer per dialect.
    """

    def __init__(self, registry: RendererRegistry | None = None):
        self.registry = registry or RendererRegistry()

    def render(self, resolved: ResolvedSource, context: Mapping[str, Any]) -> str:
        """Render ``resolved`` and its embedded spans to HTML.

        Args:
            resolved: Output of PartialResolver.resolve.
            context: Template variables shared by every span.

        Returns:
            Final HTML.

        Raises:
            TemplateSyntaxError: If any span is malformed. The error names
                the partial and line holding the bad syntax.
            TemplateError: If a span's dialect has no renderer.
        """
        renderer = self.registry.get_renderer(resolved.dialect)
        if renderer is None:
            raise TemplateError(f"No renderer for dialect {resolved.dialect!r}", resolved.path)
        try:
            html = renderer.render(resolved.text, context, name=resolved.name)
        except TemplateSyntaxError as exc:
            name, path, lineno = resolved.origin(exc.lineno)
            raise TemplateSyntaxError(
                name, lineno, exc.detail, path, exc.original_error or exc
            ) from exc
        for token, span in resolved.embeds.items():
            html = html.replace(token, self.render(span, context))
        return html
