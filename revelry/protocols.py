"""Protocol definitions for Revelry.

This module defines the interfaces the build pipeline depends on, so the
orchestrator can be driven by any implementation: the filesystem-backed
ones shipped with Revelry, or in-memory fakes in tests.

These protocols enable:
- Layered template lookup (project files shadow bundled defaults)
- Swapping the template engine used for a dialect
- Replacing the file copier and stylesheet compiler collaborators
"""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Iterable, Mapping, Sequence
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .namespace import TemplateSource


@runtime_checkable
class TemplateProvider(Protocol):
    """Protocol for one layer of the template namespace.

    A namespace queries its providers in priority order; the first provider
    that knows a name wins.
    """

    @abstractmethod
    def find(self, name: str) -> TemplateSource | None:
        """Look up a template by logical name.

        Args:
            name: Logical template name, with or without extension.

        Returns:
            The template source, or None if this layer has no such template.
        """
        ...


@runtime_checkable
class DialectRenderer(Protocol):
    """Protocol for rendering fully expanded template text in one dialect."""

    @property
    @abstractmethod
    def dialect(self) -> str:
        """Return the dialect identifier (e.g., 'mustache', 'pug')."""
        ...

    @abstractmethod
    def render(self, text: str, context: Mapping[str, Any], name: str = "") -> str:
        """Render template text to HTML.

        Args:
            text: Template text with every partial already expanded.
            context: Variables available to the template.
            name: Logical template name, used in error messages.

        Returns:
            Rendered HTML.

        Raises:
            TemplateSyntaxError: If the text is malformed for the dialect.
        """
        ...


@runtime_checkable
class FileCopier(Protocol):
    """Protocol for the collaborator that materialises framework files."""

    @abstractmethod
    def copy(self, paths: Iterable[str]) -> None:
        """Copy the given relative paths into the output tree.

        Raises:
            IOFailure: If a file cannot be copied.
        """
        ...

    @abstractmethod
    def prune(self, keep: Iterable[str]) -> None:
        """Remove every output file whose relative path is not in ``keep``.

        Raises:
            IOFailure: If a file cannot be removed.
        """
        ...


@runtime_checkable
class StylesheetCompiler(Protocol):
    """Protocol for the CSS preprocessor collaborator."""

    @abstractmethod
    def compile(self, source: str, fragments: Sequence[str]) -> str:
        """Compile preprocessor source to CSS.

        Args:
            source: Preprocessor source text.
            fragments: Extra rule fragments, applied in order before the source.

        Returns:
            Compiled CSS text.

        Raises:
            PreprocessorSyntaxFailure: If the source does not compile.
        """
        ...
