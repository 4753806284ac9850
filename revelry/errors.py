"""Build errors for Revelry.

Every failure a build can hit derives from BuildError, so callers (the CLI,
the preview server) can report any of them uniformly. A build never retries:
the first error raised aborts the remaining stages.

Hierarchy:
    BuildError
        ConfigError: UnknownPlugin, UnknownTheme, UnknownMetaShape
        TemplateError: MissingPartial, CyclicPartial, TemplateSyntaxError
        IOFailure
        PreprocessorSyntaxFailure
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path


class BuildError(Exception):
    """Error during a presentation build, with optional file context.

    Attributes:
        message: Human-readable error message.
        source_path: Path to the file that caused the error, when known.
        original_error: The underlying exception, when one was caught.
    """

    def __init__(
        self,
        message: str,
        source_path: Path | None = None,
        original_error: Exception | None = None,
    ):
        self.message = message
        self.source_path = source_path
        self.original_error = original_error
        if source_path is not None:
            super().__init__(f"{source_path}: {message}")
        else:
            super().__init__(message)


class ConfigError(BuildError):
    """Revfile.json is missing, unreadable, or holds an invalid entry."""


class UnknownPlugin(ConfigError):
    """A configured plugin has no directory in the bundled framework."""

    def __init__(self, name: str, source_path: Path | None = None):
        self.name = name
        super().__init__(f"Unknown plugin: {name!r}", source_path)


class UnknownTheme(ConfigError):
    """A configured theme has no stylesheet in the bundled framework."""

    def __init__(self, name: str, kind: str = "theme", source_path: Path | None = None):
        self.name = name
        self.kind = kind
        super().__init__(f"Unknown {kind}: {name!r}", source_path)


class UnknownMetaShape(ConfigError):
    """A configuration entry has the wrong type or shape."""

    def __init__(self, key: str, detail: str, source_path: Path | None = None):
        self.key = key
        self.detail = detail
        super().__init__(f"Invalid {key!r} entry: {detail}", source_path)


class TemplateError(BuildError):
    """Base class for partial resolution and rendering failures."""


class MissingPartial(TemplateError):
    """No template in the namespace matches a referenced partial name."""

    def __init__(self, name: str, source_path: Path | None = None):
        self.name = name
        super().__init__(f"Partial not found: {name!r}", source_path)


class CyclicPartial(TemplateError):
    """A partial includes itself, directly or through other partials.

    Attributes:
        chain: Logical names in resolution order, ending with the repeated one.
    """

    def __init__(self, chain: Sequence[str], source_path: Path | None = None):
        self.chain = list(chain)
        super().__init__(
            "Cyclic partial inclusion: " + " -> ".join(self.chain), source_path
        )


class TemplateSyntaxError(TemplateError):
    """Malformed dialect syntax in a template.

    Attributes:
        name: Logical name of the template being rendered.
        lineno: Line number reported by the template engine, when known.
        detail: Engine error message.
    """

    def __init__(
        self,
        name: str,
        lineno: int | None,
        detail: str,
        source_path: Path | None = None,
        original_error: Exception | None = None,
    ):
        self.name = name
        self.lineno = lineno
        self.detail = detail
        where = f" on line {lineno}" if lineno else ""
        super().__init__(
            f"Template syntax error in {name!r}{where}: {detail}",
            source_path,
            original_error,
        )


class IOFailure(BuildError):
    """Copying or writing part of the output tree failed."""


class PreprocessorSyntaxFailure(BuildError):
    """The SCSS compiler rejected the stylesheet source."""
