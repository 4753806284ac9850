"""Layered template namespace for Revelry.

Templates and partials are referenced by logical name ("slides", "header").
A build has exactly one namespace, made of ordered provider layers: the
project root, the project's ``custom/`` directory, then the templates
bundled with Revelry. The first layer that has a name wins, so a project
file shadows a bundled default of the same name.

Key classes:
- TemplateSource: A template's logical name, dialect, text and origin.
- DirectoryProvider: Provider backed by one directory.
- TemplateNamespace: Ordered list of providers, first match wins.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from .errors import MissingPartial
from .protocols import TemplateProvider
from .utils import dialect_for, template_candidates

BUNDLED_TEMPLATES_DIR = Path(__file__).parent / "templates"

ROOT_TEMPLATE = "index"


@dataclass(frozen=True)
class TemplateSource:
    """A template as found in the namespace.

    Attributes:
        name: Logical name it was looked up by.
        dialect: Template dialect, decided by the file extension.
        text: Raw, unexpanded template text.
        path: File the text was read from, when it came from disk.
    """

    name: str
    dialect: str
    text: str
    path: Path | None = None


class DirectoryProvider:
    """Finds templates in a single directory.

    Attributes:
        root: Directory searched for ``<name>.<ext>`` files.
    """

    def __init__(self, root: Path):
        self.root = root

    def find(self, name: str) -> TemplateSource | None:
        """Return the first file matching ``name`` in extension order."""
        if not self.root.is_dir():
            return None
        base = self.root.resolve()
        for candidate in template_candidates(name):
            path = self.root / candidate
            if not path.is_file():
                continue
            # Names come from template text; keep lookups inside the layer.
            if not path.resolve().is_relative_to(base):
                continue
            return TemplateSource(
                name=name,
                dialect=dialect_for(path),
                text=path.read_text(encoding="utf-8"),
                path=path,
            )
        return None

    def __repr__(self) -> str:
        return f"DirectoryProvider({str(self.root)!r})"


class TemplateNamespace:
    """Ordered template providers; the first provider that knows a name wins."""

    def __init__(self, providers: Iterable[TemplateProvider]):
        self.providers = list(providers)

    def find(self, name: str) -> TemplateSource | None:
        """Look up ``name`` in each provider in priority order."""
        for provider in self.providers:
            source = provider.find(name)
            if source is not None:
                return source
        return None

    def get(self, name: str) -> TemplateSource:
        """Look up ``name``, failing when no provider has it.

        Raises:
            MissingPartial: If no provider knows the name.
        """
        source = self.find(name)
        if source is None:
            raise MissingPartial(name)
        return source


def project_namespace(project_root: Path) -> TemplateNamespace:
    """Return the namespace for a project: root, ``custom/``, bundled defaults."""
    return TemplateNamespace(
        [
            DirectoryProvider(project_root),
            DirectoryProvider(project_root / "custom"),
            DirectoryProvider(BUNDLED_TEMPLATES_DIR),
        ]
    )
