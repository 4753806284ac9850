"""Partial resolution for Revelry templates.

Templates include each other by logical name, in either dialect:

- ``{{> name}}``: the brace marker, usable in both dialects.
- ``include name`` on a line of its own: the Pug include statement.

Both markers are recognised in every template because a project may mix
dialects. Resolution is purely textual and happens before any rendering:
each partial is expanded with the same rules and then spliced into its host,
left to right, until no markers remain.

A partial written in the host's dialect is spliced in as raw text. A partial
in the other dialect cannot be spliced as text (Pug is indentation
sensitive, HTML is not), so it becomes an embedded span: the host receives
an inert HTML comment placeholder and the span is rendered later, against
the same context as the host.

Every line of the expanded text remembers the template and line it came
from, so renderer errors can name the partial that holds the bad syntax.

Key classes:
- ResolvedSource: Expanded template text plus its embedded spans.
- PartialResolver: Expands a root template through a TemplateNamespace.
"""

from __future__ import annotations

import itertools
import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

from .errors import CyclicPartial, MissingPartial
from .namespace import TemplateNamespace, TemplateSource
from .utils import PUG

MARKER_RE = re.compile(
    r"\{\{>\s*(?P<partial>[\w./-]+)\s*\}\}"
    r"|^(?P<indent>[ \t]*)include[ \t]+(?P<include>[\w./-]+)[ \t]*$",
    re.MULTILINE,
)

EMBED_TOKEN = "<!--revelry-embed-{}-->"

# (template name, file, line in that file) for one line of expanded text.
LineOrigin = tuple[str, Path | None, int]


@dataclass
class ResolvedSource:
    """A template with every partial expanded.

    Attributes:
        name: Logical name of the template.
        dialect: Dialect of ``text``.
        text: Expanded text; embedded spans appear as placeholder tokens.
        embeds: Placeholder token to the span (in the other dialect) it stands for.
        path: File the template was read from, when known.
        origins: Where each line of ``text`` came from, one entry per line.
    """

    name: str
    dialect: str
    text: str
    embeds: dict[str, ResolvedSource] = field(default_factory=dict)
    path: Path | None = None
    origins: list[LineOrigin] = field(default_factory=list)

    def origin(self, lineno: int | None) -> tuple[str, Path | None, int | None]:
        """Map a line of the expanded text back to the template it came from.

        Args:
            lineno: 1-based line in ``text``, or None when unknown.

        Returns:
            ``(name, path, lineno)`` of the originating template. Falls back
            to this template when the line cannot be mapped.
        """
        if lineno is None or not 1 <= lineno <= len(self.origins):
            return self.name, self.path, lineno
        return self.origins[lineno - 1]


class PartialResolver:
    """Recursively expands partial markers through a template namespace.

    Attributes:
        namespace: Namespace partial names are looked up in.
    """

    def __init__(self, namespace: TemplateNamespace):
        self.namespace = namespace

    def resolve(self, root_name: str) -> ResolvedSource:
        """Expand the template ``root_name`` and everything it includes.

        Args:
            root_name: Logical name of the root template.

        Returns:
            The flattened template.

        Raises:
            MissingPartial: If the root or any referenced partial is absent.
            CyclicPartial: If a partial is reached again from within itself.
        """
        source = self.namespace.get(root_name)
        return self._expand(source, [root_name], itertools.count())

    def _expand(
        self, source: TemplateSource, chain: list[str], counter: Iterator[int]
    ) -> ResolvedSource:
        text = source.text
        embeds: dict[str, ResolvedSource] = {}
        pieces: list[_Piece] = []
        pos = 0
        for match in MARKER_RE.finditer(text):
            name = match.group("partial") or match.group("include")
            start, indent = _replacement_start(text, match)

            if name in chain:
                raise CyclicPartial([*chain, name], source.path)
            partial = self.namespace.find(name)
            if partial is None:
                raise MissingPartial(name, source.path)
            expanded = self._expand(partial, [*chain, name], counter)

            pieces.append(_host_piece(source, pos, start))
            marker_line = text.count("\n", 0, match.start()) + 1
            pieces.append(
                self._splice(source, marker_line, expanded, indent, embeds, counter)
            )
            pos = match.end()
        pieces.append(_host_piece(source, pos, len(text)))

        joined, origins = _join(pieces)
        return ResolvedSource(
            name=source.name,
            dialect=source.dialect,
            text=joined,
            embeds=embeds,
            path=source.path,
            origins=origins,
        )

    @staticmethod
    def _splice(
        host: TemplateSource,
        marker_line: int,
        partial: ResolvedSource,
        indent: str | None,
        embeds: dict[str, ResolvedSource],
        counter: Iterator[int],
    ) -> _Piece:
        if partial.dialect == host.dialect:
            embeds.update(partial.embeds)
            body = _strip_final_newline(partial.text)
            origins = partial.origins[: body.count("\n") + 1]
            text = _indent(body, indent) if indent is not None else body
            return _Piece(text, origins, from_partial=True)

        token = EMBED_TOKEN.format(next(counter))
        embeds[token] = partial
        if indent is None:
            text = token
        elif host.dialect == PUG:
            # Piped text keeps the placeholder inside the enclosing element.
            text = f"{indent}| {token}"
        else:
            text = f"{indent}{token}"
        return _Piece(text, [(host.name, host.path, marker_line)])


@dataclass
class _Piece:
    text: str
    origins: list[LineOrigin]
    from_partial: bool = False


def _host_piece(source: TemplateSource, start: int, end: int) -> _Piece:
    first_line = source.text.count("\n", 0, start) + 1
    chunk = source.text[start:end]
    return _Piece(
        chunk,
        [(source.name, source.path, first_line + i) for i in range(chunk.count("\n") + 1)],
    )


def _join(pieces: list[_Piece]) -> tuple[str, list[LineOrigin]]:
    """Concatenate pieces, merging the line origins where pieces meet.

    A line shared by two pieces is attributed to the spliced partial when
    the partial contributes text to it, otherwise to whichever side does.
    """
    parts: list[str] = []
    origins: list[LineOrigin] = []
    last_line = ""
    for piece in pieces:
        if not piece.text:
            continue
        if not origins:
            origins = list(piece.origins)
        else:
            head = piece.text.split("\n", 1)[0]
            if (piece.from_partial and head.strip()) or not last_line.strip():
                origins[-1] = piece.origins[0]
            origins.extend(piece.origins[1:])
        parts.append(piece.text)
        if "\n" in piece.text:
            last_line = piece.text.rsplit("\n", 1)[1]
        else:
            last_line += piece.text
    return "".join(parts), origins


def _replacement_start(text: str, match: re.Match) -> tuple[int, str | None]:
    """Return where a marker's replacement starts and its line indentation.

    The indentation is None unless the marker stands alone on its line.
    """
    if match.group("include"):
        return match.start(), match.group("indent")
    line_start = text.rfind("\n", 0, match.start()) + 1
    line_end = text.find("\n", match.end())
    if line_end == -1:
        line_end = len(text)
    prefix = text[line_start : match.start()]
    if prefix.strip() or text[match.end() : line_end].strip():
        return match.start(), None
    return line_start, prefix


def _strip_final_newline(text: str) -> str:
    return text[:-1] if text.endswith("\n") else text


def _indent(text: str, indent: str) -> str:
    return "\n".join(f"{indent}{line}" if line.strip() else line for line in text.split("\n"))
