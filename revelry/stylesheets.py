"""SCSS compilation for Revelry.

A project may style its deck with ``custom/custom.scss``. The build compiles
it with libsass into ``css/custom.css``. Fragments contributed by the asset
manifest (theme variables) are compiled ahead of the project source, so the
source can refer to them.

Key classes:
- SassCompiler: StylesheetCompiler implementation backed by libsass.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import sass

from .errors import PreprocessorSyntaxFailure

CUSTOM_SCSS = Path("custom") / "custom.scss"


class SassCompiler:
    """Compiles SCSS source text with libsass.

    Attributes:
        include_paths: Directories searched by ``@import``.
        output_style: libsass output style.
        source_path: File the source was read from, for error reports.
    """

    def __init__(
        self,
        include_paths: Sequence[Path] = (),
        output_style: str = "nested",
        source_path: Path | None = None,
    ):
        self.include_paths = [str(p) for p in include_paths]
        self.output_style = output_style
        self.source_path = source_path

    def compile(self, source: str, fragments: Sequence[str]) -> str:
        """Compile ``fragments`` followed by ``source`` to CSS.

        Args:
            source: SCSS source of the project.
            fragments: Extra rule fragments, in order.

        Returns:
            Compiled CSS; empty if there is nothing to compile.

        Raises:
            PreprocessorSyntaxFailure: If libsass rejects the source.
        """
        combined = "\n".join([*fragments, source])
        if not combined.strip():
            return ""
        try:
            return sass.compile(
                string=combined,
                include_paths=self.include_paths,
                output_style=self.output_style,
            )
        except sass.CompileError as exc:
            raise PreprocessorSyntaxFailure(
                f"SCSS compilation failed: {exc}", self.source_path, exc
            ) from exc


def compile_project_stylesheet(
    project_root: Path, fragments: Sequence[str], compiler=None
) -> str:
    """Compile the project's ``custom/custom.scss`` (empty when absent).

    Args:
        project_root: Root directory of the project.
        fragments: Manifest fragments compiled ahead of the source.
        compiler: Optional StylesheetCompiler; defaults to SassCompiler.

    Returns:
        Compiled CSS text.
    """
    source_path = project_root / CUSTOM_SCSS
    source = source_path.read_text(encoding="utf-8") if source_path.exists() else ""
    compiler = compiler or SassCompiler(
        include_paths=[source_path.parent], source_path=source_path
    )
    return compiler.compile(source, fragments)
