"""Command-line interface for Revelry.

This module defines the CLI commands using Click framework.
It provides commands for creating new projects, building decks, and running the preview server.

Commands:
- new: Scaffold a new presentation project.
- build: Build the deck into the output directory.
- serve: Run the preview server with live reload.
"""

from __future__ import annotations

import os
import shutil
import subprocess
from pathlib import Path

import click
import questionary

from . import __version__
from .config import Config


@click.group()
@click.version_option(version=__version__, prog_name="revelry")
def cli():
    """Revelry presentation builder."""


@cli.command()
@click.argument("name")
@click.option("--title", help="Presentation title")
@click.option("--description", help="Presentation description")
@click.option("--author", help="Author shown in the author meta tag")
@click.option("--pug", is_flag=True, help="Write slides in Pug instead of HTML")
def new(
    name: str,
    title: str | None,
    description: str | None,
    author: str | None,
    pug: bool,
):
    """Scaffold a new presentation project."""
    from .scaffold import create_project

    target = Path(name).resolve()
    if target.exists() and any(target.iterdir()):
        raise click.ClickException(
            f"Refusing to initialize into non-empty directory: {target}"
        )
    if title is None:
        title = _ask("Presentation title:", default=target.name)
    if description is None:
        description = _ask("Description:", default="")
    config = Config(title=title, description=description, author=author or None)
    create_project(target, config, pug=pug)
    _try_git_init(target)
    click.echo(f"New presentation created at {target}")


@cli.command()
@click.option("--target", help="Output directory (default: www)")
def build(target: str | None):
    """Build the deck into the output directory."""
    project_root = Path.cwd()
    from .build import build_site
    from .errors import BuildError

    try:
        result = build_site(project_root, target=target)
    except BuildError as exc:
        _report_failure(project_root, exc)
        raise SystemExit(1) from None
    click.echo(
        f"Built {result.config.title or project_root.name} into {result.output_dir} "
        f"({len(result.manifest.framework_files)} framework files)"
    )


@cli.command()
@click.option("--port", type=int, default=8000, show_default=True, help="Port for the HTTP server")
@click.option(
    "--ws-port",
    type=int,
    required=False,
    help="Port for the live reload websocket server (default: port + 1)",
)
@click.option("--target", help="Output directory (default: www)")
def serve(port: int, ws_port: int | None, target: str | None):
    """Build the deck and serve it with live reload."""
    project_root = Path.cwd()
    from .server import DevServer

    server = DevServer(project_root, http_port=port, ws_port=ws_port, target=target)
    server.start()


def _report_failure(project_root: Path, exc) -> None:
    """Print a build failure the way every command reports it."""
    click.echo(click.style("Build failed:", fg="red", bold=True), err=True)
    if exc.source_path is not None:
        try:
            shown = exc.source_path.relative_to(project_root)
        except ValueError:
            shown = exc.source_path
        click.echo(click.style(f"  File: {shown}", fg="yellow"), err=True)
    click.echo(click.style(f"  Error: {exc.message}", fg="white"), err=True)


def _ask(question: str, default: str) -> str:
    """Prompt for a value; aborts when the prompt is cancelled."""
    answer = questionary.text(question, default=default, style=_questionary_style()).ask()
    if answer is None:
        raise click.Abort()
    return answer.strip()


def _questionary_style():
    """Return consistent questionary style."""
    return questionary.Style(
        [
            ("qmark", "fg:cyan bold"),
            ("question", "bold"),
            ("answer", "fg:cyan"),
            ("pointer", "fg:cyan bold"),
            ("highlighted", "fg:cyan bold"),
            ("selected", "fg:cyan"),
        ]
    )


def main():
    """Entry point for the CLI application."""
    cli()


def _try_git_init(root: Path) -> None:
    """Initialize a git repository if git is available."""
    if os.environ.get("REVELRY_SKIP_GIT_INIT") == "1":
        return
    git_bin = shutil.which("git")
    if not git_bin:
        return
    try:
        subprocess.run(
            [git_bin, "init"],
            cwd=root,
            check=True,
            capture_output=True,
        )
    except (OSError, subprocess.CalledProcessError):
        # Non-fatal: user can run git init manually
        pass
