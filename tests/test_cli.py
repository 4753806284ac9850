import json

from click.testing import CliRunner

from revelry import __version__
from revelry.cli import cli
from revelry.errors import MissingPartial

ENV = {"REVELRY_SKIP_GIT_INIT": "1"}


def test_cli_new_scaffolds_project(tmp_path):
    runner = CliRunner()
    target = tmp_path / "deck"
    result = runner.invoke(
        cli,
        ["new", str(target), "--title", "Deck", "--description", "About", "--author", "Ann"],
        env=ENV,
    )
    assert result.exit_code == 0, result.output
    assert (target / "slides.html").exists()
    assert not (target / "slides.pug").exists()
    assert (target / "custom" / "custom.scss").exists()
    assert (target / "custom" / "header.html").exists()
    config = json.loads((target / "Revfile.json").read_text(encoding="utf-8"))
    assert config["title"] == "Deck"
    assert config["description"] == "About"
    assert config["author"] == "Ann"
    assert config["plugins"] == ["markdown", "notes"]
    assert not (target / ".git").exists()

    # fails on non-empty directory
    result = runner.invoke(cli, ["new", str(target), "--title", "x", "--description", ""], env=ENV)
    assert result.exit_code != 0
    assert "non-empty" in result.output


def test_cli_new_pug(tmp_path):
    target = tmp_path / "deck"
    result = CliRunner().invoke(
        cli, ["new", str(target), "--pug", "--title", "T", "--description", ""], env=ENV
    )
    assert result.exit_code == 0
    assert (target / "slides.pug").exists()
    assert not (target / "slides.html").exists()


def test_cli_new_prompts_for_missing_values(monkeypatch, tmp_path):
    asked = []

    def fake_ask(question, default):
        asked.append((question, default))
        return "Answered"

    monkeypatch.setattr("revelry.cli._ask", fake_ask)
    target = tmp_path / "deck"
    result = CliRunner().invoke(cli, ["new", str(target)], env=ENV)
    assert result.exit_code == 0, result.output
    assert asked == [("Presentation title:", "deck"), ("Description:", "")]
    config = json.loads((target / "Revfile.json").read_text(encoding="utf-8"))
    assert config["title"] == "Answered"
    assert "author" not in config


def test_cli_build(monkeypatch, tmp_path):
    runner = CliRunner()
    project = tmp_path / "deck"
    runner.invoke(cli, ["new", str(project), "--title", "Deck", "--description", ""], env=ENV)
    monkeypatch.chdir(project)

    result = runner.invoke(cli, ["build"], catch_exceptions=False)
    assert result.exit_code == 0
    assert "Built Deck into" in result.output
    assert (project / "www" / "index.html").exists()

    result = runner.invoke(cli, ["build", "--target", "public"], catch_exceptions=False)
    assert result.exit_code == 0
    assert (project / "public" / "index.html").exists()


def test_cli_build_failure_exits_nonzero(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)

    def failing_build(root, target=None):
        raise MissingPartial("nowhere", root / "slides.html")

    monkeypatch.setattr("revelry.build.build_site", failing_build)
    result = CliRunner().invoke(cli, ["build"])
    assert result.exit_code == 1
    assert "Build failed:" in result.output
    assert "File: slides.html" in result.output
    assert "Partial not found: 'nowhere'" in result.output


def test_cli_build_without_revfile(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    result = CliRunner().invoke(cli, ["build"])
    assert result.exit_code == 1
    assert "Revfile.json" in result.output
    assert not (tmp_path / "www").exists()


def test_cli_serve(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    called = {}

    class DummyServer:
        def __init__(self, root, http_port=None, ws_port=None, target=None):
            called.update(root=root, port=http_port, ws_port=ws_port, target=target)

        def start(self):
            called["started"] = True

    monkeypatch.setattr("revelry.server.DevServer", DummyServer)
    result = CliRunner().invoke(
        cli, ["serve", "--port", "5050", "--ws-port", "5051", "--target", "out"],
        catch_exceptions=False,
    )
    assert result.exit_code == 0
    assert called.pop("root").resolve() == tmp_path.resolve()
    assert called == {
        "port": 5050,
        "ws_port": 5051,
        "target": "out",
        "started": True,
    }


def test_cli_version():
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_module_main_entrypoint():
    from revelry.__main__ import main

    assert callable(main)


def test_cli_build_refuses_project_root_as_target(monkeypatch, tmp_path):
    runner = CliRunner()
    project = tmp_path / "deck"
    runner.invoke(cli, ["new", str(project), "--title", "Deck", "--description", ""], env=ENV)
    monkeypatch.chdir(project)

    result = runner.invoke(cli, ["build", "--target", "."])
    assert result.exit_code == 1
    assert "contains the project" in result.output
    assert (project / "Revfile.json").exists()
    assert (project / "slides.html").exists()
