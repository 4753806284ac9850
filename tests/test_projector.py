import pytest

from revelry.config import Config
from revelry.errors import UnknownPlugin
from revelry.framework import default_options_literal, format_options_literal
from revelry.projector import project_options


def test_meta_tags_author_first_then_meta_in_order():
    config = Config(
        title="T",
        author="John Smith",
        meta={"autometa": "Working", "keywords": "slides, talks"},
    )
    projection = project_options(config)
    assert projection.meta_tags == [
        '<meta name="author" content="John Smith">',
        '<meta name="autometa" content="Working" />',
        '<meta name="keywords" content="slides, talks" />',
    ]


@pytest.mark.parametrize("author", [None, ""])
def test_no_author_tag_without_author(author):
    projection = project_options(Config(title="T", author=author, meta={"a": "b"}))
    assert projection.meta_tags == ['<meta name="a" content="b" />']


def test_meta_values_are_escaped():
    projection = project_options(Config(title="T", author='Ann "The" <Dev>'))
    assert projection.meta_tags == [
        '<meta name="author" content="Ann &quot;The&quot; &lt;Dev&gt;">'
    ]


def test_options_literal_formats_values():
    config = Config(
        title="T",
        options={"controls": False, "progress": True, "width": 960, "transition": "fade"},
    )
    assert project_options(config).options_literal == (
        'controls:false,\nprogress:true,\nwidth:960,\ntransition:"fade"'
    )


def test_options_literal_never_adds_defaults():
    assert project_options(Config(title="T")).options_literal == ""


def test_non_identifier_option_keys_are_quoted():
    assert format_options_literal({"data-x": 1.5}) == '"data-x":1.5'


def test_default_options_skip_configured_keys():
    literal = default_options_literal(["controls", "transition"])
    assert "controls" not in literal
    assert "transition" not in literal
    assert "history:true" in literal


def test_required_plugin_paths_follow_plugin_order():
    projection = project_options(Config(title="T", plugins=["zoom", "markdown"]))
    assert projection.required_plugin_paths == ["plugin/zoom-js", "plugin/markdown"]
    assert "plugin/zoom-js/zoom.js" in projection.dependencies[0]
    assert "plugin/markdown/marked.js" in projection.dependencies[1]


def test_highlight_plugin_adds_stylesheet_and_callback():
    projection = project_options(
        Config(title="T", plugins=["highlight"], highlight_theme="monokai")
    )
    assert projection.stylesheets == ['<link rel="stylesheet" href="lib/css/monokai.css">']
    assert "hljs.initHighlightingOnLoad();" in projection.dependencies[0]


def test_no_stylesheets_without_highlight():
    assert project_options(Config(title="T")).stylesheets == []


def test_unknown_plugin():
    with pytest.raises(UnknownPlugin) as exc_info:
        project_options(Config(title="T", plugins=["markdown", "confetti"]))
    assert exc_info.value.name == "confetti"
