import pytest

from revelry.errors import CyclicPartial, MissingPartial
from revelry.namespace import TemplateNamespace, TemplateSource
from revelry.partials import PartialResolver
from revelry.utils import MUSTACHE, PUG, dialect_for, template_candidates


class DictProvider:
    """In-memory template layer keyed by file name."""

    def __init__(self, files):
        self.files = files

    def find(self, name):
        for candidate in template_candidates(name):
            if candidate in self.files:
                return TemplateSource(name, dialect_for(candidate), self.files[candidate])
        return None


def resolve(files, root="root"):
    return PartialResolver(TemplateNamespace([DictProvider(files)])).resolve(root)


def test_brace_marker_splices_raw_partial_text():
    resolved = resolve({"root.html": "a {{> part}} b", "part.html": "<i>{{x}}</i>\n"})
    assert resolved.text == "a <i>{{x}}</i> b"
    assert resolved.dialect == MUSTACHE
    assert resolved.embeds == {}


def test_nested_partials_expand_to_fixed_point():
    resolved = resolve(
        {
            "root.html": "<div>{{>outer}}</div>",
            "outer.html": "<p>{{> inner }}</p>",
            "inner.html": "{{title}}",
        }
    )
    assert resolved.text == "<div><p>{{title}}</p></div>"


def test_markers_expand_left_to_right():
    resolved = resolve(
        {"root.html": "{{> one}}-{{> two}}-{{> one}}", "one.html": "1", "two.html": "2"}
    )
    assert resolved.text == "1-2-1"


def test_pug_include_is_reindented():
    resolved = resolve(
        {
            "root.pug": "section\n  include part\n  p after\n",
            "part.pug": "h2 Hi\nul\n  li one\n",
        }
    )
    assert resolved.text == "section\n  h2 Hi\n  ul\n    li one\n  p after\n"
    assert resolved.dialect == PUG


def test_include_line_is_recognised_in_html_templates():
    resolved = resolve({"root.html": "<div>\n  include part\n</div>", "part.html": "<b>x</b>"})
    assert resolved.text == "<div>\n  <b>x</b>\n</div>"


def test_other_dialect_partial_becomes_embedded_span():
    resolved = resolve({"root.html": "<div>{{> part}}</div>", "part.pug": "p= title"})
    assert resolved.text == "<div><!--revelry-embed-0--></div>"
    span = resolved.embeds["<!--revelry-embed-0-->"]
    assert span.dialect == PUG
    assert span.text == "p= title"


def test_html_partial_in_pug_host_uses_piped_placeholder():
    resolved = resolve(
        {"root.pug": "section\n  include snippet\n", "snippet.html": "<b>{{x}}</b>"}
    )
    assert resolved.text == "section\n  | <!--revelry-embed-0-->\n"
    assert resolved.embeds["<!--revelry-embed-0-->"].text == "<b>{{x}}</b>"


def test_embedded_spans_from_same_dialect_partials_bubble_up():
    resolved = resolve(
        {
            "root.html": "{{> middle}}",
            "middle.html": "<div>{{> leaf}}</div>",
            "leaf.pug": "p leaf",
        }
    )
    assert resolved.text == "<div><!--revelry-embed-0--></div>"
    assert list(resolved.embeds) == ["<!--revelry-embed-0-->"]


def test_repeated_partial_is_not_a_cycle():
    resolved = resolve({"root.html": "{{> a}}{{> a}}", "a.html": "{{> b}}", "b.html": "x"})
    assert resolved.text == "xx"


def test_missing_partial():
    with pytest.raises(MissingPartial) as exc_info:
        resolve({"root.html": "{{> ghost}}"})
    assert exc_info.value.name == "ghost"


def test_missing_root_template():
    with pytest.raises(MissingPartial):
        resolve({}, root="index")


def test_direct_self_inclusion_is_cyclic():
    with pytest.raises(CyclicPartial) as exc_info:
        resolve({"root.html": "{{> a}}", "a.html": "again {{> a}}"})
    assert exc_info.value.chain == ["root", "a", "a"]


def test_cross_dialect_cycle_is_detected():
    with pytest.raises(CyclicPartial) as exc_info:
        resolve({"root.html": "{{> a}}", "a.pug": "div\n  include b", "b.html": "{{> a}}"})
    assert exc_info.value.chain == ["root", "a", "b", "a"]
    assert "root -> a -> b -> a" in str(exc_info.value)


def test_first_provider_wins():
    namespace = TemplateNamespace(
        [
            DictProvider({"header.html": "custom"}),
            DictProvider({"header.html": "bundled", "root.html": "[{{> header}}]"}),
        ]
    )
    resolved = PartialResolver(namespace).resolve("root")
    assert resolved.text == "[custom]"


def test_lines_remember_their_template():
    resolved = resolve(
        {
            "root.html": "<div>\n  {{> part}}\n</div>\n",
            "part.html": "<p>a</p>\n<p>b</p>\n",
        }
    )
    assert resolved.text == "<div>\n  <p>a</p>\n  <p>b</p>\n</div>\n"
    assert [(name, line) for name, _, line in resolved.origins] == [
        ("root", 1),
        ("part", 1),
        ("part", 2),
        ("root", 3),
        ("root", 4),
    ]
    assert resolved.origin(3) == ("part", None, 2)
    assert resolved.origin(None) == ("root", None, None)
    assert resolved.origin(99) == ("root", None, 99)


def test_nested_partial_lines_map_to_the_innermost_template():
    resolved = resolve(
        {
            "root.pug": "section\n  include outer\n",
            "outer.pug": "div\n  include inner\n",
            "inner.pug": "p one\np two\n",
        }
    )
    assert resolved.text == "section\n  div\n    p one\n    p two\n"
    assert resolved.origin(4)[0::2] == ("inner", 2)
    assert resolved.origin(2)[0::2] == ("outer", 1)
