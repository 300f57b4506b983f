"""Unit tests for registry (render pipeline, helpers, named templates, options)."""

import builtins
from dataclasses import dataclass

import pytest
from pydantic import ValidationError

from logical.core.config import TemplateOptions
from logical.core.errors import TemplateSyntaxError, UnknownOptionError
from logical.registry import Registry, is_collection


@dataclass
class Row:
    name: str


class TestIsCollection:
    @pytest.mark.parametrize("value", [[1], (1,), [], range(2)])
    def test_collections(self, value: object) -> None:
        assert is_collection(value)

    @pytest.mark.parametrize("value", ["abc", b"abc", {"a": 1}, 3, None, Row("x")])
    def test_records_and_scalars(self, value: object) -> None:
        assert not is_collection(value)


class TestRender:
    def test_expression(self, registry: Registry) -> None:
        assert registry.render("<%= 1+1 %>", {}) == "2"

    def test_field(self, registry: Registry) -> None:
        assert registry.render("<%= message %>", {"message": "Hello, world."}) == "Hello, world."

    def test_comment(self, registry: Registry) -> None:
        assert registry.render("a<%# ignored %>b", {}) == "ab"

    def test_missing_data_defaults_to_empty_record(self, registry: Registry) -> None:
        assert registry.render("static") == "static"

    def test_literal_text_survives_exactly(self, registry: Registry) -> None:
        source = "line 1\n  'single' \"double\" \\ \n<%= x %>\n"
        assert registry.render(source, {"x": 1}) == "line 1\n  'single' \"double\" \\ \n1\n"

    def test_unterminated_tag_is_literal(self, registry: Registry) -> None:
        assert registry.render("a <% b", {}) == "a <% b"

    def test_if_sugar(self, registry: Registry) -> None:
        t = "<% if (x>0): %>pos<% end %>"
        assert registry.render(t, {"x": 1}) == "pos"
        assert registry.render(t, {"x": -1}) == ""

    def test_else_chain(self, registry: Registry) -> None:
        t = "<% if x > 0: %>pos<% else if (x == 0) %>zero<% else %>neg<% end %>"
        assert registry.render(t, {"x": 5}) == "pos"
        assert registry.render(t, {"x": 0}) == "zero"
        assert registry.render(t, {"x": -5}) == "neg"

    def test_each_binds_values(self, registry: Registry) -> None:
        t = "<% each (item in list): %><%= item %><% end %>"
        assert registry.render(t, {"list": ["a", "b"]}) == "ab"

    def test_each_over_mapping(self, registry: Registry) -> None:
        t = "<% each (v in scores) %>[<%= v %>]<% end %>"
        assert registry.render(t, {"scores": {"a": 1, "b": 2}}) == "[1][2]"

    def test_try_except_sugar(self, registry: Registry) -> None:
        def boom() -> str:
            raise ValueError("nope")

        t = "<% try: %><%= boom() %><% except ValueError: %>caught<% end %>"
        assert registry.render(t, {}, {"boom": boom}) == "caught"

    def test_multiline_statement(self, registry: Registry) -> None:
        t = "<%\nfor i in range(3):\n%><%= i %><% end %>"
        assert registry.render(t, {}) == "012"

    def test_inline_multiline_statement(self, registry: Registry) -> None:
        assert registry.render("<% x = 1\n   y = 2 %><%= x + y %>", {}) == "3"

    def test_multiline_string_inside_block(self, registry: Registry) -> None:
        assert registry.render('<% if True: %><%= """a\nb""" %><% end %>', {}) == "a\nb"

    def test_commented_block_header(self, registry: Registry) -> None:
        t = "<% if flag:  # note %>yes<% end  # if %>"
        assert registry.render(t, {"flag": True}) == "yes"

    def test_record_cannot_unlock_builtins(self, registry: Registry) -> None:
        with pytest.raises(NameError):
            registry.render("<%= open %>", {"__builtins__": builtins})

    def test_stray_end_raises(self, registry: Registry) -> None:
        with pytest.raises(TemplateSyntaxError):
            registry.render("<% end %>", {})

    def test_malformed_each_fails_at_evaluation(self, registry: Registry) -> None:
        with pytest.raises(SyntaxError):
            registry.render("<% each (x of y) %>", {})

    def test_sugar_off_blocks_fail_at_evaluation(self, registry: Registry) -> None:
        registry.config("sugar", False)
        with pytest.raises(SyntaxError):
            registry.render("<% if x: %>a<% end %>", {"x": 1})

    def test_sugar_off_plain_statements(self, registry: Registry) -> None:
        registry.config("sugar", False)
        assert registry.render("<% y = x * 2 %><%= y %>", {"x": 2}) == "4"

    def test_errors_propagate_unchanged(self, registry: Registry) -> None:
        with pytest.raises(NameError):
            registry.render("<%= missing %>", {})

    @pytest.mark.parametrize(
        "source, data",
        [
            ("<%= 1+1 %>", {}),
            ("<% each (i in xs): %><%= i * 2 %>,<% end %>", {"xs": [1, 2, 3]}),
            ("<% if flag: %>yes<% else %>no<% end %>", {"flag": False}),
        ],
    )
    def test_sandbox_off_same_output(self, registry: Registry, source: str, data: dict) -> None:
        sandboxed = registry.render(source, data)
        registry.config("sandbox", False)
        assert registry.render(source, data) == sandboxed


class TestFanOut:
    def test_list_renders_each_element_in_order(self, registry: Registry) -> None:
        t = registry.compile("<li><%= name %></li>")
        data = [{"name": "Tom"}, {"name": "Dick"}, {"name": "Harry"}]
        assert t.render(data) == "<li>Tom</li><li>Dick</li><li>Harry</li>"

    def test_empty_list(self, registry: Registry) -> None:
        assert registry.render("<li><%= name %></li>", []) == ""

    def test_tuple_of_objects(self, registry: Registry) -> None:
        assert registry.render("<%= name %>;", (Row("a"), Row("b"))) == "a;b;"

    def test_scalars_bound_as_whole_record(self, registry: Registry) -> None:
        assert registry.render("<%= data__ %>", ["x", "y"]) == "xy"

    def test_helpers_shared_across_elements(self, registry: Registry) -> None:
        out = registry.render("<%= up(n) %>", [{"n": "a"}, {"n": "b"}], {"up": str.upper})
        assert out == "AB"


class TestHelpers:
    def test_registry_helper(self, registry: Registry) -> None:
        registry.add_helper("greet", lambda who: "hi " + who)
        assert registry.render("<%= greet(name) %>", {"name": "Bo"}) == "hi Bo"

    def test_render_time_helpers_shadow_registry(self, registry: Registry) -> None:
        registry.add_helper("greet", lambda: "registry")
        assert registry.render("<%= greet() %>", {}, {"greet": lambda: "call"}) == "call"

    def test_render_time_helpers_do_not_persist(self, registry: Registry) -> None:
        registry.render("<%= 1 %>", {}, {"tmp": lambda: 1})
        assert "tmp" not in registry.helpers

    def test_partial_builtin(self, registry: Registry) -> None:
        registry.add_template("row", "<li><%= name %></li>")
        out = registry.render(
            "<ul><%= partial('row', items) %></ul>",
            {"items": [{"name": "a"}, {"name": "b"}]},
        )
        assert out == "<ul><li>a</li><li>b</li></ul>"

    def test_partial_with_whole_record(self, registry: Registry) -> None:
        registry.add_template("row", "<li><%= name %></li>")
        assert registry.render("<%= partial('row', data__) %>", {"name": "x"}) == "<li>x</li>"

    def test_partial_with_raw_source(self, registry: Registry) -> None:
        assert registry.render("<%= partial('plain text') %>") == "plain text"


class TestNamedTemplates:
    def test_add_template_round_trip(self, registry: Registry) -> None:
        source = "<% each (w in words): %><%= w %> <% end %>"
        data = {"words": ["a", "b"]}
        registry.add_template("words", source)
        assert registry.render("words", data) == registry.render(source, data)

    def test_add_template_returns_compiled(self, registry: Registry) -> None:
        t = registry.add_template("hello", "hi <%= who %>")
        assert t.name == "hello"
        assert t.render({"who": "you"}) == "hi you"
        assert "output__.write('hi ')" in t.code

    def test_transient_compile_not_stored(self, registry: Registry) -> None:
        registry.render("<%= 1 %>", {})
        assert dict(registry.debug()) == {}

    def test_debug_is_read_only(self, registry: Registry) -> None:
        t = registry.add_template("a", "x")
        view = registry.debug()
        assert view["a"] is t
        with pytest.raises(TypeError):
            view["b"] = t  # type: ignore[index]


class TestConfig:
    def test_defaults(self, registry: Registry) -> None:
        assert registry.config("sandbox") is True
        assert registry.config("sugar") is True
        assert registry.config("expression_start") == "<%"
        assert registry.config("expression_end") == "%>"

    def test_write_then_read(self, registry: Registry) -> None:
        registry.config("sandbox", False)
        assert registry.config("sandbox") is False

    def test_unknown_key(self, registry: Registry) -> None:
        with pytest.raises(UnknownOptionError):
            registry.config("nope")
        with pytest.raises(KeyError):
            registry.config("nope", 1)

    def test_invalid_value(self, registry: Registry) -> None:
        with pytest.raises(ValidationError):
            registry.config("expression_start", "")

    def test_custom_delimiters(self, registry: Registry) -> None:
        registry.config("expression_start", "{{")
        registry.config("expression_end", "}}")
        assert registry.render("Hi {{= name }}<%= x %>", {"name": "Bob"}) == "Hi Bob<%= x %>"

    def test_compiled_body_unaffected_by_later_changes(self, registry: Registry) -> None:
        t = registry.compile("<%= 1 %>")
        code = t.code
        registry.config("expression_start", "{{")
        registry.config("expression_end", "}}")
        assert t.code == code
        assert t.render() == "1"

    def test_sandbox_flag_read_at_render_time(self, registry: Registry) -> None:
        t = registry.compile("<%= len.__name__ %>")
        with pytest.raises(SyntaxError):
            t.render()
        registry.config("sandbox", False)
        assert t.render() == "len"


class TestIsolation:
    def test_registries_do_not_share_state(self) -> None:
        a = Registry(TemplateOptions())
        b = Registry(TemplateOptions())
        a.add_helper("only_a", lambda: 1)
        a.add_template("t", "x")
        a.config("sugar", False)
        assert "only_a" not in b.helpers
        assert "t" not in b.templates
        assert b.config("sugar") is True

    def test_partial_bound_to_own_registry(self) -> None:
        a = Registry(TemplateOptions())
        b = Registry(TemplateOptions())
        a.add_template("row", "A")
        b.add_template("row", "B")
        assert a.render("<%= partial('row') %>") == "A"
        assert b.render("<%= partial('row') %>") == "B"


class TestFields:
    def test_fields_of_source(self, registry: Registry) -> None:
        assert registry.fields("<%= first %> <%= last %>") == ["first", "last"]

    def test_fields_of_named_template(self, registry: Registry) -> None:
        registry.add_template("card", "<%= title %>")
        assert registry.fields("card") == ["title"]
