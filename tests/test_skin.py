"""Skin rendering: sections, nested skins, render contexts, introspection."""

from __future__ import annotations

import io

import pytest

from macroskin import (
    ErrorCode,
    MacroHandler,
    SubskinNotFoundError,
    get_render_context,
    get_render_context_required,
    render_context,
)

from .conftest import assert_contains


class TestRender:
    """Basic rendering."""

    def test_literal_passthrough(self, env) -> None:
        assert env.from_string("just text").render() == "just text"

    def test_comment_renders_nothing(self, render) -> None:
        assert render("<% // this.foo bar=<% this.foobar %> FIXME %>ok") == "ok"

    def test_escaped_tag(self, env) -> None:
        assert env.from_string("\\<% x.y %>").render() == "\\<% x.y %>"

    def test_idempotent(self, render) -> None:
        source = "<% root.string %>-<% echo <% response.banana %> | uppercase %>"
        assert render(source) == render(source) == "root-YELLOW"

    def test_this_object(self, env) -> None:
        class Page:
            title = "About"

        assert env.from_string("<% this.title %>").render(this=Page()) == "About"

    def test_no_context_outside_render(self, env) -> None:
        env.from_string("x").render()
        assert get_render_context() is None
        with pytest.raises(RuntimeError):
            get_render_context_required()


class TestSubskins:
    """Section selection."""

    def test_render_skin_sections(self, app_env) -> None:
        assert app_env.render_skin("subskins") == "mainskin"
        assert app_env.render_skin("subskins#subskin1") == "subskin1"
        assert app_env.render_skin("subskins#subskin2") == "subskin2"

    def test_render_subskin_argument(self, env) -> None:
        skin = env.from_string("M<% #item %>\n<li><% param.text %></li>")
        assert skin.render("item", {"text": "one"}) == "<li>one</li>"
        assert skin.render() == "M"

    def test_unknown_subskin(self, env) -> None:
        skin = env.from_string("M<% #item %>\nI", name="list")
        with pytest.raises(SubskinNotFoundError) as exc_info:
            skin.render("iten")
        err = exc_info.value
        assert err.code is ErrorCode.SUBSKIN_NOT_FOUND
        assert err.subskin == "iten"
        assert "Did you mean 'item'?" in str(err)

    def test_subskins_only_has_empty_main(self, env) -> None:
        skin = env.from_string("<% #a %>\nA")
        assert skin.render() == ""
        assert skin.render("a") == "A"


class TestNestedRendering:
    """Skins rendered from inside macros."""

    def test_skin_global_macro(self, app_env) -> None:
        skin = app_env.from_string('<div><% skin name="Story/teaser" text=Hi %></div>')
        assert skin.render() == "<div><p>Hi</p></div>"

    def test_nested_render_returns_string(self, app_env) -> None:
        class Story(MacroHandler):
            def teaser_macro(self, params):
                html = app_env.render_skin("Story/teaser", {"text": "nested"})
                return html.upper()

        skin = app_env.from_string("[<% story.teaser %>]")
        assert skin.render(handlers={"story": Story()}) == "[<P>NESTED</P>]"

    def test_nested_render_shares_scopes(self, app_env) -> None:
        inner = app_env.from_string("<% response.who %>")

        def inner_macro(params):
            return inner.render()

        skin = app_env.from_string("<% inner %>")
        assert skin.render(response={"who": "shared"}, globals={"inner_macro": inner_macro}) == (
            "shared"
        )

    def test_nested_param_is_restored(self, app_env) -> None:
        class Story(MacroHandler):
            def teaser_macro(self, params):
                return app_env.render_skin("Story/teaser", {"text": "in"})

        skin = app_env.from_string("<% param.text %><% story.teaser %><% param.text %>")
        assert skin.render(None, {"text": "out"}, handlers={"story": Story()}) == "out<p>in</p>out"

    def test_render_to_buffer_inside_macro(self, app_env) -> None:
        teaser = app_env.get_skin("Story/teaser")

        class Story(MacroHandler):
            def teaser_macro(self, params):
                teaser.render_to_buffer(params={"text": "inline"})

        skin = app_env.from_string("<% story.teaser prefix=: %>")
        assert skin.render(handlers={"story": Story()}) == ":<p>inline</p>"

    def test_recursion_limit_is_contained(self, app_env) -> None:
        result = app_env.render_skin("recursive")
        assert result == (
            "[Macro error in skin: Recursive skin invocation suspected (depth 50) "
            "when rendering 'recursive']"
        )

    def test_recursion_limit_keeps_siblings(self, app_env) -> None:
        skin = app_env.from_string("before<% skin name=recursive %>after")
        result = skin.render()
        assert result.startswith("before[Macro error in skin: Recursive skin invocation")
        assert result.endswith("]after")

    def test_depth_limit_is_configurable(self, app_env) -> None:
        app_env.max_skin_depth = 3
        depth = []

        def descend_macro(params):
            depth.append(get_render_context_required().depth)
            return app_env.render_skin("descend")

        app_env.globals["descend_macro"] = descend_macro
        app_env.loader._mapping["descend"] = "<% descend %>"
        result = app_env.render_skin("descend")
        assert depth == [1, 2, 3]
        assert result == (
            "[Macro error in descend: Recursive skin invocation suspected (depth 3) "
            "when rendering 'descend']"
        )

    def test_unknown_subskin_in_nested_skin_is_contained(self, app_env) -> None:
        skin = app_env.from_string('before<% skin name="subskins#nope" %>after')
        result = skin.render()
        assert_contains(
            result,
            "before[Macro error in skin: Subskin 'nope' not found in subskins",
            "]after",
        )

    def test_render_with_new_scope_inside_render(self, app_env) -> None:
        inner = app_env.from_string("<% response.who %>")

        def inner_macro(params):
            return inner.render(response={"who": "inner"})

        skin = app_env.from_string("<% response.who %>/<% inner %>/<% response.who %>")
        result = skin.render(response={"who": "outer"}, globals={"inner_macro": inner_macro})
        assert result == "outer/inner/outer"


class TestRenderToBuffer:
    """Rendering into caller-provided sinks."""

    def test_list_buffer(self, env) -> None:
        buf = ["head:"]
        env.from_string("<% response.x %>").render_to_buffer(buf, response={"x": 1})
        assert "".join(buf) == "head:1"

    def test_writable_buffer(self, env) -> None:
        out = io.StringIO()
        env.from_string("a<% #s %>\nb").render_to_buffer(out, "s")
        assert out.getvalue() == "b"

    def test_no_buffer_outside_render(self, env) -> None:
        with pytest.raises(RuntimeError):
            env.from_string("x").render_to_buffer()

    def test_explicit_render_context(self, env) -> None:
        skin = env.from_string("Hello <% response.name %>")
        with render_context(env, response={"name": "ctx"}) as ctx:
            skin.render_to_buffer()
            assert ctx.getvalue() == "Hello ctx"


class TestIntrospection:
    """Read-only queries on parsed skins."""

    SOURCE = (
        "Top <% root.title %>\n"
        "<% // <% hidden.macro %> %>"
        "<% #list %>\n"
        "<% echo <% story.title %> | uppercase %>"
        "<% #empty %>"
    )

    def test_sections(self, env) -> None:
        skin = env.from_string(self.SOURCE)
        assert skin.sections == ("main", "list", "empty")
        assert skin.subskin_names == ("list", "empty")
        assert skin.has_main_skin
        assert skin.has_subskin("list")
        assert not skin.has_subskin("main")
        assert not skin.has_subskin("missing")

    def test_no_main_skin(self, env) -> None:
        assert not env.from_string("<% #a %>\nA").has_main_skin

    def test_subskin_source(self, env) -> None:
        skin = env.from_string(self.SOURCE)
        assert skin.get_subskin_source("list") == "<% echo <% story.title %> | uppercase %>"
        assert skin.get_subskin_source("main") == "Top <% root.title %>\n<% // <% hidden.macro %> %>"
        assert skin.get_subskin_source("empty") == ""
        assert skin.get_subskin_source("missing") is None

    def test_contains_macro(self, env) -> None:
        skin = env.from_string(self.SOURCE)
        assert skin.contains_macro("root.title")
        assert skin.contains_macro("story.title")
        assert not skin.contains_macro("hidden.macro")
        assert not skin.contains_macro("uppercase")

    def test_macro_names(self, env) -> None:
        skin = env.from_string(self.SOURCE + "<% root.title %>")
        assert skin.macro_names() == ["root.title", "echo", "story.title"]

    def test_source_and_repr(self, env) -> None:
        skin = env.from_string("x", name="Root/x")
        assert skin.source == "x"
        assert skin.name == "Root/x"
        assert repr(skin) == "<Skin Root/x>"
        assert repr(env.from_string("y")) == "<Skin (inline)>"
