"""Handlers -- Python objects exposing macros, filters and nested handlers.

A MacroHandler subclass provides ``<name>_macro`` and ``<name>_filter``
methods. Macros either return a value or write into the active render
context, deep paths go through ``get_macro_handler``, and
``on_unhandled_macro`` catches everything else.

Run:
    python app.py
"""

from macroskin import Environment, MacroHandler, get_render_context_required


class Comments(MacroHandler):
    def __init__(self, comments: list[str]):
        self.comments = comments

    def count_macro(self, params):
        return len(self.comments)

    def list_macro(self, params):
        ctx = get_render_context_required()
        for text in self.comments:
            ctx.write(f"<li>{text}</li>")


class Story(MacroHandler):
    def __init__(self, title: str, comments: list[str]):
        self.title = title
        self.comments = Comments(comments)

    def headline_macro(self, params):
        level = params.get("level", "1")
        return f"<h{level}>{self.title}</h{level}>"

    def shout_filter(self, value, params, *args):
        return f"{value}{'!' * int(params.get('times', 1))}"

    def get_macro_handler(self, name):
        if name == "comments":
            return self.comments
        return None


class Settings(MacroHandler):
    """Unknown macros are looked up in a settings table."""

    strict_macros = False

    def __init__(self, values: dict[str, str]):
        self.values = values

    def on_unhandled_macro(self, name, params):
        return self.values.get(name)


env = Environment()

skin = env.from_string(
    """\
<% story.headline level=2 %>
<% story.title | uppercase | story.shout times=2 %>
<% story.comments.count suffix=" comments" %>
<ul><% story.comments.list %></ul>
<% settings.site_name %> / <% settings.missing default="n/a" %>
<% story.missing %>
<% story.missing failmode=silent %>
<% story.title | nosuchfilter %>"""
)

story = Story("Skins are back", ["First!", "Nice."])
settings = Settings({"site_name": "Demo"})

output = skin.render(handlers={"story": story, "settings": settings})


def main() -> None:
    print(output)


if __name__ == "__main__":
    main()
