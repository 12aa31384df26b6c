"""Skinsets -- skins stored per prototype on disk.

A skin directory holds one folder per prototype (``Root``, ``Page``,
``Global``) with ``<name>.skin`` files. ``render_skin_for`` walks an
object's class hierarchy, so a ``Story`` without skins of its own is
rendered with the ``Page`` skins. Subskins are selected with
``"name#subskin"``.

Run:
    python app.py
"""

from pathlib import Path

from macroskin import Environment, FileSystemLoader, MacroHandler


class Page:
    def __init__(self, title: str, href: str, body: str):
        self.title = title
        self.href = href
        self.body = body


class Story(Page):
    pass


class Site(MacroHandler):
    """Application root: ``root.title`` and ``root.navigation``."""

    title = "Macroskin Site"

    def __init__(self, pages: list[Page]):
        self.pages = pages

    def navigation_macro(self, params):
        item = env.get_skin("Root/main")
        for page in self.pages:
            item.render_to_buffer(
                subskin="nav_item",
                params={"href": page.href, "label": page.title},
            )


skins_dir = Path(__file__).parent / "skins"

about = Page("About", "/about", "Who we are.")
story = Story("Launch day", "/news/launch", "We shipped it.\nEveryone cheered loudly.")
site = Site([about, story])

env = Environment(loader=FileSystemLoader(skins_dir), root=site)

home = env.render_skin("Root/main")
story_page = env.render_skin_for(story, "main")
story_teaser = env.render_skin_for(story, "main#teaser")


def main() -> None:
    print(home)
    print(story_page)
    print(story_teaser)


if __name__ == "__main__":
    main()
