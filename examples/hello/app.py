"""Hello -- the smallest skin.

One inline skin, response data and a couple of standard parameters.

Run:
    python app.py
"""

from macroskin import Environment

env = Environment()

skin = env.from_string(
    """\
<h1><% response.title | uppercase %></h1>
<p>Hello, <% response.name default="stranger" %>!</p>
<% response.note prefix="<aside>" suffix="</aside>" %>
<% // comments never show up in the output %>
<p><% response.greeting encoding="html" %></p>"""
)

output = skin.render(
    response={
        "title": "Macroskin",
        "name": "World",
        "greeting": "Tom & Jerry say <hi>",
    }
)

anonymous = skin.render(response={"title": "Macroskin", "note": "No name given."})


def main() -> None:
    print(output)
    print()
    print(anonymous)


if __name__ == "__main__":
    main()
