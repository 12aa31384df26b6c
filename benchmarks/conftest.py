from __future__ import annotations

import json
import os
import platform
import sys
from pathlib import Path

import importlib.metadata as importlib_metadata
import pytest
from jinja2 import DictLoader as Jinja2DictLoader
from jinja2 import Environment as Jinja2Environment

from macroskin import DictLoader, Environment, MacroHandler

BASE_DIR = Path(__file__).resolve().parent
BENCHMARK_OUTPUT_DIR = BASE_DIR.parent / ".benchmarks"
BENCHMARK_OUTPUT_DIR.mkdir(exist_ok=True)

ITEM_COUNT = 100

MACROSKIN_SKINS = {
    "minimal": "Hello, <% response.name %>!",
    "page": """\
<html>
<head><title><% response.title encoding="html" %></title></head>
<body>
<h1><% response.title | uppercase %></h1>
<% // navigation %>
<ul><% catalog.items %></ul>
<p><% response.missing default="nothing here" %></p>
</body>
</html>
<% #item %>
<li class="<% param.css %>"><% param.name encoding="html" %>: <% param.price prefix="$" %></li>
""",
    "nested": "<% echo <% echo <% response.name | uppercase %> %> prefix=[ suffix=] %>",
}

JINJA2_TEMPLATES = {
    "minimal": "Hello, {{ name }}!",
    "page": """\
<html>
<head><title>{{ title | e }}</title></head>
<body>
<h1>{{ title | upper }}</h1>
{# navigation #}
<ul>{% for item in items %}<li class="{{ loop.cycle('odd', 'even') }}">{{ item.name | e }}: ${{ item.price }}</li>
{% endfor %}</ul>
<p>{{ missing | default("nothing here") }}</p>
</body>
</html>
""",
    "nested": "[{{ name | upper }}]",
}


def _version(dist: str) -> str:
    try:
        return importlib_metadata.version(dist)
    except importlib_metadata.PackageNotFoundError:
        return "unknown"


def collect_environment_metadata() -> dict[str, object]:
    """Capture reproducibility metadata for each benchmark run."""
    return {
        "python": {
            "version": platform.python_version(),
            "implementation": platform.python_implementation(),
            "executable": sys.executable,
        },
        "os": {
            "system": platform.system(),
            "release": platform.release(),
            "machine": platform.machine(),
        },
        "cpu": {
            "processor": platform.processor(),
            "count": os.cpu_count(),
        },
        "macroskin": _version("macroskin"),
        "jinja2": _version("jinja2"),
    }


class Catalog(MacroHandler):
    """Renders each item through the page skin's ``item`` subskin."""

    def __init__(self, env: Environment, items: list[dict[str, object]]):
        self._env = env
        self._items = items

    def items_macro(self, params):
        skin = self._env.get_skin("page")
        for i, item in enumerate(self._items):
            item_params = {**item, "css": "odd" if i % 2 == 0 else "even"}
            skin.render_to_buffer(subskin="item", params=item_params)


@pytest.fixture(scope="session")
def environment_metadata() -> dict[str, object]:
    """Write environment metadata to .benchmarks for ingestion."""
    metadata = collect_environment_metadata()
    (BENCHMARK_OUTPUT_DIR / "environment.json").write_text(json.dumps(metadata, indent=2))
    return metadata


@pytest.fixture(scope="session")
def items() -> list[dict[str, object]]:
    return [{"name": f"Item <{i}>", "price": i * 3} for i in range(ITEM_COUNT)]


@pytest.fixture(scope="session")
def macroskin_env() -> Environment:
    return Environment(loader=DictLoader(MACROSKIN_SKINS))


@pytest.fixture(scope="session")
def jinja2_env() -> Jinja2Environment:
    return Jinja2Environment(loader=Jinja2DictLoader(JINJA2_TEMPLATES), autoescape=False)


@pytest.fixture(scope="session")
def catalog(macroskin_env: Environment, items: list[dict[str, object]]) -> Catalog:
    return Catalog(macroskin_env, items)
