"""Pytest configuration and fixtures for macroskin tests."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Any

import pytest

from macroskin import DictLoader, Environment, MacroHandler

FIXED_DATE = datetime(2024, 5, 17, 12, 30)


class Root(MacroHandler):
    """Application root with a property, macros and a date."""

    string = "root"
    date = FIXED_DATE

    def macro_macro(self, params):
        # replaces a suffix given in the tag
        if "suffix" in params:
            params["suffix"] = "."
        return "root"

    def title_macro(self, params):
        return "Site"


class Color:
    """Plain object with numeric properties and no macros."""

    def __init__(self, red: int, green: int, blue: int):
        self.red = red
        self.green = green
        self.blue = blue


class File:
    """Plain object whose property is None."""

    parent_file = None


class JSObject:
    """Plain object mixing properties, a macro and a non-macro function."""

    banana = "yellow"
    kiwi_color = "green"

    def kiwi_macro(self, params):
        return self.kiwi_color

    def apple(self):
        pass


def _is_date(value, params, *args):
    return isinstance(value, datetime)


def _is_root_date(value, params, *args):
    return value == str(FIXED_DATE)


@pytest.fixture
def env():
    """Create a basic Environment."""
    return Environment()


@pytest.fixture
def root():
    return Root()


@pytest.fixture
def world(root) -> dict[str, Any]:
    """Handler, response and session objects shared by the resolution tests."""
    return {
        "root": root,
        "handlers": {
            "color": Color(0, 255, 0),
            "file": File(),
            "jsobject": JSObject(),
        },
        "response": {
            "date": FIXED_DATE,
            "banana": "yellow",
            "kiwi_macro": lambda params: "green",
            "apple": lambda: None,
        },
        "session": {
            "banana": "yellow",
            "kiwi_macro": lambda params: "green",
            "apple": lambda: None,
        },
    }


@pytest.fixture
def app_env(root):
    """Environment with a root object, date filters and a few skins."""
    loader = DictLoader(
        {
            "subskins": "mainskin<% #subskin1 %>\nsubskin1<% #subskin2 %>\nsubskin2",
            "Root/main": "<h1><% root.title %></h1><% this.body %>",
            "Page/main": "page: <% this.name %>",
            "Global/footer": "footer",
            "Story/teaser": "<p><% param.text %></p>",
            "recursive": "<% skin name=recursive %>",
        }
    )
    return Environment(
        loader=loader,
        root=root,
        globals={"isDate_filter": _is_date, "isRootDate_filter": _is_root_date},
    )


@pytest.fixture
def render(app_env, world) -> Callable[..., str]:
    """Render inline skin source against the shared handler world."""

    def _render(source: str, params: Any = None, **overrides: Any) -> str:
        scope = {
            "handlers": world["handlers"],
            "response": world["response"],
            "session": world["session"],
        }
        scope.update(overrides)
        return app_env.from_string(source).render(None, params, **scope)

    return _render


def assert_contains(result: str, *expected_parts: str) -> None:
    """Assert rendered output contains all expected parts.

    Args:
        result: The actual rendering result.
        expected_parts: Strings that should all be present in the result.
    """
    for part in expected_parts:
        assert part in result, (
            f"Rendered output missing expected content:\n"
            f"  Missing: {part!r}\n"
            f"  Actual: {result!r}"
        )
