"""Shared pytest configuration for the macroskin examples.

Each example directory holds an ``app.py`` that builds an ``env`` and
renders its skins at import time. ``example_app`` executes that file in a
fresh module namespace for every test, so parsed-skin caches and registered
globals never carry over from one test to the next.
"""

import importlib.util
from pathlib import Path
from types import ModuleType

import pytest

from macroskin import get_render_context

EXAMPLES_DIR = Path(__file__).parent


def load_example(name: str) -> ModuleType:
    """Execute ``examples/<name>/app.py`` and return the module."""
    app_path = EXAMPLES_DIR / name / "app.py"
    if not app_path.is_file():
        raise FileNotFoundError(f"Example '{name}' has no app.py")
    spec = importlib.util.spec_from_file_location(f"macroskin_example_{name}", app_path)
    assert spec is not None and spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def example_app(request: pytest.FixtureRequest):
    """The app.py next to the requesting test, freshly executed."""
    module = load_example(Path(request.path).parent.name)
    yield module
    module.env.clear_cache()


@pytest.fixture(autouse=True)
def render_context_is_released():
    """Every example render must leave no active RenderContext behind."""
    yield
    assert get_render_context() is None
