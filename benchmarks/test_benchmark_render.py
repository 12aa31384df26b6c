"""Skin rendering benchmarks: macroskin vs Jinja2 as a baseline.

Skins and templates live in benchmarks/conftest.py. They produce
equivalent output, but macroskin resolves every tag at render time while
Jinja2 compiles templates to Python code, so the numbers compare the two
models rather than identical work.

Sizes:
- "minimal": one response lookup
- "page": filters, encodings, a default and 100 items rendered through a
  subskin (a ``for`` loop in Jinja2)
- "nested": three nested tags as parameter values

Run with: pytest benchmarks/test_benchmark_render.py --benchmark-only
Compare: pytest benchmarks/test_benchmark_render.py --benchmark-compare
"""

from __future__ import annotations

import pytest
from jinja2 import Environment as Jinja2Environment
from pytest_benchmark.fixture import BenchmarkFixture

from macroskin import Environment, parse

from .conftest import JINJA2_TEMPLATES, MACROSKIN_SKINS, Catalog


@pytest.mark.benchmark(group="render:minimal")
def test_render_minimal_macroskin(benchmark: BenchmarkFixture, macroskin_env: Environment) -> None:
    skin = macroskin_env.get_skin("minimal")
    result = benchmark(skin.render, response={"name": "Benchmark"})
    assert result == "Hello, Benchmark!"


@pytest.mark.benchmark(group="render:minimal")
def test_render_minimal_jinja2(benchmark: BenchmarkFixture, jinja2_env: Jinja2Environment) -> None:
    template = jinja2_env.get_template("minimal")
    result = benchmark(template.render, name="Benchmark")
    assert result == "Hello, Benchmark!"


@pytest.mark.benchmark(group="render:page")
def test_render_page_macroskin(
    benchmark: BenchmarkFixture,
    macroskin_env: Environment,
    catalog: Catalog,
) -> None:
    skin = macroskin_env.get_skin("page")
    result = benchmark(
        skin.render,
        response={"title": "Catalog & Co"},
        handlers={"catalog": catalog},
    )
    assert "<title>Catalog &amp; Co</title>" in result
    assert '<li class="even">Item &lt;1&gt;: $3</li>' in result
    assert "nothing here" in result


@pytest.mark.benchmark(group="render:page")
def test_render_page_jinja2(
    benchmark: BenchmarkFixture,
    jinja2_env: Jinja2Environment,
    items: list[dict[str, object]],
) -> None:
    template = jinja2_env.get_template("page")
    result = benchmark(template.render, title="Catalog & Co", items=items)
    assert '<li class="even">Item &lt;1&gt;: $3</li>' in result


@pytest.mark.benchmark(group="render:nested")
def test_render_nested_macroskin(benchmark: BenchmarkFixture, macroskin_env: Environment) -> None:
    skin = macroskin_env.get_skin("nested")
    result = benchmark(skin.render, response={"name": "deep"})
    assert result == "[DEEP]"


@pytest.mark.benchmark(group="render:nested")
def test_render_nested_jinja2(benchmark: BenchmarkFixture, jinja2_env: Jinja2Environment) -> None:
    template = jinja2_env.get_template("nested")
    result = benchmark(template.render, name="deep")
    assert result == "[DEEP]"


@pytest.mark.benchmark(group="parse:page")
def test_parse_page_macroskin(benchmark: BenchmarkFixture) -> None:
    node = benchmark(parse, MACROSKIN_SKINS["page"])
    assert "item" in node.sections


@pytest.mark.benchmark(group="parse:page")
def test_compile_page_jinja2(benchmark: BenchmarkFixture) -> None:
    env = Jinja2Environment()
    benchmark(env.from_string, JINJA2_TEMPLATES["page"])
