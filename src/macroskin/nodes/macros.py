"""Macro call nodes for the skin AST."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from macroskin.nodes.base import Node


@dataclass(frozen=True, slots=True)
class Param(Node):
    """One macro parameter.

    ``name`` is None for positional parameters. ``value`` is either the
    literal text of the parameter or a nested Macro whose rendered output
    becomes the value: ``prefix=<% root.string %>``.
    """

    name: str | None
    value: str | Macro


@dataclass(frozen=True, slots=True)
class MacroCall(Node):
    """Common shape of macros and filters: a dotted name plus parameters."""

    name: str
    params: Sequence[Param] = ()

    @property
    def path(self) -> tuple[str, ...]:
        """Name split at dots: ``deep.foo.bar`` → ``("deep", "foo", "bar")``."""
        return tuple(self.name.split("."))

    @property
    def short_name(self) -> str:
        """Last path segment, invoked as ``<short_name>_macro``."""
        return self.path[-1]

    @property
    def named_params(self) -> dict[str, str | Macro]:
        return {p.name: p.value for p in self.params if p.name is not None}

    @property
    def positional_params(self) -> list[str | Macro]:
        return [p.value for p in self.params if p.name is None]

    @property
    def has_nested_macros(self) -> bool:
        return any(isinstance(p.value, Macro) for p in self.params)


@dataclass(frozen=True, slots=True)
class Filter(MacroCall):
    """Filter applied to a macro result: <% x.y | name arg=1 %>"""


@dataclass(frozen=True, slots=True)
class Macro(MacroCall):
    """Macro tag: <% handler.name key=value | filter %>

    ``source`` is the raw tag text including delimiters, used in
    diagnostics and for ``Skin.contains_macro``.
    """

    filters: Sequence[Filter] = ()
    source: str = field(default="", compare=False)
