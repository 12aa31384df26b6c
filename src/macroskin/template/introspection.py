"""Skin introspection mixin.

Adds read-only queries about sections and macro tags to the Skin class
via mixin inheritance. Everything here works on the parsed node tree; no
macro is resolved or invoked.

"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING

from macroskin.nodes import MAIN_SECTION, Macro

if TYPE_CHECKING:
    from macroskin.nodes import Node, SkinNode


def _iter_macros(nodes: Iterator[Node] | tuple[Node, ...]) -> Iterator[Macro]:
    """Yield macros depth-first, including nested parameter macros."""
    for node in nodes:
        if not isinstance(node, Macro):
            continue
        yield node
        for param in node.params:
            if isinstance(param.value, Macro):
                yield from _iter_macros((param.value,))
        for flt in node.filters:
            for param in flt.params:
                if isinstance(param.value, Macro):
                    yield from _iter_macros((param.value,))


class SkinIntrospectionMixin:
    """Mixin adding section and macro queries to Skin.

    Requires the host class to define the following slot:
        _node: SkinNode

    """

    if TYPE_CHECKING:
        _node: SkinNode

    @property
    def sections(self) -> tuple[str, ...]:
        """Section names in source order, ``"main"`` included."""
        return tuple(self._node.sections)

    @property
    def subskin_names(self) -> tuple[str, ...]:
        """Names of the ``<% #name %>`` subskins, without ``"main"``."""
        return tuple(name for name in self._node.sections if name != MAIN_SECTION)

    @property
    def has_main_skin(self) -> bool:
        """Whether the skin has non-empty content outside its subskins."""
        span = self._node.sections.get(MAIN_SECTION)
        return span is not None and span[1] > span[0]

    def has_subskin(self, name: str) -> bool:
        return name != MAIN_SECTION and name in self._node.sections

    def get_subskin_source(self, name: str) -> str | None:
        """Return the raw source of section ``name``, or None if missing.

        Example:
            >>> skin = env.from_string("<% #a %>\\nHello <% root.name %>")
            >>> skin.get_subskin_source("a")
            'Hello <% root.name %>'
        """
        if name not in self._node.sections:
            return None
        parts: list[str] = []
        for node in self._node.section(name):
            if isinstance(node, Macro):
                parts.append(node.source)
            else:
                parts.append(getattr(node, "value", ""))
        return "".join(parts)

    def contains_macro(self, name: str) -> bool:
        """Whether a tag invokes macro ``name`` (``handler.name`` notation).

        Nested parameter macros count; commented-out tags do not.
        """
        return any(m.name == name for m in _iter_macros(self._node.body))

    def macro_names(self) -> list[str]:
        """Distinct macro names in order of first use."""
        seen: dict[str, None] = {}
        for macro in _iter_macros(self._node.body):
            seen.setdefault(macro.name, None)
        return list(seen)
