"""Skin structure nodes."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from macroskin.nodes.base import Node

MAIN_SECTION = "main"


@dataclass(frozen=True, slots=True)
class SubskinMarker(Node):
    """Subskin marker: <% #name %>

    Only seen while parsing; the parser turns markers into section ranges
    on the SkinNode and does not keep them in the body.
    """

    name: str


@dataclass(frozen=True, slots=True)
class SkinNode(Node):
    """Root node of a parsed skin.

    ``body`` holds every node of every section in source order.
    ``sections`` maps a subskin name to its ``(start, stop)`` slice of
    ``body``. A skin without markers has a single ``"main"`` section.
    """

    body: Sequence[Node]
    sections: Mapping[str, tuple[int, int]]
    source: str = ""

    def section(self, name: str) -> Sequence[Node]:
        start, stop = self.sections[name]
        return self.body[start:stop]
