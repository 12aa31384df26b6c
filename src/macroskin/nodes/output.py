"""Literal output nodes for the skin AST."""

from __future__ import annotations

from dataclasses import dataclass

from macroskin.nodes.base import Node


@dataclass(frozen=True, slots=True)
class Data(Node):
    """Raw text between macro tags."""

    value: str


@dataclass(frozen=True, slots=True)
class Comment(Node):
    """Comment tag: <% // ... %>

    Keeps the full tag source for introspection. Renders nothing; nested
    tags inside the comment are dead text.
    """

    value: str
