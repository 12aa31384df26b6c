"""Base node class for the skin AST."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Node:
    """Base class for all skin nodes.

    All nodes track their source location for error reporting.
    Nodes are immutable, so a parsed skin can be shared between renders.

    """

    lineno: int
    col_offset: int
