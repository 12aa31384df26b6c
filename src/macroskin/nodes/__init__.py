"""Immutable AST nodes produced by the skin parser.

Node Hierarchy:
    Node
    ├── Data          # literal text
    ├── Comment       # <% // ... %>
    ├── SubskinMarker # <% #name %> (parse-time only)
    ├── SkinNode      # whole skin with section ranges
    ├── Param         # key=value / positional parameter
    └── MacroCall
        ├── Macro     # <% a.b key=value | f %>
        └── Filter    # | f key=value

"""

from macroskin.nodes.base import Node
from macroskin.nodes.macros import Filter, Macro, MacroCall, Param
from macroskin.nodes.output import Comment, Data
from macroskin.nodes.structure import MAIN_SECTION, SkinNode, SubskinMarker

__all__ = [
    "MAIN_SECTION",
    "Comment",
    "Data",
    "Filter",
    "Macro",
    "MacroCall",
    "Node",
    "Param",
    "SkinNode",
    "SubskinMarker",
]
