"""Handler resolution for dotted macro paths.

``resolve(("deep", "foo", "bar"), ctx)`` finds the object that serves as
the handler of macro ``bar``:

1. The first segment is looked up in order:
   a. reserved handlers: ``this``, ``param``, ``response``, ``request``,
      ``session`` (case-insensitive)
   b. the ``this`` object and its ``__parent__`` chain, matched by class
      name (``<% page.title %>`` finds the enclosing Page)
   c. the context's scopes: handler registry → response data →
      session data → root → globals
2. Each following segment except the last descends into
   ``handler.get_macro_handler(segment)`` when that returns a handler,
   otherwise into the handler's property of that name.
3. The last segment is the macro name; it is not looked up here.

Single-segment paths (``<% echo %>``) resolve to the global scope.
The resolver never mutates the objects it inspects.

"""

from __future__ import annotations

import builtins
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from macroskin.environment.exceptions import ErrorCode, TemplateRuntimeError
from macroskin.handlers import find_nested_handler, is_strict
from macroskin.scopes import MISSING, get_property

if TYPE_CHECKING:
    from macroskin.render_context import RenderContext


@dataclass(frozen=True, slots=True)
class Resolved:
    """A handler was found; ``name`` is the macro to invoke on it."""

    handler: Any
    name: str
    path: tuple[str, ...]
    strict: bool = False

    @property
    def full_name(self) -> str:
        return ".".join(self.path)


@dataclass(frozen=True, slots=True)
class Unresolved:
    """No handler for ``segment``, so macro ``path`` cannot be invoked."""

    path: tuple[str, ...]
    segment: str

    @property
    def full_name(self) -> str:
        return ".".join(self.path)


ResolutionResult = Resolved | Unresolved


class HandlerResolver:
    """Walks the precedence chain for macro and filter paths.

    Args:
        allow_deep_macros: Allow paths with more than two segments
            (``a.b.c``). When False such paths raise TemplateRuntimeError.
    """

    __slots__ = ("allow_deep_macros",)

    def __init__(self, allow_deep_macros: bool = True):
        self.allow_deep_macros = allow_deep_macros

    def resolve(self, path: tuple[str, ...], ctx: RenderContext) -> ResolutionResult:
        if len(path) == 1:
            return Resolved(ctx.globals, path[0], path, strict=True)

        if len(path) > 2 and not self.allow_deep_macros:
            raise TemplateRuntimeError(
                f"Deep macro path '{'.'.join(path)}' is not allowed",
                template_name=ctx.template_name,
                lineno=ctx.line or None,
                suggestion="Create the Environment with allow_deep_macros=True",
                code=ErrorCode.DEEP_MACRO,
            )

        handler = self.resolve_first(path[0], ctx)
        if handler is MISSING or handler is None:
            return Unresolved(path, path[0])

        for segment in path[1:-1]:
            handler = self.descend(handler, segment)
            if handler is MISSING or handler is None:
                return Unresolved(path, segment)

        return Resolved(handler, path[-1], path, strict=is_strict(handler))

    def resolve_first(self, name: str, ctx: RenderContext) -> Any:
        """Find the handler named by the first path segment, or MISSING."""
        reserved, value = ctx.reserved_handler(name)
        if reserved:
            return value

        found = self._match_prototype(name, ctx.this)
        if found is not None:
            return found

        for scope in ctx.scopes:
            value = scope.lookup(name)
            if value is not MISSING:
                return value
        return MISSING

    def descend(self, handler: Any, segment: str) -> Any:
        nested = find_nested_handler(handler, segment)
        if nested is not None:
            return nested
        return get_property(handler, segment)

    @staticmethod
    def _match_prototype(name: str, obj: Any) -> Any:
        """Walk ``obj`` and its ``__parent__`` chain for a class named ``name``."""
        wanted = name.lower()
        seen: set[int] = set()
        while obj is not None and id(obj) not in seen:
            seen.add(id(obj))
            for cls in type(obj).__mro__:
                if cls.__module__ == builtins.__name__:
                    continue
                if cls.__name__.lower() == wanted:
                    return obj
            obj = getattr(obj, "__parent__", None)
        return None
