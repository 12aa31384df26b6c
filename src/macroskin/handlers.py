"""Macro handler capabilities.

A handler is any object that serves as the target of a macro path. The
engine asks it for four optional capabilities:

- ``<name>_macro``: a callable invoked for ``<% handler.name %>``
- ``<name>_filter``: a callable invoked for ``<% x | handler.name %>``
- ``get_macro_handler(name)``: returns a nested handler for deep paths
  (``<% deep.foo.bar %>`` → ``deep.get_macro_handler("foo")``)
- ``on_unhandled_macro(name, params)``: catch-all for missing macros

Subclass MacroHandler to implement them explicitly. Plain objects and
mappings get the same capabilities by duck typing: an attribute (or key)
with the conventional name is used when it is callable.

Example:
    >>> class Story(MacroHandler):
    ...     def __init__(self, title):
    ...         self.title = title
    ...     def headline_macro(self, params):
    ...         return self.title.upper()
    >>> env.from_string("<% story.headline %>").render(handlers={"story": Story("hi")})
    'HI'

"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, ClassVar

from macroskin.scopes import GlobalScope, get_property

MACRO_SUFFIX = "_macro"
FILTER_SUFFIX = "_filter"


class MacroHandler:
    """Base class for objects that expose macros.

    Attributes:
        strict_macros: When True (the default), a missing macro on this
            handler renders the ``[Unhandled macro: ...]`` diagnostic unless
            the tag says ``failmode=silent``. Plain objects and mappings are
            lenient and render nothing.
    """

    strict_macros: ClassVar[bool] = True

    def get_macro(self, name: str) -> Callable[..., Any] | None:
        """Return the callable implementing macro ``name``, if any."""
        func = getattr(self, name + MACRO_SUFFIX, None)
        return func if callable(func) else None

    def get_filter(self, name: str) -> Callable[..., Any] | None:
        """Return the callable implementing filter ``name``, if any."""
        func = getattr(self, name + FILTER_SUFFIX, None)
        return func if callable(func) else None

    def get_macro_handler(self, name: str) -> Any:
        """Return a nested handler for path segment ``name``, or None."""
        return None


def _callable_property(handler: Any, name: str) -> Callable[..., Any] | None:
    value = get_property(handler, name)
    return value if callable(value) else None


def find_macro(handler: Any, name: str) -> Callable[..., Any] | None:
    if isinstance(handler, MacroHandler):
        return handler.get_macro(name)
    return _callable_property(handler, name + MACRO_SUFFIX)


def find_filter(handler: Any, name: str) -> Callable[..., Any] | None:
    if isinstance(handler, MacroHandler):
        return handler.get_filter(name)
    return _callable_property(handler, name + FILTER_SUFFIX)


def find_nested_handler(handler: Any, name: str) -> Any:
    """Ask ``handler.get_macro_handler(name)`` for a nested handler."""
    getter = _callable_property(handler, "get_macro_handler")
    if getter is None:
        return None
    return getter(name)


def find_unhandled_hook(handler: Any) -> Callable[[str, Any], Any] | None:
    return _callable_property(handler, "on_unhandled_macro")


def is_strict(handler: Any) -> bool:
    """Whether a missing macro on ``handler`` is reported by default."""
    if isinstance(handler, MacroHandler):
        return handler.strict_macros
    return isinstance(handler, GlobalScope)
