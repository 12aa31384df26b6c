"""Resolution scopes queried for the first segment of a macro path.

A render builds an ordered tuple of scopes once, from the objects the host
application passes in (see ``build_scopes``):

    1. HandlerRegistry  — named per-request handlers (``handlers={...}``)
    2. DataScope        — response data bag
    3. DataScope        — session data bag (left out when there is no session)
    4. RootScope        — the application root object
    5. GlobalScope      — environment globals plus per-render globals

The first scope that defines a name wins. Scopes only read from the
objects they wrap.

"""

from __future__ import annotations

from collections import ChainMap
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Final, Protocol


class _Missing:
    """Sentinel for 'not defined', distinct from a defined ``None``."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Final = _Missing()


def get_property(obj: Any, name: str) -> Any:
    """Read property ``name`` from a mapping or object.

    Mappings are read by key, other objects by public attribute. Returns
    MISSING when the property is not defined. Exceptions raised by
    property getters propagate.
    """
    if obj is None or obj is MISSING:
        return MISSING
    if isinstance(obj, Mapping):
        if name in obj:
            return obj[name]
        return MISSING
    if name.startswith("_"):
        return MISSING
    try:
        return getattr(obj, name)
    except AttributeError:
        return MISSING


class Scope(Protocol):
    """One tier of the first-segment precedence chain."""

    name: str

    def lookup(self, key: str) -> Any:
        """Return the value bound to ``key`` or MISSING."""
        ...


@dataclass(frozen=True, slots=True)
class HandlerRegistry:
    """Explicitly registered handler objects, by name."""

    handlers: Mapping[str, Any] = field(default_factory=dict)
    name: str = "handlers"

    def lookup(self, key: str) -> Any:
        return self.handlers.get(key, MISSING)


@dataclass(frozen=True, slots=True)
class DataScope:
    """A key-value bag such as the response or session data.

    ``data`` may be a mapping or any object with public attributes.
    """

    data: Any
    name: str = "data"

    def lookup(self, key: str) -> Any:
        return get_property(self.data, key)


@dataclass(frozen=True, slots=True)
class RootScope:
    """The application root object.

    ``root`` names the object itself; other names are its properties.
    """

    root: Any
    name: str = "root"

    def lookup(self, key: str) -> Any:
        if self.root is None:
            return MISSING
        if key == "root":
            return self.root
        return get_property(self.root, key)


class GlobalScope(ChainMap):
    """Global functions and values, per-render globals first.

    Serves two roles: the last tier of the precedence chain, and the
    handler of single-segment macros such as ``<% echo %>`` (looked up as
    ``echo_macro``).
    """

    name = "global"

    def lookup(self, key: str) -> Any:
        return self.get(key, MISSING)


def build_scopes(
    *,
    handlers: Mapping[str, Any] | None = None,
    response: Any = None,
    session: Any = None,
    root: Any = None,
    globals: GlobalScope | None = None,
) -> tuple[Scope, ...]:
    """Build the precedence chain for one render."""
    scopes: list[Scope] = [HandlerRegistry(handlers or {})]
    if response is not None:
        scopes.append(DataScope(response, name="response"))
    if session is not None:
        scopes.append(DataScope(session, name="session"))
    if root is not None:
        scopes.append(RootScope(root))
    if globals is not None:
        scopes.append(globals)
    return tuple(scopes)
