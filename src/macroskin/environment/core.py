"""Environment — central configuration for skin loading and rendering.

The Environment owns everything that is shared between renders:

- the loader that finds skin source by name
- the parse caches (inline sources and loaded skins)
- the filter and global registries
- the HandlerResolver and MacroInvoker used by every Skin
- the default application root object

Per-request objects (handlers, response, request, session) are passed to
``render()`` and never stored on the Environment.

Thread-Safety:
Environments are safe to share between threads once configured. Caches
are locked LRUs, and the filter/global registries replace their dicts on
every mutation (copy-on-write), so running renders keep a consistent
snapshot.

Example:
    >>> from macroskin import Environment, FileSystemLoader
    >>> env = Environment(loader=FileSystemLoader("skins/"), root=site)
    >>> env.render_skin("Root/main", response={"title": "Home"})
    >>> env.render_skin("Root/main#navigation")

"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from macroskin.environment.exceptions import TemplateNotFoundError
from macroskin.environment.filters import DEFAULT_FILTERS
from macroskin.environment.globals import DEFAULT_GLOBALS
from macroskin.environment.registry import Registry
from macroskin.invoker import MacroInvoker
from macroskin.parser import parse
from macroskin.resolver import HandlerResolver
from macroskin.template import Skin
from macroskin.utils.lru_cache import LRUCache

if TYPE_CHECKING:
    from macroskin.environment.loaders import Loader

logger = logging.getLogger(__name__)

SUBSKIN_SEPARATOR = "#"


class Environment:
    """Central configuration and skin cache.

    Args:
        loader: Skin source loader, required for ``get_skin``/``render_skin``
        globals: Extra global macros and values (``{"echo_macro": fn}``)
        filters: Extra filters by name (``{"shout": fn}``)
        root: Application root object, the ``root`` handler of every render
        allow_deep_macros: Allow macro paths with more than two segments
        max_skin_depth: Maximum number of nested skin renders
        fail_fast: Raise MacroInvocationError when anything inside a macro
            tag raises (its body, a filter, a skin it renders, a sandbox
            or deep-path violation) instead of rendering an inline diagnostic
        cache_size: Maximum number of cached parsed skins (0 disables)
        skin_extension: Suffix stripped from skin names passed to
            ``get_skin`` (``"Root/main.skin"`` → ``"Root/main"``)

    Attributes:
        filters: Filter registry (dict-like, copy-on-write)
        globals: Global scope registry (dict-like, copy-on-write)
        resolver: HandlerResolver shared by all renders
        invoker: MacroInvoker shared by all renders

    Example:
        >>> env = Environment(globals={"greet_macro": lambda params: "hi"})
        >>> env.from_string("<% greet %>").render()
        'hi'
    """

    def __init__(
        self,
        *,
        loader: Loader | None = None,
        globals: Mapping[str, Any] | None = None,
        filters: Mapping[str, Any] | None = None,
        root: Any = None,
        allow_deep_macros: bool = True,
        max_skin_depth: int = 50,
        fail_fast: bool = False,
        cache_size: int = 400,
        skin_extension: str = ".skin",
    ):
        if max_skin_depth < 1:
            raise ValueError(f"max_skin_depth must be at least 1, got {max_skin_depth}")

        self.loader = loader
        self.root = root
        self.max_skin_depth = max_skin_depth
        self.fail_fast = fail_fast
        self.skin_extension = skin_extension

        self._filters: dict[str, Any] = {**DEFAULT_FILTERS, **(filters or {})}
        self._globals: dict[str, Any] = {**DEFAULT_GLOBALS, **(globals or {})}

        self.resolver = HandlerResolver(allow_deep_macros=allow_deep_macros)
        self.invoker = MacroInvoker(self)

        self._string_cache: LRUCache[tuple[str | None, str], Skin] = LRUCache(cache_size)
        self._skin_cache: LRUCache[str, Skin] = LRUCache(cache_size)

    @property
    def allow_deep_macros(self) -> bool:
        return self.resolver.allow_deep_macros

    @property
    def filters(self) -> Registry:
        return Registry(self, "_filters")

    @property
    def globals(self) -> Registry:
        return Registry(self, "_globals")

    # ------------------------------------------------------------- loading

    def from_string(
        self,
        source: str,
        name: str | None = None,
        *,
        sandbox: Iterable[str] | None = None,
    ) -> Skin:
        """Parse skin source.

        Parsed trees are cached by ``(name, source)``. With ``sandbox`` the
        skin may only call the listed macro names (``handler.name``
        notation); other macros render an inline error.

        Raises:
            TemplateSyntaxError: If the source contains a malformed tag
        """
        key = (name, source)
        skin = self._string_cache.get_or_set(
            key, lambda: Skin(self, parse(source, name=name), name=name)
        )
        if sandbox is not None:
            skin = skin.with_sandbox(sandbox)
        return skin

    def get_skin(self, name: str) -> Skin:
        """Load a skin through the loader.

        Raises:
            TemplateNotFoundError: If no loader is configured or the skin
                does not exist
            TemplateSyntaxError: If the skin source is malformed
        """
        if self.skin_extension and name.endswith(self.skin_extension):
            name = name[: -len(self.skin_extension)]
        return self._skin_cache.get_or_set(name, lambda: self._load_skin(name))

    def _load_skin(self, name: str) -> Skin:
        if self.loader is None:
            raise TemplateNotFoundError(f"Skin '{name}' not found (no loader configured)")

        source, filename = self.loader.get_source(name)
        logger.debug("Loaded skin %s from %s", name, filename or "<memory>")
        return Skin(self, parse(source, name=name, filename=filename), name=name, filename=filename)

    def find_skin(self, name: str, prototypes: Iterable[str]) -> Skin:
        """Return the first skin ``<prototype>/<name>`` that exists.

        ``prototypes`` is searched in order, typically from the most
        specific class to the most general one.

        Raises:
            TemplateNotFoundError: If no prototype defines the skin
        """
        tried: list[str] = []
        for proto in prototypes:
            qualified = f"{proto}/{name}"
            try:
                return self.get_skin(qualified)
            except TemplateNotFoundError:
                tried.append(qualified)
        raise TemplateNotFoundError(f"Skin '{name}' not found. Tried: {', '.join(tried)}")

    # ----------------------------------------------------------- rendering

    def render_skin(
        self,
        name: str,
        params: Any = None,
        *,
        this: Any = None,
        **scope: Any,
    ) -> str:
        """Load and render ``"name"`` or a subskin ``"name#subskin"``.

        Keyword arguments are passed on to ``Skin.render``.

        Example:
            >>> env.render_skin("Story/main#teaser", {"length": 80}, this=story)
        """
        skin_name, _, subskin = name.partition(SUBSKIN_SEPARATOR)
        skin = self.get_skin(skin_name)
        return skin.render(subskin or None, params, this=this, **scope)

    def render_skin_for(
        self,
        obj: Any,
        name: str,
        params: Any = None,
        **scope: Any,
    ) -> str:
        """Render skin ``name`` on ``obj``, searching its class hierarchy.

        For ``class Story(Page)`` the skin ``"main"`` is looked up as
        ``Story/main``, then ``Page/main``, then ``Global/main``. ``obj``
        becomes the ``this`` handler.
        """
        skin_name, _, subskin = name.partition(SUBSKIN_SEPARATOR)
        skin = self.find_skin(skin_name, prototype_names(obj))
        return skin.render(subskin or None, params, this=obj, **scope)

    # --------------------------------------------------------------- cache

    def clear_cache(self) -> None:
        """Drop all parsed skins, e.g. after skin files changed."""
        self._string_cache.clear()
        self._skin_cache.clear()

    def cache_info(self) -> dict[str, dict[str, int | None]]:
        return {
            "strings": self._string_cache.info(),
            "skins": self._skin_cache.info(),
        }

    def __repr__(self) -> str:
        return f"<Environment loader={self.loader!r}>"


def prototype_names(obj: Any) -> list[str]:
    """Class names of ``obj`` from most to least specific, then ``Global``."""
    names = [cls.__name__ for cls in type(obj).__mro__ if cls is not object]
    names.append("Global")
    return names
