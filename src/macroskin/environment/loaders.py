"""Skin loaders for the macroskin environment.

Loaders provide skin source to the Environment. They implement
`get_source(name)` returning `(source, filename)`.

Built-in Loaders:
- `FileSystemLoader`: Load ``.skin`` files from skin directories
- `DictLoader`: Load from an in-memory dictionary (testing/embedded)
- `ChoiceLoader`: Try multiple loaders in order (skinset fallback)
- `FunctionLoader`: Wrap a callable as a loader (database-backed skins)

Skin names never contain the subskin part: ``Root/page#sidebar`` is split by
the Environment before the loader sees ``Root/page``.

Thread-Safety:
Loaders should be thread-safe for concurrent `get_source()` calls.
All built-in loaders only read.

"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from macroskin.environment.exceptions import TemplateNotFoundError


class Loader(Protocol):
    def get_source(self, name: str) -> tuple[str, str | None]: ...


def _not_found(name: str, available: list[str], where: str | None = None) -> TemplateNotFoundError:
    from difflib import get_close_matches

    msg = f"Skin '{name}' not found"
    if where:
        msg += f" in: {where}"
    matches = get_close_matches(name, available, n=1, cutoff=0.6)
    if matches:
        msg += f". Did you mean '{matches[0]}'?"
    return TemplateNotFoundError(msg)


class FileSystemLoader:
    """Load skins from one or more skinset directories.

    A skin name maps to ``<directory>/<name><extension>``, so the
    conventional per-prototype layout ``Root/main.skin`` is addressed as
    ``"Root/main"``. Directories are searched in order; the first match wins,
    which lets a custom skinset override a default one:

            >>> loader = FileSystemLoader(["skins/custom/", "skins/default/"])
            >>> source, filename = loader.get_source("Root/main")
            >>> filename
            'skins/custom/Root/main.skin'

    Raises:
        TemplateNotFoundError: If the skin is not found in any directory

    """

    __slots__ = ("_encoding", "_extension", "_paths")

    def __init__(
        self,
        paths: str | Path | list[str | Path],
        encoding: str = "utf-8",
        extension: str = ".skin",
    ):
        if isinstance(paths, (str, Path)):
            paths = [paths]
        self._paths = [Path(p) for p in paths]
        self._encoding = encoding
        self._extension = extension

    def _filename(self, name: str) -> str:
        if self._extension and not name.endswith(self._extension):
            return name + self._extension
        return name

    def get_source(self, name: str) -> tuple[str, str]:
        filename = self._filename(name)
        for base in self._paths:
            path = base / filename
            if path.is_file():
                return path.read_text(self._encoding), str(path)

        raise _not_found(
            name,
            self.list_templates(),
            ", ".join(str(p) for p in self._paths),
        )

    def list_templates(self) -> list[str]:
        """List skin names (without extension) in all directories."""
        templates = set()
        pattern = f"*{self._extension}" if self._extension else "*"
        for base in self._paths:
            if base.is_dir():
                for path in base.rglob(pattern):
                    if path.is_file():
                        rel = path.relative_to(base).as_posix()
                        if self._extension:
                            rel = rel[: -len(self._extension)]
                        templates.add(rel)
        return sorted(templates)


class DictLoader:
    """Load skins from an in-memory dictionary.

    Example:
            >>> loader = DictLoader({"Root/main": "Hello <% root.title %>"})
            >>> env = Environment(loader=loader)
            >>> env.render_skin("Root/main", root=site)

    Returns `None` as filename since skins are not file-backed.
    """

    __slots__ = ("_mapping",)

    def __init__(self, mapping: dict[str, str]):
        self._mapping = mapping

    def get_source(self, name: str) -> tuple[str, None]:
        if name not in self._mapping:
            raise _not_found(name, sorted(self._mapping.keys()))
        return self._mapping[name], None

    def list_templates(self) -> list[str]:
        return sorted(self._mapping.keys())


class ChoiceLoader:
    """Try multiple loaders in order, returning the first match.

    Raises:
        TemplateNotFoundError: If no loader can find the skin
    """

    __slots__ = ("_loaders",)

    def __init__(self, loaders: list[Loader]):
        self._loaders = loaders

    def get_source(self, name: str) -> tuple[str, str | None]:
        for loader in self._loaders:
            try:
                return loader.get_source(name)
            except TemplateNotFoundError:
                continue
        raise TemplateNotFoundError(
            f"Skin '{name}' not found in any of {len(self._loaders)} loaders"
        )

    def list_templates(self) -> list[str]:
        templates: set[str] = set()
        for loader in self._loaders:
            if hasattr(loader, "list_templates"):
                templates.update(loader.list_templates())
        return sorted(templates)


class FunctionLoader:
    """Wrap a callable as a skin loader.

    The function takes a skin name and returns the source string, a
    ``(source, filename)`` tuple, or ``None`` when the skin does not exist.
    Useful for skins stored in a database:

            >>> def load(name):
            ...     row = db.skins.get(name)
            ...     return (row.source, f"db://{name}") if row else None
            >>> env = Environment(loader=FunctionLoader(load))

    Raises:
        TemplateNotFoundError: If ``load_func`` returns ``None``
    """

    __slots__ = ("_load_func",)

    def __init__(
        self,
        load_func: Callable[[str], str | tuple[str, str | None] | None],
    ):
        self._load_func = load_func

    def get_source(self, name: str) -> tuple[str, str | None]:
        result = self._load_func(name)

        if result is None:
            raise TemplateNotFoundError(f"Skin '{name}' not found")

        if isinstance(result, str):
            return result, "<function>"

        return result

    def list_templates(self) -> list[str]:
        return []
