"""Copy-on-write registries for environment filters and globals."""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from macroskin.environment.core import Environment


class Registry:
    """Dict-like view over one of the Environment's name tables.

    Supports:
        - env.filters['shout'] = func
        - env.globals.update({'echo_macro': func})
        - func = env.filters['shout']
        - 'shout' in env.filters

    Every mutation swaps in a new dict, so renders running on other threads
    keep reading a consistent snapshot without locks.
    """

    __slots__ = ("_attr", "_env")

    def __init__(self, env: Environment, attr: str):
        self._env = env
        self._attr = attr

    def _get_dict(self) -> dict[str, Any]:
        return getattr(self._env, self._attr)

    def _set_dict(self, d: dict[str, Any]) -> None:
        setattr(self._env, self._attr, d)

    def __getitem__(self, name: str) -> Any:
        return self._get_dict()[name]

    def __setitem__(self, name: str, value: Any) -> None:
        new = self._get_dict().copy()
        new[name] = value
        self._set_dict(new)

    def __delitem__(self, name: str) -> None:
        new = self._get_dict().copy()
        del new[name]
        self._set_dict(new)

    def __contains__(self, name: object) -> bool:
        return name in self._get_dict()

    def __iter__(self) -> Iterator[str]:
        return iter(self._get_dict())

    def __len__(self) -> int:
        return len(self._get_dict())

    def get(self, name: str, default: Any = None) -> Any:
        return self._get_dict().get(name, default)

    def update(self, mapping: dict[str, Any]) -> None:
        new = self._get_dict().copy()
        new.update(mapping)
        self._set_dict(new)

    def copy(self) -> dict[str, Any]:
        return self._get_dict().copy()

    def keys(self):
        return self._get_dict().keys()

    def items(self):
        return self._get_dict().items()
