"""Built-in filters.

Filters post-process a macro's value: ``<% story.title | uppercase %>``.
Each filter is called as ``func(value, params, *args)`` where ``params``
holds the filter's named parameters and ``args`` its positional ones.
``value`` is whatever the macro (or the previous filter) produced and may
be None.

The defaults below are registered in ``Environment.filters``; handlers can
shadow them with ``<name>_filter`` methods.

"""

from __future__ import annotations

from typing import Any

from macroskin.utils.encode import encode_html, encode_url, encode_xml


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _uppercase(value: Any, params: dict[str, Any], *args: Any) -> str:
    return _text(value).upper()


def _lowercase(value: Any, params: dict[str, Any], *args: Any) -> str:
    return _text(value).lower()


def _capitalize(value: Any, params: dict[str, Any], *args: Any) -> str:
    return _text(value).capitalize()


def _trim(value: Any, params: dict[str, Any], *args: Any) -> str:
    return _text(value).strip()


def _truncate(value: Any, params: dict[str, Any], *args: Any) -> str:
    """Cut text to ``limit`` characters (first argument), adding ``clipping``.

    ``<% story.text | truncate 20 clipping="..." %>``
    """
    text = _text(value)
    limit = params.get("limit", args[0] if args else 255)
    try:
        limit = int(limit)
    except (TypeError, ValueError):
        raise ValueError(f"truncate limit must be a number, got {limit!r}") from None
    if len(text) <= limit:
        return text
    return text[:limit] + params.get("clipping", "...")


def _default(value: Any, params: dict[str, Any], *args: Any) -> Any:
    """Replace an empty value with the first argument or ``value``."""
    if value is None or value == "":
        return params.get("value", args[0] if args else "")
    return value


def _html(value: Any, params: dict[str, Any], *args: Any) -> str:
    return encode_html(_text(value))


def _xml(value: Any, params: dict[str, Any], *args: Any) -> str:
    return encode_xml(_text(value))


def _url(value: Any, params: dict[str, Any], *args: Any) -> str:
    return encode_url(_text(value))


DEFAULT_FILTERS: dict[str, Any] = {
    "capitalize": _capitalize,
    "default": _default,
    "html": _html,
    "lowercase": _lowercase,
    "trim": _trim,
    "truncate": _truncate,
    "uppercase": _uppercase,
    "url": _url,
    "xml": _xml,
}
