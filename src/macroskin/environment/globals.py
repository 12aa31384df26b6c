"""Default global macros available in all skins.

Global macros are single-segment tags such as ``<% echo %>``. They live
in the environment's globals under ``<name>_macro`` and are registered by
default; ``env.globals`` can override or extend them.

Usage:
    <% echo "Hello" %>                 → Hello
    <% echo what=<% response.title %> %>
    <% now format="%Y-%m-%d" %>
    <% skin name="Story/teaser" %>     → renders another skin inline

"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from macroskin.render_context import get_render_context_required


def echo_macro(params: dict[str, Any], *args: Any) -> Any:
    """Return the first positional argument or the ``what`` parameter.

    Handy for running a nested macro result through filters:
    ``<% echo <% root.title %> | uppercase %>``.
    """
    if args:
        return args[0]
    return params.get("what")


def now_macro(params: dict[str, Any], *args: Any) -> str:
    """Current local date and time, formatted with ``format`` (strftime)."""
    fmt = params.get("format", "%d.%m.%Y, %H:%M")
    return datetime.now().strftime(fmt)


def skin_macro(params: dict[str, Any], *args: Any) -> None:
    """Render the skin named by ``name`` (or the first argument) inline.

    The included skin sees the current ``this`` object and gets the macro
    parameters as its ``param`` handler.
    """
    name = params.get("name") or (args[0] if args else None)
    if not name:
        return
    ctx = get_render_context_required()
    ctx.write(ctx.environment.render_skin(name, params=params))


DEFAULT_GLOBALS: dict[str, Any] = {
    "echo_macro": echo_macro,
    "now_macro": now_macro,
    "skin_macro": skin_macro,
}
