"""Macro invocation: parameters, failure policy and output.

For each macro tag the invoker

1. evaluates the parameters, rendering nested tags first
   (``prefix=<% root.string %>`` becomes ``prefix="root"``),
2. resolves the handler path and calls ``<name>_macro(params, *positional)``,
3. pipes the result through the tag's filters,
4. writes the result with ``prefix``/``suffix``/``default``/``encoding``
   applied.

Macros may return their output, write it through
``get_render_context_required().write(...)``, or both. Both styles go into
the same buffer; writes made by a macro are captured by position.

Failures stay inside their tag. An unresolved macro renders its
``default`` parameter, nothing (``failmode=silent``) or an
``[Unhandled macro: name]`` diagnostic (``failmode=verbose``, and the
default for unresolved handlers and strict handlers). Any other exception
raised while the tag runs renders ``[Macro error in name: message]``
unless the environment was created with ``fail_fast=True``. That includes
errors from skins the macro renders, such as an unknown subskin or the
nesting depth limit; only a top-level ``render()`` raises those.

"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from macroskin.environment.exceptions import (
    MacroInvocationError,
    MacroNotAllowedError,
    TemplateRuntimeError,
    UndefinedFilterError,
    UnhandledMacroError,
    build_source_snippet,
)
from macroskin.handlers import find_filter, find_macro, find_unhandled_hook
from macroskin.nodes import Filter, Macro, MacroCall
from macroskin.resolver import Resolved, ResolutionResult, Unresolved
from macroskin.scopes import MISSING, get_property
from macroskin.utils.encode import get_encoder

if TYPE_CHECKING:
    from collections.abc import Callable

    from macroskin.environment.core import Environment
    from macroskin.render_context import RenderContext

logger = logging.getLogger(__name__)


class FailMode(Enum):
    """Value of the ``failmode`` macro parameter."""

    DEFAULT = "default"
    SILENT = "silent"
    VERBOSE = "verbose"

    @classmethod
    def parse(cls, value: Any, macro_name: str) -> FailMode:
        if value is None:
            return cls.DEFAULT
        if value in ("silent", "verbose"):
            return cls(value)
        logger.warning("Unrecognized failmode %r in macro %s", value, macro_name)
        return cls.DEFAULT


class MacroParams(dict):
    """Named macro parameters, plus positional ones in ``positional``.

    A fresh instance is built for every invocation, so a macro may change
    its parameters (for example ``params["suffix"] = "."``) without
    affecting other renders.
    """

    __slots__ = ("positional",)

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.positional: list[Any] = []


@dataclass(slots=True)
class StandardParams:
    """Parameters the invoker itself acts on."""

    prefix: Any = None
    suffix: Any = None
    default: Any = None
    failmode: FailMode = FailMode.DEFAULT
    encoding: str | None = None

    @classmethod
    def from_params(cls, params: MacroParams, macro_name: str) -> StandardParams:
        encoding = params.get("encoding")
        if encoding is not None and get_encoder(encoding) is None:
            logger.warning("Unrecognized encoding %r in macro %s", encoding, macro_name)
            encoding = None
        return cls(
            prefix=params.get("prefix"),
            suffix=params.get("suffix"),
            default=params.get("default"),
            failmode=FailMode.parse(params.get("failmode"), macro_name),
            encoding=encoding,
        )

    def refresh(self, params: MacroParams) -> None:
        """Pick up prefix/suffix/default changed by the macro."""
        self.prefix = params.get("prefix")
        self.suffix = params.get("suffix")
        self.default = params.get("default")


def to_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    return str(value)


class MacroInvoker:
    """Renders macro tags for one Environment.

    Stateless apart from its environment reference; all per-render state
    lives in the RenderContext, so one invoker serves concurrent renders.
    """

    __slots__ = ("_env",)

    def __init__(self, environment: Environment):
        self._env = environment

    # ------------------------------------------------------------- render

    def render_macro(self, macro: Macro, ctx: RenderContext) -> None:
        """Render one macro tag into the context's current buffer."""
        ctx.line = macro.lineno
        mark = ctx.mark()
        std: StandardParams | None = None
        try:
            params = self.evaluate_params(macro, ctx)
            std = StandardParams.from_params(params, macro.name)
            value = self.invoke_macro(macro, params, ctx)
            std.refresh(params)
            self._write_result(value, mark, std, ctx)
        except UnhandledMacroError as exc:
            self._write_unhandled(exc, std or StandardParams(), ctx)
        except MacroInvocationError:
            # already located at the innermost failing tag
            raise
        except Exception as exc:
            if self._env.fail_fast:
                raise self._invocation_error(macro, exc, ctx) from exc
            self._write_error(macro, exc, ctx)

    def render_nested(self, macro: Macro, ctx: RenderContext) -> str:
        """Render a macro used as a parameter value and return its text."""
        ctx.push_buffer()
        try:
            self.render_macro(macro, ctx)
        finally:
            text = ctx.pop_buffer()
        return text

    def evaluate_params(self, call: MacroCall, ctx: RenderContext) -> MacroParams:
        """Build the parameter object, rendering nested macros left to right."""
        params = MacroParams()
        for param in call.params:
            value = param.value
            if isinstance(value, Macro):
                value = self.render_nested(value, ctx)
            if param.name is None:
                params.positional.append(value)
            else:
                params[param.name] = value
        return params

    # ------------------------------------------------------------- invoke

    def invoke_macro(self, macro: Macro, params: MacroParams, ctx: RenderContext) -> Any:
        """Resolve and call ``macro``, then apply its filters.

        Returns the macro's value. Output the macro wrote stays in the
        buffer, unless the tag has filters and the macro returned None: then
        the written text is taken out and becomes the filters' input.
        """
        if ctx.sandbox is not None and macro.name not in ctx.sandbox:
            raise MacroNotAllowedError(
                macro.name,
                template_name=ctx.template_name,
                lineno=macro.lineno,
            )

        resolution = self._env.resolver.resolve(macro.path, ctx)
        mark = ctx.mark()
        value = self.invoke(resolution, params, ctx)

        if macro.filters:
            if value is None and ctx.written_since(mark):
                value = ctx.cut(mark)
            value = self.apply_filters(macro.filters, value, ctx)
        return value

    def invoke(self, resolution: ResolutionResult, params: MacroParams, ctx: RenderContext) -> Any:
        """Invoke a resolved macro and return its value.

        Lookup on the handler: ``<name>_macro`` callable, then a
        non-callable property ``<name>``, then ``on_unhandled_macro``.

        Raises:
            UnhandledMacroError: If the path or the macro cannot be resolved
        """
        if isinstance(resolution, Unresolved):
            raise UnhandledMacroError(
                resolution.full_name,
                segment=resolution.segment,
                verbose_by_default=True,
            )

        handler, name = resolution.handler, resolution.name
        func = find_macro(handler, name)
        if func is not None:
            return func(params, *params.positional)

        value = get_property(handler, name)
        if value is not MISSING and not callable(value):
            return value

        hook = find_unhandled_hook(handler)
        if hook is not None:
            return hook(name, params)

        if value is not MISSING:
            # a plain function is not a macro
            raise UnhandledMacroError(
                resolution.full_name,
                reason="not a macro",
                verbose_by_default=False,
            )
        raise UnhandledMacroError(resolution.full_name, verbose_by_default=resolution.strict)

    # ------------------------------------------------------------ filters

    def apply_filters(self, filters: tuple[Filter, ...], value: Any, ctx: RenderContext) -> Any:
        for flt in filters:
            params = self.evaluate_params(flt, ctx)
            func = self.find_filter(flt, ctx)
            value = func(value, params, *params.positional)
        return value

    def find_filter(self, flt: Filter, ctx: RenderContext) -> Callable[..., Any]:
        """Look up ``<name>_filter`` on the resolved handler.

        Single-segment filters also fall back to the environment's filter
        registry (``env.filters``).

        Raises:
            UndefinedFilterError: If no filter is found
        """
        resolution = self._env.resolver.resolve(flt.path, ctx)
        func = None
        if isinstance(resolution, Resolved):
            func = find_filter(resolution.handler, resolution.name)
        if func is None and len(flt.path) == 1:
            func = self._env.filters.get(flt.name)
        if func is None:
            raise UndefinedFilterError(
                f"Undefined filter {flt.name}",
                template_name=ctx.template_name,
                lineno=flt.lineno,
            )
        return func

    # ------------------------------------------------------------- output

    def _write_result(self, value: Any, mark: int, std: StandardParams, ctx: RenderContext) -> None:
        if not ctx.written_since(mark):
            self._write_value(value, std, ctx, use_default=True)
            return

        if std.encoding:
            written = ctx.cut(mark)
            self._write_value(written, std, ctx, use_default=False)
        else:
            if std.prefix is not None:
                ctx.insert(mark, to_text(std.prefix))
            if std.suffix is not None:
                ctx.write(to_text(std.suffix))
        # a return value is appended even after written output, but never
        # replaced by the default
        self._write_value(value, std, ctx, use_default=False)

    def _write_value(
        self,
        value: Any,
        std: StandardParams,
        ctx: RenderContext,
        *,
        use_default: bool,
    ) -> None:
        # prefix and suffix are left off only when there was no value at all
        wrap = value is not None
        if value is None or value == "":
            if not use_default or std.default is None:
                return
            text = to_text(std.default)
        else:
            text = to_text(value)
        if not text:
            return

        encoder = get_encoder(std.encoding)
        if wrap and std.prefix is not None:
            ctx.write(to_text(std.prefix))
        ctx.write(encoder(text) if encoder else text)
        if wrap and std.suffix is not None:
            ctx.write(to_text(std.suffix))

    def _write_unhandled(self, exc: UnhandledMacroError, std: StandardParams, ctx: RenderContext) -> None:
        if std.default is not None and std.default != "":
            ctx.write(to_text(std.default))
            return
        verbose = std.failmode is FailMode.VERBOSE or (
            std.failmode is FailMode.DEFAULT and exc.verbose_by_default
        )
        if verbose:
            logger.warning(
                "%s (%s) in %s:%s", exc, exc.detail, ctx.template_name or "<skin>", ctx.line
            )
            ctx.write(f"[{exc}]")
        else:
            logger.debug("%s (silent) in %s:%s", exc, ctx.template_name or "<skin>", ctx.line)

    def _write_error(self, macro: Macro, exc: Exception, ctx: RenderContext) -> None:
        msg = str(getattr(exc, "message", None) or exc)
        if len(msg) < 10:
            msg = f"{type(exc).__name__}: {msg}" if msg else type(exc).__name__
        msg = f"Macro error in {macro.name}: {msg}"
        logger.error(
            "%s (%s:%s)",
            msg,
            ctx.template_name or "<skin>",
            macro.lineno,
            exc_info=not isinstance(exc, TemplateRuntimeError),
        )
        ctx.write(f"[{msg}]")

    def _invocation_error(self, macro: Macro, exc: Exception, ctx: RenderContext) -> MacroInvocationError:
        snippet = None
        if ctx.source:
            snippet = build_source_snippet(ctx.source, macro.lineno, column=macro.col_offset)
        return MacroInvocationError(
            f"Macro error in {macro.name}: {getattr(exc, 'message', None) or exc}",
            expression=macro.source,
            template_name=ctx.template_name,
            lineno=macro.lineno,
            source_snippet=snippet,
            template_stack=ctx.template_stack.copy(),
        )
