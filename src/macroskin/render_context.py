"""RenderContext — per-render state for skin rendering.

One RenderContext exists per top-level render call. It holds:

- the resolution scopes built from the host's request objects
  (handler registry, response data, session data, root, globals)
- the reserved handlers ``this``, ``param``, ``response``, ``request`` and
  ``session``
- the output buffer stack (StringBuilder pattern: lists of str chunks)
- the nested-skin depth and skin stack used for error messages

The active context is published through a ContextVar, so macro functions
can reach it without extra arguments:

    from macroskin import get_render_context_required

    def list_macro(params):
        ctx = get_render_context_required()
        for item in items:
            ctx.write(f"<li>{item}</li>")

A context is never shared between concurrent renders: ContextVars are
per-thread and per-task.

"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from macroskin.environment.exceptions import ErrorCode, TemplateRuntimeError
from macroskin.scopes import GlobalScope, Scope, build_scopes

if TYPE_CHECKING:
    from macroskin.environment.core import Environment
    from macroskin.template.core import Skin

RESERVED_HANDLERS = frozenset({"this", "param", "response", "request", "session"})


@dataclass
class RenderContext:
    """Per-render state isolated from the host's objects.

    Attributes:
        environment: Environment whose resolver and invoker render macros
        scopes: First-segment precedence chain, highest precedence first
        globals: Global scope, also the handler of single-segment macros
        this: Object the current skin is rendered on (``this`` handler)
        param: Parameter object of the current skin (``param`` handler)
        response: Response data bag (``response`` handler)
        request: Request data bag (``request`` handler)
        session: Session data bag, None when there is no session
        template_name: Current skin name for error messages
        source: Current skin source for error snippets
        sandbox: Macro names the current skin may call, None for no limit
        line: Line of the macro being rendered
        depth: Number of skins currently being rendered
        max_depth: Depth at which a nested render is refused as recursive
        template_stack: (skin_name, line) for each enclosing skin
    """

    environment: Environment
    scopes: tuple[Scope, ...]
    globals: GlobalScope
    this: Any = None
    param: Any = None
    response: Any = None
    request: Any = None
    session: Any = None

    template_name: str | None = None
    source: str | None = None
    sandbox: frozenset[str] | None = None
    line: int = 0

    depth: int = 0
    max_depth: int = 50
    template_stack: list[tuple[str, int]] = field(default_factory=list)

    _buffers: list[list[str]] = field(default_factory=lambda: [[]])

    # ------------------------------------------------------------ handlers

    def reserved_handler(self, name: str) -> tuple[bool, Any]:
        """Look up a reserved handler name (case-insensitive).

        Returns (is_reserved, value); value may be None, e.g. ``session``
        when the request has no session.
        """
        key = name.lower()
        if key not in RESERVED_HANDLERS:
            return False, None
        return True, getattr(self, key)

    # ------------------------------------------------------------- output

    @property
    def buffer(self) -> list[str]:
        return self._buffers[-1]

    def write(self, text: str) -> None:
        """Append text to the current output buffer."""
        if text:
            self._buffers[-1].append(text)

    def mark(self) -> int:
        """Position in the current buffer, for capturing later writes."""
        return len(self._buffers[-1])

    def written_since(self, mark: int) -> bool:
        return any(self._buffers[-1][mark:])

    def cut(self, mark: int) -> str:
        """Remove and return everything written after ``mark``."""
        buf = self._buffers[-1]
        text = "".join(buf[mark:])
        del buf[mark:]
        return text

    def insert(self, mark: int, text: str) -> None:
        if text:
            self._buffers[-1].insert(mark, text)

    def push_buffer(self) -> None:
        """Start a fresh buffer; writes go there until ``pop_buffer``."""
        self._buffers.append([])

    def pop_buffer(self) -> str:
        """Discard the current buffer and return its content."""
        return "".join(self._buffers.pop())

    def getvalue(self) -> str:
        return "".join(self._buffers[0])

    # -------------------------------------------------------------- skins

    @contextmanager
    def skin_frame(
        self,
        skin: Skin,
        *,
        this: Any = None,
        param: Any = None,
    ) -> Iterator[RenderContext]:
        """Enter a (possibly nested) skin render.

        Binds the skin's name, source and sandbox, and the ``this`` and
        ``param`` handlers, and restores the previous values on exit.

        Raises:
            TemplateRuntimeError: If more than ``max_depth`` skins are nested
        """
        if self.depth >= self.max_depth:
            raise TemplateRuntimeError(
                f"Recursive skin invocation suspected (depth {self.depth}) "
                f"when rendering '{skin.name or '<skin>'}'",
                template_name=self.template_name,
                lineno=self.line or None,
                template_stack=self.template_stack.copy(),
                suggestion="Check for skins whose macros render the same skin again",
                code=ErrorCode.SKIN_DEPTH,
            )

        saved = (
            self.template_name,
            self.source,
            self.sandbox,
            self.line,
            self.this,
            self.param,
        )
        pushed = bool(self.template_name) and self.depth > 0
        if pushed:
            self.template_stack.append((self.template_name, self.line))
        self.depth += 1
        self.template_name = skin.name
        self.source = skin.source
        self.sandbox = skin.sandbox
        self.line = 0
        if this is not None:
            self.this = this
        self.param = param if param is not None else {}
        try:
            yield self
        finally:
            self.depth -= 1
            if pushed:
                self.template_stack.pop()
            (
                self.template_name,
                self.source,
                self.sandbox,
                self.line,
                self.this,
                self.param,
            ) = saved


# Module-level ContextVar
_render_context: ContextVar[RenderContext | None] = ContextVar(
    "macroskin_render_context",
    default=None,
)


def get_render_context() -> RenderContext | None:
    """Get the active render context (None outside of a render)."""
    return _render_context.get()


def get_render_context_required() -> RenderContext:
    """Get the active render context, raise if not rendering.

    Raises:
        RuntimeError: If not in a render context
    """
    ctx = _render_context.get()
    if ctx is None:
        raise RuntimeError("Not in a render context")
    return ctx


@contextmanager
def render_context(
    environment: Environment,
    *,
    this: Any = None,
    handlers: Mapping[str, Any] | None = None,
    response: Any = None,
    request: Any = None,
    session: Any = None,
    root: Any = None,
    globals: Mapping[str, Any] | None = None,
    parent: RenderContext | None = None,
) -> Iterator[RenderContext]:
    """Create a RenderContext and make it the active one.

    ``response`` and ``request`` default to empty data bags. ``root`` falls
    back to the environment's root object. With ``parent`` the new context
    continues the parent's depth and skin stack, so recursion is still
    detected across independent nested renders.

    Example:
        with render_context(env, response={"title": "Home"}) as ctx:
            skin.render_to_buffer()
            html = ctx.getvalue()
    """
    global_scope = GlobalScope(dict(globals or {}), environment.globals.copy())
    if root is None:
        root = environment.root
    if response is None:
        response = {}
    if request is None:
        request = {}
    ctx = RenderContext(
        environment=environment,
        scopes=build_scopes(
            handlers=handlers,
            response=response,
            session=session,
            root=root,
            globals=global_scope,
        ),
        globals=global_scope,
        this=this,
        response=response,
        request=request,
        session=session,
        max_depth=environment.max_skin_depth,
    )
    if parent is not None:
        ctx.depth = parent.depth
        ctx.template_stack = parent.template_stack.copy()
        if parent.template_name:
            ctx.template_stack.append((parent.template_name, parent.line))
    token: Token[RenderContext | None] = _render_context.set(ctx)
    try:
        yield ctx
    finally:
        _render_context.reset(token)
