"""Skin — a parsed skin ready for rendering.

The Skin class wraps the parsed node tree and provides the ``render()``
API. Skins are immutable and thread-safe for concurrent rendering.

Architecture:
    ```
    Skin
    ├── _env_ref: WeakRef[Environment]  # Prevents circular refs
    ├── _node: SkinNode                 # Nodes plus subskin section ranges
    ├── _sandbox: frozenset | None      # Allowed macro names
    └── _name, _filename                # For error messages
    ```

Rendering walks one section of the node list left to right: literal text
is written as is, comments are skipped, and macro tags go through the
environment's MacroInvoker. Output is collected in the RenderContext
buffer stack (``list`` of chunks, joined once).

Nested rendering:
A macro may render another skin while a render is active
(``env.render_skin("Story/teaser")``). Without new scope arguments the
nested render shares the active RenderContext: it pushes a fresh buffer,
renders, and pops the buffer as its return value. The depth counter is
shared as well, so runaway recursion stops at ``max_skin_depth``.

Memory Safety:
Uses ``weakref.ref(env)`` to break potential cycles:
``Skin → (weak) → Environment → cache → Skin``

"""

from __future__ import annotations

import weakref
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from macroskin.environment.exceptions import SubskinNotFoundError
from macroskin.nodes import MAIN_SECTION, Data, Macro
from macroskin.render_context import get_render_context, render_context
from macroskin.template.introspection import SkinIntrospectionMixin

if TYPE_CHECKING:
    from macroskin.environment import Environment
    from macroskin.nodes import SkinNode
    from macroskin.render_context import RenderContext


class Skin(SkinIntrospectionMixin):
    """Parsed skin ready for rendering.

    Skins are immutable after construction: every render gets fresh
    parameter objects, so a macro mutating its params never leaks into
    later renders.

    Attributes:
        name: Skin identifier (for error messages), e.g. ``"Root/main"``
        filename: Source file path (for error messages)
        sandbox: Macro names this skin may call, None for no restriction

    Example:
            >>> from macroskin import Environment
            >>> env = Environment()
            >>> skin = env.from_string("Hello, <% response.name %>!")
            >>> skin.render(response={"name": "World"})
            'Hello, World!'

            >>> skin = env.from_string("<% #item %>\\n<li><% param.text %></li>")
            >>> skin.render("item", {"text": "one"})
            '<li>one</li>'

    """

    __slots__ = (
        "_env_ref",
        "_filename",
        "_name",
        "_node",
        "_sandbox",
    )

    def __init__(
        self,
        env: Environment,
        node: SkinNode,
        name: str | None = None,
        filename: str | None = None,
        sandbox: Iterable[str] | None = None,
    ):
        self._env_ref: weakref.ref[Environment] = weakref.ref(env)
        self._node = node
        self._name = name
        self._filename = filename
        self._sandbox = frozenset(sandbox) if sandbox is not None else None

    @property
    def _env(self) -> Environment:
        """Get the Environment (dereferences weak reference)."""
        env = self._env_ref()
        if env is None:
            raise RuntimeError(
                f"Environment has been garbage collected (skin: {self._name or 'unknown'})"
            )
        return env

    @property
    def name(self) -> str | None:
        return self._name

    @property
    def filename(self) -> str | None:
        return self._filename

    @property
    def source(self) -> str:
        return self._node.source

    @property
    def sandbox(self) -> frozenset[str] | None:
        return self._sandbox

    @property
    def node(self) -> SkinNode:
        """The parsed node tree."""
        return self._node

    def with_sandbox(self, sandbox: Iterable[str]) -> Skin:
        """Return a copy of this skin restricted to the given macro names."""
        return Skin(self._env, self._node, self._name, self._filename, sandbox)

    def render(
        self,
        subskin: str | None = None,
        params: Any = None,
        *,
        this: Any = None,
        handlers: Mapping[str, Any] | None = None,
        response: Any = None,
        request: Any = None,
        session: Any = None,
        root: Any = None,
        globals: Mapping[str, Any] | None = None,
    ) -> str:
        """Render a section of the skin and return the output.

        Args:
            subskin: Section to render, ``"main"`` when None
            params: Object exposed as the ``param`` handler
            this: Object the skin is rendered on (``this`` handler)
            handlers: Named handler objects, highest lookup precedence
            response: Response data bag (``response`` handler)
            request: Request data bag (``request`` handler)
            session: Session data bag (``session`` handler)
            root: Application root; defaults to ``Environment.root``
            globals: Extra globals for this render

        Returns:
            Rendered text

        Raises:
            SubskinNotFoundError: If ``subskin`` is not defined
            MacroInvocationError: With ``fail_fast``, if a macro fails
        """
        active = get_render_context()
        scoped = any(
            arg is not None
            for arg in (handlers, response, request, session, root, globals)
        )
        if active is not None and active.environment is self._env and not scoped:
            active.push_buffer()
            try:
                self.render_section(active, subskin, this=this, param=params)
            finally:
                text = active.pop_buffer()
            return text

        with render_context(
            self._env,
            this=this,
            handlers=handlers,
            response=response,
            request=request,
            session=session,
            root=root,
            globals=globals,
            parent=active,
        ) as ctx:
            self.render_section(ctx, subskin, this=this, param=params)
            return ctx.getvalue()

    def render_to_buffer(
        self,
        buffer: Any = None,
        subskin: str | None = None,
        params: Any = None,
        **scope: Any,
    ) -> Any:
        """Render into ``buffer`` instead of returning a string.

        ``buffer`` may be a list (chunks are appended) or any object with a
        ``write()`` method. Without a buffer the output goes to the active
        render's current buffer, which is how a macro includes another skin
        inline.

        Raises:
            RuntimeError: If no buffer is given outside of a render
        """
        if buffer is None:
            active = get_render_context()
            if active is None:
                raise RuntimeError("render_to_buffer() without a buffer needs an active render")
            if scope:
                active.write(self.render(subskin, params, **scope))
            else:
                self.render_section(active, subskin, this=None, param=params)
            return None

        text = self.render(subskin, params, **scope)
        write = getattr(buffer, "write", None)
        if write is not None:
            write(text)
        else:
            buffer.append(text)
        return buffer

    def render_section(
        self,
        ctx: RenderContext,
        subskin: str | None = None,
        *,
        this: Any = None,
        param: Any = None,
    ) -> None:
        """Render one section into the context's current buffer.

        The shared core of all render methods.
        """
        name = subskin or MAIN_SECTION
        sections = self._node.sections
        if name not in sections:
            if name == MAIN_SECTION:
                # a skin made of subskins only has an empty main skin
                return
            raise SubskinNotFoundError(
                name,
                list(sections),
                template_name=self._name,
                template_stack=ctx.template_stack.copy(),
            )

        invoker = self._env.invoker
        write = ctx.write
        with ctx.skin_frame(self, this=this, param=param):
            for node in self._node.section(name):
                node_type = type(node)
                if node_type is Data:
                    write(node.value)
                elif node_type is Macro:
                    invoker.render_macro(node, ctx)

    def __repr__(self) -> str:
        return f"<Skin {self._name or '(inline)'}>"
