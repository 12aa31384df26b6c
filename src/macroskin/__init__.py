"""macroskin — Helma-style skin and macro rendering for Python.

A skin is plain text with macro tags. Each tag names a handler path and a
macro; the engine resolves the handler against a chain of scopes, calls
the macro, and writes its result in place of the tag.

Quickstart:
    >>> from macroskin import Environment
    >>> env = Environment()
    >>> skin = env.from_string("Hello, <% response.name %>!")
    >>> skin.render(response={"name": "World"})
    'Hello, World!'

File-based skins:
    >>> from macroskin import Environment, FileSystemLoader
    >>> env = Environment(loader=FileSystemLoader("skins/"), root=site)
    >>> env.render_skin("Root/main", this=site)
    >>> env.render_skin("Root/main#sidebar", {"limit": 5}, this=site)

Tag syntax:
    <% handler.macro key=value "positional" %>   macro call
    <% a.b prefix=<% root.title %> %>            nested tag as a value
    <% story.title | uppercase | truncate 20 %>  filter chain
    <% // anything, even <% tags %> %>           comment
    <% #sidebar %>                               subskin marker
    \\<% not a tag %>                             escaped tag

Resolution:
``<% story.title %>`` looks up ``story`` in this order: the reserved
handlers (``this``, ``param``, ``response``, ``request``, ``session``),
the classes of the ``this`` object and its ``__parent__`` chain, then the
per-render handlers, response data, session data, the root object and the
globals. The macro is ``title_macro`` on the handler, or else the plain
``title`` property.

Failure handling:
Problems stay inside their tag. Missing macros render the tag's
``default``, nothing (``failmode=silent``) or ``[Unhandled macro: ...]``
(``failmode=verbose``). Exceptions raised by macros render
``[Macro error in ...]`` unless the Environment was created with
``fail_fast=True``.

Thread-Safety:
Skins are immutable and Environments are safe to share once configured.
Per-render state lives in a RenderContext published through a ContextVar.

"""

from macroskin.environment import (
    ChoiceLoader,
    DictLoader,
    Environment,
    ErrorCode,
    FileSystemLoader,
    FunctionLoader,
    MacroInvocationError,
    MacroNotAllowedError,
    SourceSnippet,
    SubskinNotFoundError,
    TemplateError,
    TemplateNotFoundError,
    TemplateRuntimeError,
    TemplateSyntaxError,
    UndefinedFilterError,
    UnhandledMacroError,
    build_source_snippet,
)
from macroskin.handlers import MacroHandler
from macroskin.invoker import FailMode, MacroInvoker, MacroParams
from macroskin.parser import ParseError, parse
from macroskin.render_context import (
    RenderContext,
    get_render_context,
    get_render_context_required,
    render_context,
)
from macroskin.resolver import HandlerResolver, Resolved, Unresolved
from macroskin.scopes import DataScope, GlobalScope, HandlerRegistry, RootScope
from macroskin.template import Skin

__version__ = "0.1.0"

__all__ = [
    "ChoiceLoader",
    "DataScope",
    "DictLoader",
    "Environment",
    "ErrorCode",
    "FailMode",
    "FileSystemLoader",
    "FunctionLoader",
    "GlobalScope",
    "HandlerRegistry",
    "HandlerResolver",
    "MacroHandler",
    "MacroInvocationError",
    "MacroInvoker",
    "MacroNotAllowedError",
    "MacroParams",
    "ParseError",
    "RenderContext",
    "Resolved",
    "RootScope",
    "Skin",
    "SourceSnippet",
    "SubskinNotFoundError",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplateRuntimeError",
    "TemplateSyntaxError",
    "UndefinedFilterError",
    "UnhandledMacroError",
    "Unresolved",
    "__version__",
    "build_source_snippet",
    "get_render_context",
    "get_render_context_required",
    "parse",
    "render_context",
]
