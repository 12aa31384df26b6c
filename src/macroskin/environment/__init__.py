"""Environment package — configuration, loading, errors.

Re-exports the public symbols so that ``from macroskin.environment import
Environment`` works.

"""

from macroskin.environment.exceptions import (
    ErrorCode,
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
from macroskin.environment.core import Environment, prototype_names
from macroskin.environment.loaders import (
    ChoiceLoader,
    DictLoader,
    FileSystemLoader,
    FunctionLoader,
    Loader,
)
from macroskin.environment.registry import Registry

__all__ = [
    "ChoiceLoader",
    "DictLoader",
    "Environment",
    "ErrorCode",
    "FileSystemLoader",
    "FunctionLoader",
    "Loader",
    "MacroInvocationError",
    "MacroNotAllowedError",
    "Registry",
    "SourceSnippet",
    "SubskinNotFoundError",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplateRuntimeError",
    "TemplateSyntaxError",
    "UndefinedFilterError",
    "UnhandledMacroError",
    "build_source_snippet",
    "prototype_names",
]
