"""Exceptions for the macroskin rendering engine.

Exception Hierarchy:
TemplateError (base)
├── TemplateNotFoundError     # Skin not found by loader
├── TemplateSyntaxError       # Parse-time syntax error (unterminated tag, ...)
├── TemplateRuntimeError      # Render-time error with context
│   ├── SubskinNotFoundError  # Unknown subskin selected
│   ├── MacroInvocationError  # Macro body raised (fail_fast only)
│   ├── UndefinedFilterError  # Filter name not found
│   └── MacroNotAllowedError  # Macro outside the skin's sandbox
└── UnhandledMacroError       # Macro or handler could not be resolved

Per-macro errors (unhandled macros, exceptions raised by macro bodies) are
contained at tag granularity: the renderer turns them into inline
diagnostics such as ``[Unhandled macro: root.foo]`` and keeps rendering.
Errors from skins rendered by a macro stay inside that macro's tag as
well. Only syntax errors, an unknown subskin passed to a top-level
``render()`` and ``fail_fast`` invocation errors abort a render.

Example:
    ```
    MS-RUN-001: Macro error in root.title: 'NoneType' object has no attribute 'title'
      Location: page.skin:5
       |
    > 5 | <h1><% root.title %></h1>
       |
    ```

"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from macroskin.environment import terminal

# ---------------------------------------------------------------------------
# Error codes
# ---------------------------------------------------------------------------


class ErrorCode(Enum):
    """Searchable error codes for skin errors.

    Format: MS-{CATEGORY}-{NUMBER}
    Categories: PAR (parser), RUN (runtime), TPL (skin loading)
    """

    # Parser errors (MS-PAR-xxx)
    UNCLOSED_TAG = "MS-PAR-001"
    UNCLOSED_QUOTE = "MS-PAR-002"
    EMPTY_TAG = "MS-PAR-003"
    DUPLICATE_SUBSKIN = "MS-PAR-004"
    INVALID_SUBSKIN_NAME = "MS-PAR-005"

    # Runtime errors (MS-RUN-xxx)
    MACRO_ERROR = "MS-RUN-001"
    UNHANDLED_MACRO = "MS-RUN-002"
    UNDEFINED_FILTER = "MS-RUN-003"
    SKIN_DEPTH = "MS-RUN-004"
    SUBSKIN_NOT_FOUND = "MS-RUN-005"
    MACRO_NOT_ALLOWED = "MS-RUN-006"
    DEEP_MACRO = "MS-RUN-007"
    RUNTIME_ERROR = "MS-RUN-008"

    # Skin loading errors (MS-TPL-xxx)
    TEMPLATE_NOT_FOUND = "MS-TPL-001"
    SYNTAX_ERROR = "MS-TPL-002"

    @property
    def category(self) -> str:
        """Error category (e.g., 'runtime', 'parser', 'template')."""
        prefix = self.value.split("-")[1]
        return {
            "PAR": "parser",
            "RUN": "runtime",
            "TPL": "template",
        }.get(prefix, "unknown")


# ---------------------------------------------------------------------------
# Source snippets
# ---------------------------------------------------------------------------


def format_template_stack(stack: list[tuple[str, int]] | None) -> str:
    """Format the nested skin stack for error messages.

    Args:
        stack: List of (skin_name, line_number) tuples, outermost first

    Returns:
        Formatted stack trace string, empty when there is no stack
    """
    if not stack:
        return ""

    lines = [terminal.dim_text("Skin stack:")]
    for template_name, line_num in stack:
        location_str = f"{template_name}:{line_num}"
        lines.append(f"  • {terminal.location(location_str)}")
    return "\n".join(lines)


@dataclass(frozen=True, slots=True)
class SourceSnippet:
    """Skin source context around an error line.

    Attributes:
        lines: Tuple of (line_number, line_content) pairs around the error.
        error_line: The 1-based line number where the error occurred.
        column: Optional column offset for caret pointer.
    """

    lines: tuple[tuple[int, str], ...]
    error_line: int
    column: int | None = None

    def format(self) -> str:
        """Format snippet in Rust-inspired diagnostic style with colors."""
        parts: list[str] = [terminal.dim_text("   |")]
        for lineno, content in self.lines:
            is_error = lineno == self.error_line
            parts.append(terminal.format_source_line(lineno, content, is_error=is_error))
        if self.column is not None:
            caret = " " * self.column + "^"
            parts.append(f"{terminal.dim_text('   |')} {terminal.error_line(caret)}")
        parts.append(terminal.dim_text("   |"))
        return "\n".join(parts)


def build_source_snippet(
    source: str,
    error_line: int,
    *,
    context_lines: int = 2,
    column: int | None = None,
) -> SourceSnippet:
    """Build a SourceSnippet from skin source.

    Args:
        source: Full skin source text.
        error_line: 1-based line number of the error.
        context_lines: Number of lines to show before/after the error line.
        column: Optional column offset for caret pointer.
    """
    all_lines = source.splitlines()
    start = max(0, error_line - 1 - context_lines)
    end = min(len(all_lines), error_line + context_lines)
    lines = tuple((i + 1, all_lines[i]) for i in range(start, end))
    return SourceSnippet(lines=lines, error_line=error_line, column=column)


class TemplateError(Exception):
    """Base exception for all skin errors.

    Attributes:
        code: Optional ErrorCode for searchable error identification.
    """

    code: ErrorCode | None = None

    def format_compact(self) -> str:
        """Format error as a short diagnostic with code and category."""
        parts: list[str] = []

        header = str(self)
        if self.code:
            code_str = self.code.value
            if code_str not in header:
                header = f"{code_str}: {header}"
        parts.append(header)

        if self.code:
            parts.append(f"  Category: {self.code.category}")

        return "\n".join(parts)


class TemplateNotFoundError(TemplateError):
    """Skin not found by any configured loader.

    Example:
            >>> env.get_skin("Root/missing")
        TemplateNotFoundError: Skin 'Root/missing' not found in: skins/

    """

    code: ErrorCode | None = ErrorCode.TEMPLATE_NOT_FOUND


class TemplateSyntaxError(TemplateError):
    """Parse-time syntax error in skin source.

    Raised by the parser for unterminated tags, unterminated quotes, empty
    tags and duplicate subskin names. When ``source`` and ``lineno`` are
    provided, the message includes the offending line and a caret.
    """

    code: ErrorCode | None = ErrorCode.SYNTAX_ERROR

    def __init__(
        self,
        message: str,
        lineno: int | None = None,
        name: str | None = None,
        filename: str | None = None,
        source: str | None = None,
        col_offset: int | None = None,
        code: ErrorCode | None = None,
    ):
        self.message = message
        self.lineno = lineno
        self.name = name
        self.filename = filename
        self.source = source
        self.col_offset = col_offset
        if code is not None:
            self.code = code
        super().__init__(self._format_message())

    @property
    def location(self) -> str:
        location = self.filename or self.name or "<skin>"
        if self.lineno:
            location += f":{self.lineno}"
            if self.col_offset is not None:
                location += f":{self.col_offset}"
        return location

    def _format_message(self) -> str:
        header = f"Syntax Error: {self.message}\n  --> {self.location}"

        if self.source and self.lineno:
            lines = self.source.splitlines()
            if 0 < self.lineno <= len(lines):
                error_line = lines[self.lineno - 1]
                snippet = f"\n   |\n{self.lineno:>3} | {error_line}"
                if self.col_offset is not None:
                    snippet += f"\n   | {' ' * self.col_offset}^"
                return header + snippet

        return header


class TemplateRuntimeError(TemplateError):
    """Render-time error with debugging context.

    Attributes:
        message: Error description
        expression: Macro tag source that failed
        template_name: Name of the skin
        lineno: Line number in skin source
        suggestion: Actionable fix suggestion

    """

    code: ErrorCode | None = ErrorCode.RUNTIME_ERROR

    def __init__(
        self,
        message: str,
        *,
        expression: str | None = None,
        template_name: str | None = None,
        lineno: int | None = None,
        suggestion: str | None = None,
        source_snippet: SourceSnippet | None = None,
        template_stack: list[tuple[str, int]] | None = None,
        code: ErrorCode | None = None,
    ):
        self.message = message
        self.expression = expression
        self.template_name = template_name
        self.lineno = lineno
        self.suggestion = suggestion
        self.source_snippet = source_snippet
        self.template_stack = template_stack or []
        if code is not None:
            self.code = code
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = [f"Runtime Error: {self.message}"]

        if self.template_name or self.lineno:
            loc = self.template_name or "<skin>"
            if self.lineno:
                loc += f":{self.lineno}"
            parts.append(f"  Location: {terminal.location(loc)}")

        if self.source_snippet:
            parts.append(self.source_snippet.format())

        if self.template_stack:
            parts.append("")
            parts.append(format_template_stack(self.template_stack))

        if self.expression:
            parts.append(f"  Macro: {self.expression}")

        if self.suggestion:
            parts.append(f"\n  {terminal.hint('Suggestion:')} {self.suggestion}")

        return "\n".join(parts)

    def format_compact(self) -> str:
        """Format runtime error as structured terminal diagnostic."""
        parts: list[str] = []

        loc = self.template_name or "<skin>"
        if self.lineno:
            loc += f":{self.lineno}"
        parts.append(terminal.format_error_header(
            self.code.value if self.code else None,
            self.message
        ))
        parts.append(f"  Location: {terminal.location(loc)}")

        if self.source_snippet:
            parts.append(self.source_snippet.format())

        if self.template_stack:
            parts.append("")
            parts.append(format_template_stack(self.template_stack))

        if self.expression:
            parts.append(f"  Macro: {self.expression}")

        if self.suggestion:
            parts.append(f"  {terminal.hint('Hint:')} {self.suggestion}")

        if self.code:
            parts.append(f"  {terminal.dim_text('Category:')} {self.code.category}")

        return "\n".join(parts)


class SubskinNotFoundError(TemplateRuntimeError):
    """The selected subskin does not exist in the skin.

    Example:
            >>> skin.render("sidebar")
        SubskinNotFoundError: Subskin 'sidebar' not found in page.skin. Available: main, header

    """

    code: ErrorCode | None = ErrorCode.SUBSKIN_NOT_FOUND

    def __init__(self, subskin: str, available: list[str], **kwargs):
        self.subskin = subskin
        self.available = available
        msg = f"Subskin '{subskin}' not found"
        if kwargs.get("template_name"):
            msg += f" in {kwargs['template_name']}"
        if available:
            from difflib import get_close_matches

            matches = get_close_matches(subskin, available, n=1, cutoff=0.6)
            if matches:
                msg += f". Did you mean '{matches[0]}'?"
            else:
                msg += f". Available: {', '.join(available)}"
        super().__init__(msg, **kwargs)


class MacroInvocationError(TemplateRuntimeError):
    """A macro body or filter raised while ``fail_fast`` is enabled.

    The original exception is chained as ``__cause__``.
    """

    code: ErrorCode | None = ErrorCode.MACRO_ERROR


class UndefinedFilterError(TemplateRuntimeError):
    """No ``<name>_filter`` and no registered filter for a filter call."""

    code: ErrorCode | None = ErrorCode.UNDEFINED_FILTER


class MacroNotAllowedError(TemplateRuntimeError):
    """A macro outside the skin's sandbox was called."""

    code: ErrorCode | None = ErrorCode.MACRO_NOT_ALLOWED

    def __init__(self, name: str, **kwargs):
        self.name = name
        super().__init__(f"Macro {name} not allowed in sandbox", **kwargs)


class UnhandledMacroError(TemplateError):
    """A macro path could not be resolved to a handler or macro.

    Raised inside the invoker and caught at tag level, where it becomes
    either the ``default`` value, an empty string (``failmode=silent``),
    or the ``[Unhandled macro: name]`` diagnostic.

    Attributes:
        name: Full dotted macro name as written in the skin
        segment: Path segment that failed, None if the macro itself was missing
        reason: Short explanation, e.g. "not a macro" for plain callables
        verbose_by_default: Whether the diagnostic is shown when the tag sets
            no ``failmode``
    """

    code: ErrorCode | None = ErrorCode.UNHANDLED_MACRO

    def __init__(
        self,
        name: str,
        segment: str | None = None,
        *,
        reason: str | None = None,
        verbose_by_default: bool = True,
    ):
        self.name = name
        self.segment = segment
        self.reason = reason
        self.verbose_by_default = verbose_by_default
        super().__init__(f"Unhandled macro: {name}")

    @property
    def detail(self) -> str:
        """Why the macro is unhandled, for log messages."""
        if self.segment is not None:
            return f"no handler for '{self.segment}'"
        return self.reason or "no such macro"
