"""Parser error handling for macroskin.

Provides ParseError, the syntax error raised for malformed skin source.
"""

from __future__ import annotations

from macroskin.environment.exceptions import ErrorCode, TemplateSyntaxError


class ParseError(TemplateSyntaxError):
    """Malformed skin source: unterminated tag or quote, empty tag, ...

    Carries the skin's name/filename, the 1-based line and 0-based column
    of the offending tag and the full source, so the message shows the
    failing line with a caret under the tag start.
    """

    def __init__(
        self,
        message: str,
        lineno: int,
        col_offset: int,
        *,
        source: str | None = None,
        name: str | None = None,
        filename: str | None = None,
        code: ErrorCode = ErrorCode.UNCLOSED_TAG,
        suggestion: str | None = None,
    ):
        self.suggestion = suggestion
        super().__init__(
            message,
            lineno=lineno,
            name=name,
            filename=filename,
            source=source,
            col_offset=col_offset,
            code=code,
        )

    def _format_message(self) -> str:
        msg = super()._format_message()
        if self.suggestion:
            msg += f"\n\nSuggestion: {self.suggestion}"
        return msg
