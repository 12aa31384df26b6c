"""Skin parser.

Turns skin source into a SkinNode: a flat, ordered list of Data, Comment
and Macro nodes plus the ``name → (start, stop)`` ranges of its subskins.

Syntax:
    Hello <% user.name prefix="Dear " %>!         macro tag
    <% root.link text=<% root.title %> %>         nested tag as parameter value
    <% story.text | truncate limit=20 | html %>   filter chain
    <% // not rendered <% x.y %> %>               comment (nesting aware)
    <% #sidebar %>                                start of subskin "sidebar"
    \\<% literal %>                                backslash escapes a tag

The scanner works character by character and recurses into nested tags,
so the ``%>`` closing an inner tag never terminates the outer one.

"""

from __future__ import annotations

from bisect import bisect_right

from macroskin.environment.exceptions import ErrorCode
from macroskin.nodes import (
    MAIN_SECTION,
    Comment,
    Data,
    Filter,
    Macro,
    Node,
    Param,
    SkinNode,
    SubskinMarker,
)
from macroskin.parser.errors import ParseError

TAG_START = "<%"
TAG_END = "%>"


class Parser:
    """Recursive character scanner for skin source.

    Example:
        >>> Parser("Hi <% user.name %>").parse().body
        (Data(lineno=1, col_offset=0, value='Hi '), Macro(...))
    """

    __slots__ = ("_filename", "_line_starts", "_name", "_source")

    def __init__(self, source: str, name: str | None = None, filename: str | None = None):
        self._source = source
        self._name = name
        self._filename = filename
        self._line_starts = [0]
        for i, ch in enumerate(source):
            if ch == "\n":
                self._line_starts.append(i + 1)

    # ------------------------------------------------------------------ public

    def parse(self) -> SkinNode:
        source = self._source
        length = len(source)
        body: list[Node] = []
        sections: dict[str, tuple[int, int]] = {}
        section_name = MAIN_SECTION
        section_start = 0
        implicit_main = True

        text_start = 0
        escape = False
        i = 0
        while i < length - 1:
            if source[i] == "<" and source[i + 1] == "%" and not escape:
                if i > text_start:
                    body.append(self._data(text_start, i))
                node, end = self._parse_tag(i)
                if isinstance(node, SubskinMarker):
                    if not (implicit_main and section_start == len(body)):
                        sections[section_name] = (section_start, len(body))
                    if node.name in sections:
                        raise self._error(
                            f"Duplicate subskin '{node.name}'",
                            i,
                            code=ErrorCode.DUPLICATE_SUBSKIN,
                        )
                    section_name = node.name
                    section_start = len(body)
                    implicit_main = False
                    end = self._skip_line_break(end)
                else:
                    body.append(node)
                i = text_start = end
                escape = False
                continue
            escape = source[i] == "\\" and not escape
            i += 1

        if text_start < length:
            body.append(self._data(text_start, length))
        if not (implicit_main and section_start == len(body) and sections):
            sections[section_name] = (section_start, len(body))

        return SkinNode(
            lineno=1,
            col_offset=0,
            body=tuple(body),
            sections=sections,
            source=source,
        )

    # ----------------------------------------------------------------- tags

    def _parse_tag(self, start: int) -> tuple[Node, int]:
        """Parse the tag opening at ``start``; return (node, index after ``%>``)."""
        source = self._source
        pos = start + len(TAG_START)
        while pos < len(source) and source[pos].isspace():
            pos += 1

        if source.startswith("//", pos):
            end = self._find_comment_end(start, pos)
            return self._node(Comment, start, value=source[start:end]), end

        if source.startswith("#", pos):
            close = source.find(TAG_END, pos)
            if close < 0:
                raise self._error("Unterminated subskin marker", start)
            name = source[pos + 1 : close].strip()
            if not name or any(ch.isspace() for ch in name):
                raise self._error(
                    f"Invalid subskin name {name!r}",
                    start,
                    code=ErrorCode.INVALID_SUBSKIN_NAME,
                )
            return self._node(SubskinMarker, start, name=name), close + len(TAG_END)

        name, params, filters, end = self._parse_call(pos, start)
        if name is None:
            raise self._error(
                "Empty macro tag",
                start,
                code=ErrorCode.EMPTY_TAG,
                suggestion="Use <% // ... %> for comments",
            )
        macro = self._node(
            Macro,
            start,
            name=name,
            params=params,
            filters=filters,
            source=source[start:end],
        )
        return macro, end

    def _find_comment_end(self, start: int, pos: int) -> int:
        source = self._source
        depth = 1
        while pos < len(source) - 1:
            pair = source[pos : pos + 2]
            if pair == TAG_START:
                depth += 1
                pos += 2
            elif pair == TAG_END:
                depth -= 1
                pos += 2
                if depth == 0:
                    return pos
            else:
                pos += 1
        raise self._error("Unterminated comment tag", start)

    def _parse_call(
        self, pos: int, tag_start: int
    ) -> tuple[str | None, tuple[Param, ...], tuple[Filter, ...], int]:
        """Scan a macro or filter call up to the closing ``%>``.

        Returns (name, params, filters, end). A ``|`` hands the rest of the
        tag to a recursive call that parses the filter chain.
        """
        source = self._source
        length = len(source)
        name: str | None = None
        params: list[Param] = []
        buf: list[str] = []
        param_name: str | None = None
        token_start = pos
        quote = ""
        quote_start = pos
        escape = False

        def add_param(value: str | Macro) -> None:
            nonlocal param_name
            lineno, col = self._location(token_start)
            params.append(Param(lineno=lineno, col_offset=col, name=param_name, value=value))
            param_name = None

        def flush() -> None:
            nonlocal name
            if not buf:
                return
            token = "".join(buf)
            buf.clear()
            if name is None:
                name = token
            else:
                add_param(token)

        i = pos
        while i < length:
            ch = source[i]
            nxt = source[i + 1] if i + 1 < length else ""

            if escape:
                buf.append(ch)
                escape = False
                i += 1
                continue

            if quote:
                if ch == "\\":
                    escape = True
                elif ch == quote:
                    add_param("".join(buf))
                    buf.clear()
                    quote = ""
                else:
                    buf.append(ch)
                i += 1
                continue

            if ch == "%" and nxt == ">":
                flush()
                if param_name is not None:
                    add_param("")
                return name, tuple(params), (), i + 2

            if ch == "\\":
                escape = True
                i += 1
                continue

            if ch == "<" and nxt == "%":
                if name is None:
                    raise self._error(
                        "Nested tag in place of a macro name",
                        i,
                        code=ErrorCode.EMPTY_TAG,
                    )
                flush()
                if not buf and param_name is None:
                    token_start = i
                nested, i = self._parse_tag(i)
                if isinstance(nested, Macro):
                    add_param(nested)
                elif isinstance(nested, SubskinMarker):
                    raise self._error("Subskin marker inside a macro tag", tag_start)
                continue

            if ch == "|":
                flush()
                if name is None:
                    raise self._error("Filter without a macro", tag_start, code=ErrorCode.EMPTY_TAG)
                if param_name is not None:
                    add_param("")
                filter_start = i
                f_name, f_params, f_filters, end = self._parse_call(i + 1, tag_start)
                if f_name is None:
                    raise self._error("Missing filter name", filter_start, code=ErrorCode.EMPTY_TAG)
                lineno, col = self._location(filter_start)
                head = Filter(lineno=lineno, col_offset=col, name=f_name, params=f_params)
                return name, tuple(params), (head, *f_filters), end

            if ch.isspace():
                flush()
                i += 1
                continue

            if ch in "\"'" and name is not None and not buf:
                if param_name is None:
                    token_start = i
                quote = ch
                quote_start = i
                i += 1
                continue

            if ch == "=" and name is not None and param_name is None and buf:
                param_name = "".join(buf).strip()
                buf.clear()
                i += 1
                continue

            if not buf and param_name is None:
                token_start = i
            buf.append(ch)
            i += 1

        if quote:
            raise self._error(
                f"Unterminated {quote} quote in macro tag",
                quote_start,
                code=ErrorCode.UNCLOSED_QUOTE,
            )
        raise self._error(
            "Unterminated macro tag",
            tag_start,
            suggestion=f"Close the tag with '{TAG_END}'",
        )

    # -------------------------------------------------------------- helpers

    def _skip_line_break(self, pos: int) -> int:
        source = self._source
        if source.startswith("\r\n", pos):
            return pos + 2
        if pos < len(source) and source[pos] in "\r\n":
            return pos + 1
        return pos

    def _location(self, pos: int) -> tuple[int, int]:
        """1-based line and 0-based column of an offset into the source."""
        line_index = bisect_right(self._line_starts, pos) - 1
        return line_index + 1, pos - self._line_starts[line_index]

    def _data(self, start: int, stop: int) -> Data:
        lineno, col = self._location(start)
        return Data(lineno=lineno, col_offset=col, value=self._source[start:stop])

    def _node(self, cls: type, pos: int, **fields) -> Node:
        lineno, col = self._location(pos)
        return cls(lineno=lineno, col_offset=col, **fields)

    def _error(
        self,
        message: str,
        pos: int,
        *,
        code: ErrorCode = ErrorCode.UNCLOSED_TAG,
        suggestion: str | None = None,
    ) -> ParseError:
        lineno, col = self._location(pos)
        return ParseError(
            message,
            lineno,
            col,
            source=self._source,
            name=self._name,
            filename=self._filename,
            code=code,
            suggestion=suggestion,
        )


def parse(source: str, name: str | None = None, filename: str | None = None) -> SkinNode:
    """Parse skin source into a SkinNode.

    Raises:
        ParseError: If the source contains a malformed tag
    """
    return Parser(source, name=name, filename=filename).parse()
