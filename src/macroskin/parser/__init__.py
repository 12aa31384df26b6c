"""Skin parser: source text → immutable SkinNode."""

from macroskin.parser.core import Parser, parse
from macroskin.parser.errors import ParseError

__all__ = ["ParseError", "Parser", "parse"]
