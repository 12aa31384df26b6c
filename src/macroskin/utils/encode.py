"""Output encodings selected with the ``encoding`` macro parameter.

    <% story.text encoding="html" %>

Encodings:
    - ``html``: escape markup characters, turn line breaks into ``<br />``
    - ``xml``: escape the five XML special characters
    - ``form``: escape for use inside an HTML attribute or form value
    - ``url``: ``application/x-www-form-urlencoded`` (``quote_plus``)
    - ``all``: like ``html`` but also escapes quotes and tabs as spaces

"""

from __future__ import annotations

import html
import re
from collections.abc import Callable
from urllib.parse import quote_plus

_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")

_XML_TABLE = str.maketrans(
    {
        "&": "&amp;",
        "<": "&lt;",
        ">": "&gt;",
        '"': "&quot;",
        "'": "&#39;",
    }
)

_FORM_TABLE = str.maketrans(
    {
        "&": "&amp;",
        "<": "&lt;",
        ">": "&gt;",
        '"': "&quot;",
        "\n": "&#10;",
        "\r": "&#13;",
    }
)


def encode_html(text: str) -> str:
    escaped = html.escape(text, quote=False)
    return _LINE_BREAK_RE.sub("<br />\n", escaped)


def encode_xml(text: str) -> str:
    return text.translate(_XML_TABLE)


def encode_form(text: str) -> str:
    return text.translate(_FORM_TABLE)


def encode_url(text: str, charset: str = "utf-8") -> str:
    return quote_plus(text, encoding=charset)


def encode_all(text: str) -> str:
    escaped = html.escape(text, quote=True).replace("\t", " ")
    return _LINE_BREAK_RE.sub("<br />\n", escaped)


ENCODERS: dict[str, Callable[[str], str]] = {
    "html": encode_html,
    "xml": encode_xml,
    "form": encode_form,
    "url": encode_url,
    "all": encode_all,
}


def get_encoder(name: str | None) -> Callable[[str], str] | None:
    """Return the encoder for ``name``, or None for no/unknown encoding."""
    if not name:
        return None
    return ENCODERS.get(name)
