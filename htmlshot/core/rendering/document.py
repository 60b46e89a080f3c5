"""
Document Normalization
======================

Wrap caller-supplied HTML into a complete document without disturbing markup
the caller already provided. A full document is returned as-is; fragments get
whatever shell (doctype, html, head, body) they are missing.
"""

import re
from typing import Pattern

DEFAULT_LANG = "en"


def _start_tag(name: str) -> Pattern[str]:
    # "<body" followed by whitespace, ">" or "/" so that "<bodyguard>" does not count
    return re.compile(rf"<{name}[\s/>]", re.IGNORECASE)


HTML_TAG = _start_tag("html")
HEAD_TAG = _start_tag("head")
BODY_TAG = _start_tag("body")
HEAD_CLOSE_TAG = re.compile(r"</head\s*>", re.IGNORECASE)
DOCTYPE = re.compile(r"^<!doctype[^>]*>\s*", re.IGNORECASE)


def has_tag(html: str, pattern: Pattern[str]) -> bool:
    """Return True when the start tag matched by ``pattern`` occurs in ``html``."""
    return pattern.search(html) is not None


def locale_to_lang(locale: str) -> str:
    """Convert a locale such as ``pt_BR`` to a document language (``pt-BR``)."""
    return locale.replace("_", "-")


def wrap_html(content: str, width: int, height: int, lang: str = DEFAULT_LANG) -> str:
    """
    Normalize HTML content into a complete document.

    Args:
        content: HTML document, fragment or plain text
        width: Viewport width used to size a synthesized body
        height: Viewport height used to size a synthesized body
        lang: Value for the ``lang`` attribute of the html element

    Returns:
        A complete HTML document string
    """
    html = content.strip()

    if has_tag(html, HTML_TAG):
        return html

    # the shell below supplies its own doctype
    html = DOCTYPE.sub("", html)

    has_head = has_tag(html, HEAD_TAG)
    has_body = has_tag(html, BODY_TAG)

    if has_head and has_body:
        return f'<!DOCTYPE html>\n<html lang="{lang}">\n{html}\n</html>'

    if has_body:
        return (
            "<!DOCTYPE html>\n"
            f'<html lang="{lang}">\n'
            "<head>\n"
            '    <meta charset="UTF-8">\n'
            '    <meta name="viewport" content="width=device-width, initial-scale=1.0">\n'
            "</head>\n"
            f"{html}\n"
            "</html>"
        )

    if has_head:
        head, fragment = _split_head(html)
        return (
            "<!DOCTYPE html>\n"
            f'<html lang="{lang}">\n'
            f"{head}\n"
            f"{_sized_body(fragment, width, height)}\n"
            "</html>"
        )

    return (
        "<!DOCTYPE html>\n"
        f'<html lang="{lang}">\n'
        "<head>\n"
        '    <meta charset="UTF-8">\n'
        "</head>\n"
        f"{_sized_body(html, width, height)}\n"
        "</html>"
    )


def _sized_body(fragment: str, width: int, height: int) -> str:
    return f'<body style="width: {width}px; height: {height}px;">\n{fragment}\n</body>'


def _split_head(html: str) -> tuple[str, str]:
    """Split a head-only fragment into the caller's head and the trailing markup."""
    match = HEAD_CLOSE_TAG.search(html)
    if match is None:
        return html, ""
    return html[: match.end()], html[match.end() :].strip()
