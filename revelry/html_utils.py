"""HTML utility functions for Revelry.

This module provides the string-level HTML helpers used to build tags and
to splice generated fragments into a rendered page.

Functions:
    escape_html: Escape special HTML characters in a string.
    meta_tag: Build a ``<meta name=... content=...>`` tag.
    stylesheet_link: Build a ``<link rel="stylesheet">`` tag.
    splice_at_marker: Replace a placeholder marker with a fragment.
    inject_into_head: Insert a fragment at a marker or before ``</head>``.
"""

from __future__ import annotations

import re

_HEAD_CLOSE_RE = re.compile(r"</head\s*>", re.IGNORECASE)


def escape_html(text: str) -> str:
    """Escape special HTML characters in a string.

    Converts the following characters to their HTML entity equivalents:
    - & becomes &amp;
    - < becomes &lt;
    - > becomes &gt;
    - " becomes &quot;

    Args:
        text: The string to escape.

    Returns:
        The escaped string, safe for inclusion in HTML.

    Examples:
        >>> escape_html('Tom & "Jerry"')
        'Tom &amp; &quot;Jerry&quot;'
    """
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def meta_tag(name: str, content: str, self_closing: bool = False) -> str:
    """Return a meta tag with escaped name and content.

    Examples:
        >>> meta_tag("author", "John Smith")
        '<meta name="author" content="John Smith">'

        >>> meta_tag("autometa", "Working", self_closing=True)
        '<meta name="autometa" content="Working" />'
    """
    end = " />" if self_closing else ">"
    return f'<meta name="{escape_html(name)}" content="{escape_html(content)}"{end}'


def stylesheet_link(href: str) -> str:
    """Return a stylesheet link tag for ``href``."""
    return f'<link rel="stylesheet" href="{escape_html(href)}">'


def splice_at_marker(html: str, marker: str, fragment: str) -> str:
    """Replace every occurrence of ``marker`` in ``html`` with ``fragment``.

    Args:
        html: Rendered page.
        marker: Placeholder text left in the page template.
        fragment: Generated text to put in its place.

    Returns:
        The page with the marker replaced; unchanged if the marker is absent.
    """
    return html.replace(marker, fragment)


def inject_into_head(html: str, marker: str, fragment: str) -> str:
    """Insert ``fragment`` at ``marker``, or before ``</head>`` without one.

    Args:
        html: Rendered page.
        marker: Preferred placeholder for the fragment.
        fragment: Generated markup.

    Returns:
        The page with the fragment inserted. Pages with neither a marker nor
        a closing head tag get the fragment prepended.
    """
    if marker in html:
        return splice_at_marker(html, marker, fragment)
    if not fragment:
        return html
    match = _HEAD_CLOSE_RE.search(html)
    if match is None:
        return f"{fragment}\n{html}"
    return f"{html[: match.start()]}{fragment}\n{html[match.start():]}"
