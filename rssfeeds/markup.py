# rssfeeds/markup.py
"""
Markdown -> HTML for post bodies, comments, messages and descriptions.

Raw HTML in user text is not passed through; it comes out escaped.
"""

from __future__ import annotations

from markdown_it import MarkdownIt

_md = (
    MarkdownIt("commonmark", {"html": False, "breaks": True})
    .enable("table")
    .enable("strikethrough")
)


def markdown_to_html(text: str) -> str:
    if not text:
        return ""
    return _md.render(text)


__all__ = ["markdown_to_html"]
