"""Markdown → HTML rendering for review previews."""

from markdown_it import MarkdownIt


class MarkdownRenderer:
    """CommonMark renderer with raw HTML disabled.

    Inline ``<script>`` and friends in a review are escaped rather than
    passed through to the page.
    """

    def __init__(self):
        self._md = MarkdownIt("commonmark", {"html": False, "linkify": False}).enable("table")

    def render(self, text: str) -> str:
        if not text:
            return ""
        return self._md.render(text)
