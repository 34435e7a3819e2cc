"""
Markdown rendering for ``.md`` files.

Uses markdown-it-py with the CommonMark preset. Raw HTML inside the
markdown source is passed through, so documents can embed their own
markup.
"""

from functools import lru_cache

from markdown_it import MarkdownIt


@lru_cache(maxsize=1)
def _renderer() -> MarkdownIt:
    return MarkdownIt("commonmark", {"html": True})


def render(markdown_text: str) -> str:
    """Render markdown source to an HTML fragment."""
    return _renderer().render(markdown_text)
