"""
Directory listing page.

Renders one level of a directory as an HTML unordered list:

    GET /docs

    <ul>
    <li><a href="/docs/guide/">guide</a></li>
    <li><a href="/docs/notes.md">notes.md</a></li>
    </ul>

Link text is the bare entry name. The href is the request path plus the
name, with a trailing slash for sub-directories so the browser resolves
their own relative links correctly.
"""

import html
from dataclasses import dataclass
from typing import Iterable


PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>My HTTP Server</title>
</head>
<body>
<ul>
{items}
</ul>
</body>
</html>
"""


@dataclass(frozen=True)
class DirectoryEntry:
    """A single directory entry as seen by the listing."""
    name: str
    is_dir: bool = False


def entry_href(request_path: str, entry: DirectoryEntry) -> str:
    """
    Build the link target for ``entry`` inside the directory at ``request_path``.

    Names are not percent-encoded: request paths are matched against the
    filesystem verbatim, so an encoded href would not resolve.
    """
    prefix = request_path if request_path.endswith("/") else request_path + "/"
    suffix = "/" if entry.is_dir else ""
    return f"{prefix}{entry.name}{suffix}"


def render_item(request_path: str, entry: DirectoryEntry) -> str:
    href = html.escape(entry_href(request_path, entry), quote=True)
    label = html.escape(entry.name, quote=False)
    return f'<li><a href="{href}">{label}</a></li>'


def render_listing(request_path: str, entries: Iterable[DirectoryEntry]) -> str:
    """
    Render the listing page for a directory.

    Args:
        request_path: Path the client requested; prefixes every href.
        entries: Directory entries, in any order.

    Returns:
        Complete HTML document. An empty directory yields an empty list.
    """
    ordered = sorted(entries, key=lambda entry: entry.name)
    items = "\n".join(render_item(request_path, entry) for entry in ordered)
    return PAGE_TEMPLATE.format(items=items)
