"""
=============================================================================
MIME TYPE DETECTION
=============================================================================

Maps file extensions to the Content-Type the server announces.

The table is intentionally closed: only the six extensions below are
known. Anything else (including ".md") resolves to ``None`` and the
response writer falls back to its ``text/html`` default.

    ┌───────────┬──────────────┐
    │ Extension │ Content-Type │
    ├───────────┼──────────────┤
    │ jpg       │ image/jpg    │
    │ jpeg      │ image/jpeg   │
    │ png       │ image/png    │
    │ html      │ text/html    │
    │ css       │ text/css     │
    │ txt       │ text/plain   │
    └───────────┴──────────────┘

"image/jpg" is not a registered type, but it is what deployed clients of
this server have always received for ".jpg" files.

=============================================================================
"""

import posixpath
from typing import Optional


MIME_TYPES = {
    "jpg": "image/jpg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "html": "text/html",
    "css": "text/css",
    "txt": "text/plain",
}


def get_extension(path: Optional[str]) -> str:
    """
    Return the extension of the last path component, lower-cased and
    without the leading dot.

    Examples:
        >>> get_extension("/notes/README.MD")
        'md'
        >>> get_extension("/docs/")
        ''
        >>> get_extension("/.bashrc")
        ''
    """
    if not path:
        return ""
    _, ext = posixpath.splitext(path)
    return ext[1:].lower()


def get_mime_type(path: Optional[str]) -> Optional[str]:
    """
    Look up the Content-Type for a file path.

    Args:
        path: Filesystem path or request path; only the extension matters.

    Returns:
        The mapped Content-Type, or None for unknown and missing extensions.
    """
    ext = get_extension(path)
    if not ext:
        return None
    return MIME_TYPES.get(ext)
