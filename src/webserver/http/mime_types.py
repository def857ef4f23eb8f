"""
=============================================================================
MIME TYPE DETECTION
=============================================================================

Maps a requested resource to the Content-Type the browser needs.

=============================================================================
WHY CONTENT-TYPE MATTERS
=============================================================================

The browser does not look at the file name, it looks at the header:

    Content-Type: text/css          → applied as a stylesheet
    Content-Type: image/png         → decoded and drawn
    Content-Type: application/...   → usually offered as a download

A wrong type means a stylesheet that is ignored or an image shown as
garbage text, so the table below must be exact.

The server knows a deliberately small set of types. Anything else is
served as application/octet-stream ("opaque bytes"), which is always safe.

=============================================================================
"""


# =============================================================================
# MIME TYPE TABLE
# =============================================================================
#
# Keys are lowercase suffixes including the dot. Lookups lowercase the
# requested suffix first, so "PHOTO.JPG" and "photo.jpg" behave the same.
#
# =============================================================================

MIME_TYPES = {
    # Text
    ".html": "text/html",
    ".htm": "text/html",
    ".css": "text/css",
    ".js": "application/javascript",
    ".txt": "text/plain",

    # Images
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".png": "image/png",
}

# "I don't know what this is, treat as binary"
DEFAULT_MIME_TYPE = "application/octet-stream"


def get_mime_type(resource_path) -> str:
    """
    Get the MIME type for a resource based on its extension.

    Pure and total: no I/O, never raises. Works on the resource string as
    received (``/img/logo.PNG``) or on a filesystem path.

    Args:
        resource_path: Resource path or file name (str or Path).

    Returns:
        The MIME type string.

    Examples:
        >>> get_mime_type("/style.css")
        'text/css'

        >>> get_mime_type("/photos/Cat.JPEG")
        'image/jpeg'

        >>> get_mime_type("/README")
        'application/octet-stream'
    """
    lowered = str(resource_path).lower()
    for suffix, mime_type in MIME_TYPES.items():
        if lowered.endswith(suffix):
            return mime_type
    return DEFAULT_MIME_TYPE
