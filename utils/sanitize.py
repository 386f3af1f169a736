"""
Sanitization of text copied from fetched pages into API responses.

Values extracted from third-party HTML (Open Graph content, sitemap previews)
are echoed back to the caller and may end up rendered in a browser, so they
are truncated, stripped of control characters and HTML-escaped.
"""

import re

DEFAULT_MAX_LENGTH = 1000

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")

_HTML_ESCAPES = [
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#x27;"),
]


def sanitize_content(content: str, max_length: int = DEFAULT_MAX_LENGTH) -> str:
    """
    Make untrusted page content safe to return.

    Truncation happens before escaping, so the result can be longer than
    `max_length` when entities are introduced.

    Args:
        content: Raw text
        max_length: Maximum number of source characters kept

    Returns:
        Sanitized string ("" for empty input)

    Examples:
        >>> sanitize_content("<b>Hi</b>")
        '&lt;b&gt;Hi&lt;/b&gt;'
    """
    if not content:
        return ""

    sanitized = _CONTROL_CHARS.sub("", content[:max_length])

    # Ampersand first so later entities are not double-escaped
    for char, entity in _HTML_ESCAPES:
        sanitized = sanitized.replace(char, entity)

    return sanitized
