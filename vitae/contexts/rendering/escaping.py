"""
Markup escaping for user-supplied text.

Two contexts, two functions. Both escape the full set & < > " ' and always replace
'&' first so an already-produced entity is never re-encoded.
"""

CONTENT_REPLACEMENTS = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#39;"),
)

ATTRIBUTE_REPLACEMENTS = (
    ("&", "&amp;"),
    ('"', "&quot;"),
    ("'", "&#39;"),
    ("<", "&lt;"),
    (">", "&gt;"),
)


def escape_html(text) -> str:
    """Escape text placed in element content."""
    if text is None:
        return ""
    result = str(text)
    for char, entity in CONTENT_REPLACEMENTS:
        result = result.replace(char, entity)
    return result


def escape_attr(text) -> str:
    """Escape text placed inside a quoted attribute value (e.g., the photo src)."""
    if text is None:
        return ""
    result = str(text)
    for char, entity in ATTRIBUTE_REPLACEMENTS:
        result = result.replace(char, entity)
    return result
