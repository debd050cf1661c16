import html

import bleach


def clean_text(value) -> str:
    """Strip surrounding whitespace and every HTML tag from a user supplied string.

    Values are stored as plain text, so the entities bleach escapes
    (``&``, ``<``, ``>``) are turned back into the characters sent.
    """
    if value is None:
        return ''
    return html.unescape(bleach.clean(str(value).strip(), tags=set(), strip=True))
