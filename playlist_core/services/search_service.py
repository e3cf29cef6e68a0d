"""Title search: sanitize the query and the titles, then prefix-match."""
import re

_DISALLOWED = re.compile(r'[^a-zA-Z0-9 ]')
_SPACE_RUNS = re.compile(r' {2,}')


def sanitize(text: str) -> str:
    """Keep ASCII letters, digits and spaces; collapse space runs; trim."""
    cleaned = _DISALLOWED.sub('', text or '')
    return _SPACE_RUNS.sub(' ', cleaned).strip()


def matches(query: str, title: str) -> bool:
    """Return ``True`` when sanitized *title* starts with sanitized *query*.

    Case-insensitive.  An empty sanitized query matches every title.
    """
    needle = sanitize(query).lower()
    if not needle:
        return True
    return sanitize(title).lower().startswith(needle)
