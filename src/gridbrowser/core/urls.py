"""URL utilities

Turns raw address-bar text (or persisted strings) into loadable absolute URLs.

Rules:
- empty / whitespace-only text -> blank (None), the pane shows its placeholder
- text starting with http:// or https:// -> used as-is
- anything else -> prefixed with the default scheme exactly once

There is no host validation: malformed input is handed to the surface, which
may fail to load it.
"""

import re

from ..config import DEFAULT_SCHEME, URL_LOG_MAX_LEN

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)
_TRAILING_SLASH_RE = re.compile(r"/$")


def has_scheme(text: str) -> bool:
    """Check if text already starts with http:// or https://."""
    return bool(_SCHEME_RE.match(text))


def normalize_url(raw: str | None) -> str | None:
    """Normalize raw user input into an absolute URL.

    Args:
        raw: Text typed by the user or read from persistence.

    Returns:
        The absolute URL, or None when the input is blank.
    """
    if raw is None:
        return None
    text = raw.strip()
    if not text:
        return None
    if has_scheme(text):
        return text
    return f"{DEFAULT_SCHEME}://{text}"


def is_blank(raw: str | None) -> bool:
    """Check if raw input normalizes to a blank pane."""
    return normalize_url(raw) is None


def format_url_label(url: str | None) -> str:
    """Get the display label used in the side menu.

    Strips the scheme and a single trailing slash:
    "https://example.com/" -> "example.com"
    """
    if not url:
        return ""
    return _TRAILING_SLASH_RE.sub("", _SCHEME_RE.sub("", url))


def short_url(url: str | None, length: int = URL_LOG_MAX_LEN) -> str:
    """Get a truncated URL for log lines."""
    if not url:
        return "<blank>"
    if len(url) <= length:
        return url
    return url[: length - 3] + "..."
