"""
Escaping and filtering for text submitted by anonymous visitors.

Everything here is pure: no side effects, no exceptions, always a string back.
"""
import re

_HTML_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#x27;",
    "/": "&#x2F;",
}
_HTML_ESCAPE_RE = re.compile(r"[&<>\"'/]")

# "/" and "#" cover site-relative links and fragments
_SAFE_URL_PREFIXES = ("http://", "https://", "mailto:", "/", "#")

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

_FILENAME_ILLEGAL = re.compile(r'[<>:"|?*]')
_PATH_SEPARATORS = re.compile(r"[/\\]")
_WHITESPACE = re.compile(r"\s+")


def escape_html(text: str) -> str:
    if not text:
        return ""
    return _HTML_ESCAPE_RE.sub(lambda m: _HTML_ESCAPES[m.group(0)], text)


def sanitize_comment(text: str) -> str:
    # Comments are displayed as pre-escaped plain text, so no tag allow-list.
    return escape_html(text)


def sanitize_url(url: str) -> str:
    """
    Returns the trimmed url if it uses a safe scheme or is relative, else "".
    Blocks javascript:, data:, vbscript: and friends.
    """
    if not url:
        return ""

    trimmed = url.strip()
    lowered = trimmed.lower()
    if lowered.startswith(_SAFE_URL_PREFIXES) or ":" not in lowered:
        return trimmed
    return ""


def sanitize_filename(name: str) -> str:
    if not name:
        return ""

    cleaned = name.replace("..", "")
    cleaned = _PATH_SEPARATORS.sub("_", cleaned)
    cleaned = _FILENAME_ILLEGAL.sub("_", cleaned)
    cleaned = _WHITESPACE.sub("_", cleaned)
    return cleaned[:255]


def normalize_email(value: str) -> str:
    return (value or "").strip().lower()


def is_valid_email(value: str) -> bool:
    return isinstance(value, str) and len(value) <= 255 and bool(_EMAIL_RE.match(value))
