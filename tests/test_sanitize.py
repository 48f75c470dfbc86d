"""
Tests for escaping and URL/filename filtering of visitor input.
"""
import pytest

from security.sanitize import (
    escape_html,
    is_valid_email,
    normalize_email,
    sanitize_comment,
    sanitize_filename,
    sanitize_url,
)


# ---------------------------------------------------------------------------
# HTML escaping
# ---------------------------------------------------------------------------

def test_escape_html_replaces_every_special_character():
    assert escape_html("& < > \" ' /") == "&amp; &lt; &gt; &quot; &#x27; &#x2F;"


def test_escape_html_does_not_double_escape_in_one_pass():
    assert escape_html("&lt;") == "&amp;lt;"


def test_escape_html_empty_input():
    assert escape_html("") == ""
    assert escape_html(None) == ""


@pytest.mark.parametrize("payload", [
    "<script>alert('x')</script>",
    '"><img src=x onerror=alert(1)>',
    "a & b / c",
])
def test_sanitize_comment_leaves_no_raw_specials(payload):
    out = sanitize_comment(payload)
    for ch in "<>\"'/":
        assert ch not in out
    # every remaining ampersand starts an entity
    assert out.count("&") == out.count(";")


def test_sanitize_comment_scenario():
    assert sanitize_comment("Hello <b>world</b>") == "Hello &lt;b&gt;world&lt;&#x2F;b&gt;"


# ---------------------------------------------------------------------------
# URLs
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("url", [
    "javascript:alert(1)",
    "JavaScript:alert(1)",
    "  javascript:alert(1)",
    "data:text/html;base64,PHNjcmlwdD4=",
    "vbscript:msgbox(1)",
    "ftp://example.com/file",
])
def test_sanitize_url_rejects_unsafe_schemes(url):
    assert sanitize_url(url) == ""


@pytest.mark.parametrize("url", [
    "https://example.com/x",
    "http://example.com",
    "mailto:ann@example.com",
    "/relative/path",
    "#comments",
    "relative/page.html",
])
def test_sanitize_url_keeps_safe_urls(url):
    assert sanitize_url(url) == url


def test_sanitize_url_trims_but_keeps_case():
    assert sanitize_url("  HTTPS://Example.com/Path  ") == "HTTPS://Example.com/Path"


def test_sanitize_url_empty():
    assert sanitize_url("") == ""
    assert sanitize_url(None) == ""


# ---------------------------------------------------------------------------
# Filenames
# ---------------------------------------------------------------------------

def test_sanitize_filename_strips_traversal_and_separators():
    assert sanitize_filename("../../etc/passwd") == "__etc_passwd"
    assert sanitize_filename("a\\b/c") == "a_b_c"


def test_sanitize_filename_replaces_illegal_characters_and_whitespace():
    assert sanitize_filename('my <file>:"name"?.txt') == "my__file___name__.txt"
    assert sanitize_filename("two   spaces\tand tab") == "two_spaces_and_tab"


def test_sanitize_filename_truncates():
    assert len(sanitize_filename("a" * 400)) == 255


# ---------------------------------------------------------------------------
# Emails
# ---------------------------------------------------------------------------

def test_normalize_email():
    assert normalize_email("  Admin@Example.COM ") == "admin@example.com"
    assert normalize_email(None) == ""


@pytest.mark.parametrize("value,expected", [
    ("ann@example.com", True),
    ("ann@example", False),
    ("ann example@x.com", False),
    ("", False),
    (None, False),
])
def test_is_valid_email(value, expected):
    assert is_valid_email(value) is expected
