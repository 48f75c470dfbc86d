"""
Tests for comment payload validation helpers.
"""
import uuid

import pytest

from utils.validation import is_well_formed_url, parse_identifier, validate_comment_payload


def test_parse_identifier_canonicalizes():
    raw = uuid.uuid4()
    assert parse_identifier(str(raw).upper()) == str(raw)
    assert parse_identifier(" " + str(raw) + " ") == str(raw)


@pytest.mark.parametrize("value", ["P1", "", None, 12, "1234"])
def test_parse_identifier_rejects(value):
    assert parse_identifier(value) is None


@pytest.mark.parametrize("url,ok", [
    ("https://example.com", True),
    ("http://example.com/a?b=c", True),
    ("https://", False),
    ("example.com", False),
    ("javascript:alert(1)", True),
    ("has space.com", False),
    ("", False),
])
def test_is_well_formed_url(url, ok):
    assert is_well_formed_url(url) is ok


def test_valid_payload_is_cleaned(app):
    post_id = str(uuid.uuid4())
    with app.app_context():
        cleaned, errors = validate_comment_payload({
            "post_id": post_id,
            "author_name": "  Ann  ",
            "author_email": "",
            "content": " Hi ",
            "status": "approved",
        })
    assert errors == []
    assert cleaned == {
        "post_id": post_id,
        "parent_id": None,
        "author_name": "Ann",
        "author_email": None,
        "author_url": None,
        "content": "Hi",
    }


def test_whitespace_only_fields_are_missing(app):
    with app.app_context():
        _, errors = validate_comment_payload({
            "post_id": str(uuid.uuid4()),
            "author_name": "   ",
            "content": "\n\t",
        })
    assert {e["field"] for e in errors} == {"author_name", "content"}


def test_every_error_is_reported(app):
    with app.app_context():
        _, errors = validate_comment_payload({"author_email": 5})
    assert {e["field"] for e in errors} == {"post_id", "author_name", "author_email", "content"}
