import re
import uuid
from typing import List, Optional, Tuple
from urllib.parse import urlparse

from flask import current_app

from security.sanitize import is_valid_email

_WHITESPACE = re.compile(r"\s")


def parse_identifier(value) -> Optional[str]:
    """Canonical UUID string, or None if value isn't one."""
    if not isinstance(value, str):
        return None
    try:
        return str(uuid.UUID(value.strip()))
    except ValueError:
        return None


def is_well_formed_url(value: str) -> bool:
    if not isinstance(value, str) or len(value) > 500 or _WHITESPACE.search(value.strip()):
        return False
    parsed = urlparse(value.strip())
    if not parsed.scheme:
        return False
    if parsed.scheme in ("http", "https"):
        return bool(parsed.netloc)
    return bool(parsed.netloc or parsed.path)


def _optional_str(data: dict, field: str, errors: List[dict]) -> Optional[str]:
    value = data.get(field)
    if value is None:
        return None
    if not isinstance(value, str):
        errors.append({"field": field, "message": f"{field} must be a string"})
        return None
    value = value.strip()
    return value or None


def validate_comment_payload(data: dict) -> Tuple[dict, List[dict]]:
    """
    Checks a public comment submission. Returns (cleaned, errors); errors is a
    list of {field, message}. Unknown keys (including status) are dropped.
    """
    errors: List[dict] = []
    name_max = current_app.config.get("COMMENT_AUTHOR_NAME_MAX", 50)
    content_max = current_app.config.get("COMMENT_CONTENT_MAX", 2000)

    post_id = parse_identifier(data.get("post_id"))
    if post_id is None:
        errors.append({"field": "post_id", "message": "post_id must be a valid id"})

    parent_id = None
    raw_parent = data.get("parent_id")
    if raw_parent not in (None, ""):
        parent_id = parse_identifier(raw_parent)
        if parent_id is None:
            errors.append({"field": "parent_id", "message": "parent_id must be a valid id"})

    author_name = data.get("author_name")
    if not isinstance(author_name, str) or not author_name.strip():
        errors.append({"field": "author_name", "message": "Name is required"})
        author_name = None
    else:
        author_name = author_name.strip()
        if len(author_name) > name_max:
            errors.append({"field": "author_name", "message": f"Name must be at most {name_max} characters"})

    author_email = _optional_str(data, "author_email", errors)
    if author_email is not None and not is_valid_email(author_email):
        errors.append({"field": "author_email", "message": "Invalid email"})

    author_url = _optional_str(data, "author_url", errors)
    if author_url is not None and not is_well_formed_url(author_url):
        errors.append({"field": "author_url", "message": "Invalid URL"})

    content = data.get("content")
    if not isinstance(content, str) or not content.strip():
        errors.append({"field": "content", "message": "Comment content is required"})
        content = None
    else:
        content = content.strip()
        if len(content) > content_max:
            errors.append({"field": "content", "message": f"Comment must be at most {content_max} characters"})

    cleaned = {
        "post_id": post_id,
        "parent_id": parent_id,
        "author_name": author_name,
        "author_email": author_email,
        "author_url": author_url,
        "content": content,
    }
    return cleaned, errors
