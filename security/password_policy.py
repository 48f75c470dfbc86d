import re
from typing import List, Tuple

from flask import current_app

_UPPER = re.compile(r"[A-Z]")
_LOWER = re.compile(r"[a-z]")
_DIGIT = re.compile(r"\d")
_SYMBOL = re.compile(r"[^A-Za-z0-9]")

# bcrypt only looks at the first 72 bytes
_MAX_BYTES = 72


def _min_len() -> int:
    try:
        return int(current_app.config.get("PASSWORD_MIN_LEN", 12))
    except RuntimeError:
        return 12


def validate_password(pw: str) -> Tuple[bool, List[str]]:
    errors: List[str] = []

    if not isinstance(pw, str):
        return False, ["Password must be a string"]

    min_len = _min_len()
    if len(pw) < min_len:
        errors.append(f"Password must be at least {min_len} characters")
    if len(pw.encode("utf-8")) > _MAX_BYTES:
        errors.append(f"Password must be at most {_MAX_BYTES} bytes")

    if not _UPPER.search(pw):
        errors.append("Password must include at least 1 uppercase letter")
    if not _LOWER.search(pw):
        errors.append("Password must include at least 1 lowercase letter")
    if not _DIGIT.search(pw):
        errors.append("Password must include at least 1 number")
    if not _SYMBOL.search(pw):
        errors.append("Password must include at least 1 symbol")

    return (len(errors) == 0), errors
