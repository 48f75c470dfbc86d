"""
Tests for the admin password policy.
"""
from security.password_policy import validate_password


def test_strong_password_passes():
    assert validate_password("Correct-Horse-42!") == (True, [])


def test_weak_password_lists_every_problem():
    valid, errors = validate_password("short")
    assert not valid
    assert len(errors) == 4  # length, upper, digit, symbol


def test_over_bcrypt_limit_is_rejected():
    valid, errors = validate_password("Aa1!" + "x" * 80)
    assert not valid
    assert any("72 bytes" in e for e in errors)


def test_non_string():
    assert validate_password(None) == (False, ["Password must be a string"])
