class AuthError(Exception):
    """Base class for authentication failures surfaced to the login page."""

    status_code = 401

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidCredentials(AuthError):
    # Same message for unknown email and wrong password.
    def __init__(self):
        super().__init__("Invalid email or password")


class AccountLocked(AuthError):
    status_code = 429

    def __init__(self, seconds_remaining: int):
        self.seconds_remaining = max(int(seconds_remaining), 1)
        self.minutes_remaining = -(-self.seconds_remaining // 60)
        super().__init__(
            f"Too many failed attempts. Try again in {self.minutes_remaining} minutes."
        )
