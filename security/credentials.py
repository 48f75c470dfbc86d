from models.user import User
from security.errors import InvalidCredentials
from security.password import burn_password_check, verify_password
from security.sanitize import normalize_email


def verify_credentials(email: str, password: str) -> User:
    """
    Returns the matching account or raises InvalidCredentials.

    Unknown email and wrong password fail the same way, and cost roughly
    the same bcrypt time, so the response never reveals whether an account exists.
    """
    email = normalize_email(email)
    user = User.query.filter_by(email=email).first() if email else None

    if user is None:
        burn_password_check(password)
        raise InvalidCredentials()

    if not verify_password(password, user.password_hash):
        raise InvalidCredentials()

    return user
