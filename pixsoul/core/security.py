import re
import secrets

from werkzeug.security import check_password_hash, generate_password_hash

from .exceptions import ValidationError, WeakPassword

USERNAME_REGEX = re.compile(r"^[A-Za-z]")
PASSWORD_REGEX = re.compile(r"^(?=.*[A-Za-z])(?=.*\d)(?=.*[@$!%*?&]).{8,}$")
EMAIL_REGEX = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(email: str) -> bool:
    return bool(email) and EMAIL_REGEX.match(email) is not None


def validate_username(username: str) -> None:
    if not username or not USERNAME_REGEX.match(username):
        raise ValidationError("Username must start with a letter")


def validate_email(email: str) -> None:
    if not is_valid_email(email):
        raise ValidationError("Invalid email")


def validate_password(password: str) -> None:
    if not password or not PASSWORD_REGEX.match(password):
        raise WeakPassword()


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    return check_password_hash(password_hash, password)


def generate_otp() -> str:
    """Generate a random 6-digit OTP."""
    return str(secrets.randbelow(900000) + 100000)
