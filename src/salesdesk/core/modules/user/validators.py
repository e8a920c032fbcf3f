import re

from salesdesk.errors import ValidationError

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_BYTES = 72  # bcrypt input limit


def validate_password(password: str) -> None:
    """Validate password meets requirements.

    Requirements:
    - No whitespace characters
    - Minimum length of 6 characters
    - At most 72 bytes once UTF-8 encoded

    Raises:
        ValidationError: If password doesn't meet requirements
    """
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

    if any(char.isspace() for char in password):
        raise ValidationError("Password cannot contain whitespace characters")

    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes long")


def validate_email(email: str) -> None:
    """Validate an already normalized email address."""
    if not EMAIL_RE.fullmatch(email):
        raise ValidationError(f"Invalid email address: '{email}'")


def validate_name(name: str) -> None:
    if not name.strip():
        raise ValidationError("Name cannot be empty")
