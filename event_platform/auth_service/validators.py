"""
Input validation for account data.
Each validator returns the cleaned value or raises ValidationError.
"""

import re

from event_platform.errors import ValidationError

NAME_RE = re.compile(r"^[A-Za-zÀ-ÖØ-öø-ÿ\s'-]{1,49}$")
EMAIL_RE = re.compile(
    r"^[a-z0-9.!#$%&'*+/=?^_`{|}~-]{1,64}"
    r"@[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?"
    r"(?:\.[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?)+$"
)
PASSWORD_MIN_LENGTH = 8


def require_fields(**fields: str) -> None:
    missing = [
        name for name, value in fields.items()
        if not isinstance(value, str) or not value.strip()
    ]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")


def validate_name(name: str) -> str:
    cleaned = name.strip()
    if not NAME_RE.match(cleaned):
        raise ValidationError(
            "First and last name must contain only letters, spaces, hyphens, "
            "or apostrophes (max 49 characters)."
        )
    return cleaned


def validate_email(email: str) -> str:
    """Trim and lowercase; emails are unique case-insensitively."""
    cleaned = email.strip().lower()
    if len(cleaned) > 255 or not EMAIL_RE.match(cleaned):
        raise ValidationError("Invalid email format.")
    return cleaned


def validate_password(password: str) -> str:
    if (
        len(password) < PASSWORD_MIN_LENGTH
        or not re.search(r"[a-z]", password)
        or not re.search(r"[A-Z]", password)
        or not re.search(r"[0-9]", password)
        or not re.search(r"[^A-Za-z0-9]", password)
    ):
        raise ValidationError(
            "Password must be at least 8 characters long and include at least "
            "one lowercase letter, one uppercase letter, one number, and one symbol."
        )
    return password
