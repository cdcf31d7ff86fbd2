import re
from typing import Optional

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
MIN_NAME_LENGTH = 3


class ValidationError(ValueError):
    """Raised when a request payload breaks a field rule.

    The message is returned to the client as-is.
    """

    @property
    def message(self) -> str:
        return str(self)


def is_valid_email(value: Optional[str]) -> bool:
    """Return True if ``value`` looks like ``local-part@domain.tld``.

    Purely syntactic, no DNS lookups.
    """
    if not value:
        return False
    return EMAIL_PATTERN.fullmatch(value) is not None


def validate_create(name: Optional[str], email: Optional[str]) -> None:
    if not name:
        raise ValidationError("Name is required")
    if not email or not is_valid_email(email):
        raise ValidationError("Invalid email format")


def validate_update(name: Optional[str], email: Optional[str]) -> None:
    # Empty values mean "keep the current value", not "clear it".
    if name and len(name) < MIN_NAME_LENGTH:
        raise ValidationError(
            f"Name must be at least {MIN_NAME_LENGTH} characters"
        )
    if email and not is_valid_email(email):
        raise ValidationError("Invalid email format")
