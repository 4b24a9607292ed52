"""Input validation helpers for directory records."""
from __future__ import annotations
import datetime
from dataclasses import dataclass
from typing import Optional

from email_validator import EmailNotValidError, validate_email

from .models import DirectoryRecord

INVALID_EMAIL = "InvalidEmail"
BLANK_FIELD = "BlankField"
FUTURE_BIRTHDAY = "FutureBirthday"


@dataclass(frozen=True)
class ValidationError:
    """First violation found in a candidate record.

    Attributes:
        code: InvalidEmail, BlankField or FutureBirthday
        field: Wire name of the offending field
        message: Human-readable description
    """
    code: str
    field: str
    message: str


def is_blank(value: Optional[str]) -> bool:
    """Return True for anything but a string with non-whitespace content."""
    return not isinstance(value, str) or not value.strip()


def is_future(day: Optional[datetime.date], today: Optional[datetime.date] = None) -> bool:
    """Return True when ``day`` is strictly after ``today`` (local clock)."""
    if day is None:
        return False
    return day > (today or datetime.date.today())


def is_valid_email(email: Optional[str]) -> bool:
    """Syntax-only address check (no DNS lookups)."""
    if is_blank(email):
        return False
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def validate_for_creation(
    candidate: DirectoryRecord,
    today: Optional[datetime.date] = None,
) -> Optional[ValidationError]:
    """Check a record before it is sent to the directory.

    Checks run in a fixed order (email, first name, last name, birthday,
    password) and stop at the first violation.

    Args:
        candidate: Record to create (id not yet assigned)
        today: Reference date for the birthday check (defaults to today)

    Returns:
        None if the record is valid, otherwise the first ValidationError
    """
    if not is_valid_email(candidate.email):
        return ValidationError(INVALID_EMAIL, "email", f"User email invalid {candidate.email}")
    if is_blank(candidate.first_name):
        return ValidationError(BLANK_FIELD, "firstName", "User firstName is blank")
    if is_blank(candidate.last_name):
        return ValidationError(BLANK_FIELD, "lastName", "User lastName is blank")
    if candidate.birthday is None:
        return ValidationError(BLANK_FIELD, "birthday", "User birthday is blank")
    if is_future(candidate.birthday, today):
        return ValidationError(FUTURE_BIRTHDAY, "birthday", "User birthday is in the future")
    if is_blank(candidate.password):
        return ValidationError(BLANK_FIELD, "password", "User password is blank")
    return None
