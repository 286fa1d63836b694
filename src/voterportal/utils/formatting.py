"""Aadhaar normalization, age calculation, and natural sorting utilities."""

import re
from datetime import date, datetime
from typing import Iterable

from voterportal.config.constants import AADHAR_LENGTH, DEFAULT_REFERENCE_DATE

_NON_DIGITS = re.compile(r"[^0-9]")
_DIGIT_RUNS = re.compile(r"(\d+)")
_LEADING_INT = re.compile(r"^\s*(\d+)")

# Date layouts seen on Aadhaar cards, in the order they are tried
_LOOSE_DATE_FORMATS = ("%Y-%m-%d", "%d/%m/%Y", "%d-%m-%Y", "%d.%m.%Y")


def normalize_aadhar(value: str | None) -> str:
    """Reduce free-form input to at most 12 digits.

    Non-digit characters are dropped and anything past the twelfth digit is
    discarded, so pasted values like "1234 5678 9012" become "123456789012".

    Args:
        value: Raw text typed or pasted by the operator

    Returns:
        Digits-only string of length 0-12
    """
    if not value:
        return ""
    return _NON_DIGITS.sub("", str(value))[:AADHAR_LENGTH]


def is_complete_aadhar(value: str | None) -> bool:
    """Return True when value is exactly 12 digits."""
    return bool(value) and len(value) == AADHAR_LENGTH and _NON_DIGITS.search(value) is None


def is_valid_aadhar_for_save(value: str | None) -> bool:
    """Aadhaar may be saved empty or complete, never partial."""
    return not value or is_complete_aadhar(value)


def parse_iso_date(value: str | None) -> date | None:
    """Parse a YYYY-MM-DD string, returning None when it is not one."""
    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError:
        return None


def to_iso_date(value: str | None) -> str | None:
    """Convert a date in any card layout to YYYY-MM-DD.

    Args:
        value: Date such as "15/08/1985", "15-08-1985" or "1985-08-15"

    Returns:
        ISO date string, or None if the text is not a recognizable date
    """
    if not value:
        return None
    text = value.strip()
    for fmt in _LOOSE_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date().isoformat()
        except ValueError:
            continue
    return None


def calculate_age(dob: str | None, reference_date: date = DEFAULT_REFERENCE_DATE) -> str:
    """Compute age in whole years on the reference date.

    The birthday must have been reached by the reference date to count the
    year. Birth dates after the reference date clamp to "0".

    Args:
        dob: Birth date as YYYY-MM-DD
        reference_date: Date the age is measured at

    Returns:
        Age as a string, or "" when dob is empty or unparseable

    Example:
        >>> calculate_age("2020-01-02", date(2026, 1, 1))
        '5'
    """
    born = parse_iso_date(dob)
    if born is None:
        return ""

    age = reference_date.year - born.year
    if (reference_date.month, reference_date.day) < (born.month, born.day):
        age -= 1
    return str(age) if age >= 0 else "0"


def leading_int(value: str | None) -> int:
    """Integer value of the leading digits of value, 0 if there are none."""
    if not value:
        return 0
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else 0


def natural_sort_key(value: str) -> list[tuple[int, int | str]]:
    """Sort key that orders embedded numbers numerically.

    "2" sorts before "10" and "10A" after "10", matching how booth and
    house numbers are read on the roll.
    """
    key: list[tuple[int, int | str]] = []
    for part in _DIGIT_RUNS.split(str(value)):
        if not part:
            continue
        if part.isdigit():
            key.append((0, int(part)))
        else:
            key.append((1, part.casefold()))
    return key


def sort_naturally(values: Iterable[str]) -> list[str]:
    """Return values sorted ascending by natural_sort_key."""
    return sorted(values, key=natural_sort_key)
