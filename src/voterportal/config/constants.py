"""Constants for Aadhaar validation, gender codes, and delete reasons."""

from datetime import date

# Aadhaar numbers are exactly 12 digits once complete
AADHAR_LENGTH = 12

# Displayed age is computed as of this date, not today's date
DEFAULT_REFERENCE_DATE = date(2026, 1, 1)

# Gender codes as they appear in the voter roll
GENDER_OPTIONS: dict[str, str] = {
    "पु": "पुरुष",  # Male
    "म": "महिला",  # Female
    "अन्य": "अन्य",  # Other
}

DEFAULT_GENDER = "पु"

# Reasons offered when removing a persisted member
DELETE_REASONS: list[str] = [
    "शादी",  # Marriage
    "मृत्यु",  # Death
    "डुप्लीकेट",  # Duplicate
    "पलायन",  # Migration
]

# Fields searched by name lookup
NAME_FIELDS: tuple[str, ...] = ("name", "relation_name")

# Fields an operator may edit directly on a record
EDITABLE_FIELDS: frozenset[str] = frozenset(
    {
        "house_no",
        "name",
        "relation_name",
        "gender",
        "original_age",
        "aadhar",
        "dob",
        "aadhar_photo",
    }
)
