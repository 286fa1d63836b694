"""Data models for voter roll records.

Field names are snake_case in Python and camelCase on the wire, matching the
spreadsheet web app (e.g. ``voter_no`` <-> ``voterNo``).
"""

from typing import Any, NamedTuple

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from voterportal.config.constants import DEFAULT_GENDER


class VoterKey(NamedTuple):
    """Composite identity of a record: (booth, voter number)."""

    booth: str
    voter_no: str


class WireModel(BaseModel):
    """Base model that reads and writes camelCase JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    def to_wire(self) -> dict[str, Any]:
        """Serialize for the store's JSON interface."""
        return self.model_dump(by_alias=True, exclude_none=True)


def _as_text(v: Any) -> Any:
    """Sheets hand back numbers for numeric-looking cells."""
    if v is None:
        return v
    if isinstance(v, bool):
        return str(v).lower()
    if isinstance(v, float) and v.is_integer():
        return str(int(v))
    if isinstance(v, (int, float)):
        return str(v)
    return v


class VoterRecord(WireModel):
    """One household member on the voter roll."""

    # Identity
    booth: str
    voter_no: str
    ward: str | None = None

    # Demographics
    house_no: str = ""
    name: str = ""
    relation_name: str = ""
    gender: str = DEFAULT_GENDER
    original_age: str = ""

    # Identity document
    aadhar: str = ""
    dob: str = ""
    calculated_age: str = ""
    aadhar_photo: str | None = None

    # Positional hint into the sheet, not used for identity
    row_idx: int | None = None

    # Created locally and not yet saved
    is_new: bool = False

    @field_validator(
        "booth",
        "voter_no",
        "ward",
        "house_no",
        "name",
        "relation_name",
        "gender",
        "original_age",
        "aadhar",
        "dob",
        "calculated_age",
        mode="before",
    )
    @classmethod
    def coerce_to_text(cls, v: Any) -> Any:
        """Accept numeric cell values for text fields."""
        return _as_text(v)

    @field_validator("booth", "voter_no")
    @classmethod
    def strip_identity(cls, v: str) -> str:
        """Identity fields are compared after trimming whitespace."""
        return v.strip()

    @property
    def key(self) -> VoterKey:
        """Composite (booth, voter_no) identity."""
        return VoterKey(self.booth, self.voter_no)

    def to_wire(self) -> dict[str, Any]:
        """Serialize for save; the local ``is_new`` flag stays client-side."""
        return self.model_dump(by_alias=True, exclude_none=True, exclude={"is_new"})


class DuplicateMember(WireModel):
    """Minimal identity of a record that already holds an Aadhaar number."""

    booth: str = ""
    voter_no: str = ""
    house_no: str = ""
    name: str = ""

    @field_validator("booth", "voter_no", "house_no", "name", mode="before")
    @classmethod
    def coerce_to_text(cls, v: Any) -> Any:
        """Accept numeric cell values for text fields."""
        return _as_text(v) if v is not None else ""


class DuplicateCheckResult(WireModel):
    """Outcome of a duplicate Aadhaar lookup. Transient, never stored."""

    is_duplicate: bool = False
    member: DuplicateMember | None = None


class StoreMetadata(WireModel):
    """Selection options for the booth, ward and house pickers."""

    booths: list[str] = Field(default_factory=list)
    house_map: dict[str, list[str]] = Field(default_factory=dict)
    ward_map: dict[str, list[str]] = Field(default_factory=dict)

    def wards_for(self, booth: str) -> list[str]:
        """Wards recorded under a booth (empty if the booth tracks none)."""
        return self.ward_map.get(booth, [])

    def houses_for(self, booth: str, ward: str | None = None) -> list[str]:
        """House numbers under a booth, narrowed to a ward when given."""
        if ward:
            return self.house_map.get(f"{booth}/{ward}", [])
        return self.house_map.get(booth, [])


class ExtractedIdentity(BaseModel):
    """Best-effort fields read from an Aadhaar card photo."""

    aadhar: str | None = None
    dob: str | None = None

    @property
    def is_empty(self) -> bool:
        """True when nothing usable was read from the image."""
        return not self.aadhar and not self.dob
