"""
============================================================================
FILE: models.py
LOCATION: isim_api/models.py
============================================================================

PURPOSE:
    Pydantic models for catalogue records, classification verdicts and the
    JSON envelopes returned by the API.

ROLE IN PROJECT:
    Shared by the validators (record shape checks), the catalogue gateway
    (documents read from Firestore) and the routers (response bodies).

KEY COMPONENTS:
    - Gender: Girl / Boy / Both, serialized with the Turkish labels
    - NameRecord: Canonical catalogue document
    - NameVerdict: Parsed model reply
    - Pagination, CatalogueListResponse, CreateNamesResponse, ErrorResponse

DEPENDENCIES:
    - External: pydantic
    - Internal: None

USAGE:
    from isim_api.models import NameRecord, Gender
============================================================================
"""

import enum
import typing

import pydantic

NAME_MAX_LENGTH = 30
ORIGIN_MAX_LENGTH = 50
MEANING_MAX_LENGTH = 200

RECORD_FIELDS = ("name", "gender", "origin", "syllables", "length", "meaning", "inQuran")


class Gender(str, enum.Enum):
    """Gender a name is given to."""

    GIRL = "Kız"
    BOY = "Erkek"
    BOTH = "Her ikisi"

    @classmethod
    def parse(cls, value: str) -> "Gender":
        """Accept the Turkish label or the English member name (Girl/Boy/Both)."""
        for member in cls:
            if value == member.value or value.lower() == member.name.lower():
                return member
        raise ValueError(f"Unknown gender: {value}")


class NameRecord(pydantic.BaseModel):
    """A catalogue entry as stored and returned by the API."""

    model_config = pydantic.ConfigDict(use_enum_values=True, extra="ignore")

    name: str = pydantic.Field(..., min_length=1, max_length=NAME_MAX_LENGTH)
    gender: Gender
    origin: str = pydantic.Field(..., min_length=1, max_length=ORIGIN_MAX_LENGTH)
    syllables: pydantic.PositiveInt
    length: pydantic.PositiveInt
    meaning: str = pydantic.Field(..., min_length=1, max_length=MEANING_MAX_LENGTH)
    inQuran: pydantic.StrictBool = False

    @pydantic.field_validator("gender", mode="before")
    @classmethod
    def _parse_gender(cls, value: typing.Any) -> typing.Any:
        if isinstance(value, str):
            return Gender.parse(value)
        return value


class NameVerdict(pydantic.BaseModel):
    """Answer to "is this a name?" from the catalogue or the model."""

    model_config = pydantic.ConfigDict(extra="allow")

    isName: bool
    name: typing.Optional[str] = None
    gender: typing.Optional[str] = None
    origin: typing.Optional[str] = None
    syllables: typing.Optional[int] = None
    length: typing.Optional[int] = None
    meaning: typing.Optional[str] = None
    inQuran: typing.Optional[bool] = None
    message: typing.Optional[str] = None


class Pagination(pydantic.BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int


class CatalogueListResponse(pydantic.BaseModel):
    data: typing.List[NameRecord]
    pagination: Pagination


class CreateNamesResponse(pydantic.BaseModel):
    message: str
    names: typing.List[NameRecord]


class ErrorResponse(pydantic.BaseModel):
    error: str
    details: str
