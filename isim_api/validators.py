"""
============================================================================
FILE: validators.py
LOCATION: isim_api/validators.py
============================================================================

PURPOSE:
    Sanitization and validation of free text and whole catalogue records.

ROLE IN PROJECT:
    Single enforcement point for every field constraint: the store applies
    no business validation, so each name typed into /api/generate and each
    record posted to /api/names passes through here first.

KEY COMPONENTS:
    - strip_markup: Remove <...> tags
    - sanitize_field: Markup/trim/empty/length pipeline for any field
    - sanitize_name: Full name pipeline incl. repetition/charset + casing
    - validate_record: Presence, pipeline and type checks for a NameRecord
    - parse_exclude_letters: Split the excludeLetters query value

DEPENDENCIES:
    - External: pydantic
    - Internal: isim_api.errors, isim_api.models, isim_services.turkish

USAGE:
    from isim_api.validators import sanitize_name
    name = sanitize_name("  <b>ışıl</b> ")   # "Işıl"
============================================================================
"""

import re
import typing

import pydantic

from isim_api.errors import (
    EmptyInputError,
    InvalidBodyError,
    InvalidCharactersError,
    MissingFieldsError,
    SuspiciousRepetitionError,
    TooLongError,
)
from isim_api.models import (
    MEANING_MAX_LENGTH,
    NAME_MAX_LENGTH,
    ORIGIN_MAX_LENGTH,
    RECORD_FIELDS,
    NameRecord,
)
from isim_services.turkish import tr_lower, tr_title

FIELD_LIMITS = {
    "name": NAME_MAX_LENGTH,
    "origin": ORIGIN_MAX_LENGTH,
    "meaning": MEANING_MAX_LENGTH,
}

_MARKUP_RE = re.compile(r"<[^>]*>")
_REPEATED_CHAR_RE = re.compile(r"(.)\1{2,}")
_TURKISH_NAME_RE = re.compile(r"^[a-zA-ZçÇğĞıİöÖşŞüÜ -]+$")
_EXCLUDE_SPLIT_RE = re.compile(r"[-,]")


def strip_markup(value: str) -> str:
    return _MARKUP_RE.sub("", value)


def sanitize_field(value: typing.Any, field: str) -> str:
    """Strip markup, trim, and enforce the field's length limit.

    Args:
        value: Raw input.
        field: One of "name", "origin", "meaning".

    Returns:
        str: Cleaned value.

    Raises:
        EmptyInputError: Nothing left after cleaning.
        TooLongError: Longer than the field allows.
    """
    if not isinstance(value, str):
        raise InvalidBodyError(f"{field} must be a string", field=field)

    cleaned = strip_markup(value).strip()
    if not cleaned:
        raise EmptyInputError(f"{field} cannot be empty", field=field)

    max_length = FIELD_LIMITS[field]
    if len(cleaned) > max_length:
        if field == "name":
            details = f"Name must be {max_length} characters or less"
        else:
            details = f"{field} must be {max_length} characters or less"
        raise TooLongError(details, field=field, max_length=max_length)

    return cleaned


def sanitize_name(value: typing.Any) -> str:
    """Run the full name pipeline and return the Turkish title-cased name.

    Args:
        value: Raw name as typed by the user.

    Returns:
        str: Normalized name, e.g. "IŞIL" -> "Işıl".

    Raises:
        EmptyInputError, TooLongError, SuspiciousRepetitionError,
        InvalidCharactersError: First failing check, in that order.
    """
    cleaned = sanitize_field(value, "name")

    # Three identical characters in a row almost never occur in real names
    if _REPEATED_CHAR_RE.search(cleaned):
        raise SuspiciousRepetitionError(
            "Bu bir isim gibi görünmüyor. Lütfen geçerli bir isim girin."
        )

    if not _TURKISH_NAME_RE.match(cleaned):
        raise InvalidCharactersError("Sadece Türkçe harfler kullanabilirsiniz.")

    return tr_title(cleaned)


def validate_record(payload: typing.Any) -> NameRecord:
    """Validate and normalize one record submitted for creation.

    Args:
        payload: Decoded JSON object.

    Returns:
        NameRecord: Record ready to persist.

    Raises:
        ValidationError: Any missing field, failing pipeline step or bad type.
    """
    if not isinstance(payload, dict):
        raise InvalidBodyError("Each name must be a JSON object")

    missing = [
        field for field in RECORD_FIELDS
        if payload.get(field) is None or payload.get(field) == ""
    ]
    if missing:
        raise MissingFieldsError(
            "Each name must have: name, gender, origin, syllables, length, "
            "meaning, and inQuran"
        )

    data = dict(payload)
    data["name"] = sanitize_name(payload["name"])
    data["origin"] = sanitize_field(payload["origin"], "origin")
    data["meaning"] = sanitize_field(payload["meaning"], "meaning")
    # length is derived, never trusted from the client
    data["length"] = len(data["name"])

    try:
        return NameRecord.model_validate(data)
    except pydantic.ValidationError as exc:
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ()))
        raise InvalidBodyError(f"{location}: {first.get('msg')}", field=location)


def parse_exclude_letters(value: typing.Optional[str]) -> typing.List[str]:
    """Split "a-b-ç" (or "a,b,ç") into Turkish-lowercased letters."""
    if not value:
        return []
    letters = (tr_lower(part.strip()) for part in _EXCLUDE_SPLIT_RE.split(value))
    return [letter for letter in letters if letter]
