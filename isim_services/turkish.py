# turkish.py
# Turkish-locale casing and collation helpers

# Python's str.upper()/str.lower() follow the Unicode default mapping, which
# turns "i" into "I" and "İ" into "i̇" (i + combining dot). Turkish pairs the
# dotted and dotless letters differently, so every casing and ordering
# decision about names goes through these helpers.

# @see: isim_api/validators.py - Title-cases names before they are stored
# @see: isim_api/catalogue.py - Sorts listings with turkish_sort_key
# @see: isim_services/similarity.py - Compares lowercased names

from __future__ import annotations

from typing import Tuple

TURKISH_ALPHABET = "abcçdefgğhıijklmnoöpqrsştuüvwxyz"

_UPPER_TABLE = str.maketrans({"i": "İ", "ı": "I"})
_LOWER_TABLE = str.maketrans({"I": "ı", "İ": "i"})

# Separators sort ahead of every letter ("Ali Can" before "Alican")
_SEPARATOR_RANK = {" ": -2, "-": -1}
_LETTER_RANK = {letter: index for index, letter in enumerate(TURKISH_ALPHABET)}


def tr_upper(text: str) -> str:
    """Uppercase with Turkish rules (i -> İ, ı -> I)."""
    return text.translate(_UPPER_TABLE).upper()


def tr_lower(text: str) -> str:
    """Lowercase with Turkish rules (I -> ı, İ -> i)."""
    return text.translate(_LOWER_TABLE).lower()


def tr_title(text: str) -> str:
    """First character Turkish-uppercased, the remainder Turkish-lowercased.

    Only the very first character is raised, so "ayşe nur" becomes
    "Ayşe nur". Names are stored in exactly this shape.

    Examples:
        >>> tr_title("IŞIL")
        'Işıl'
        >>> tr_title("iSMAİL")
        'İsmail'
    """
    if not text:
        return text
    return tr_upper(text[0]) + tr_lower(text[1:])


def _char_rank(char: str) -> int:
    if char in _SEPARATOR_RANK:
        return _SEPARATOR_RANK[char]
    if char in _LETTER_RANK:
        return _LETTER_RANK[char]
    return len(TURKISH_ALPHABET) + ord(char)


def turkish_sort_key(text: str) -> Tuple[Tuple[int, ...], str]:
    """Sort key placing Ç, Ğ, I, İ, Ö, Ş, Ü at their Turkish alphabet positions.

    Comparison is case-insensitive at the primary level; the input string
    breaks ties so the ordering is total and stable across runs.
    """
    return tuple(_char_rank(char) for char in tr_lower(text)), text
