# test_turkish.py
# Unit tests for Turkish casing and collation

# @see: isim_services/turkish.py - Implementation under test

import pytest

from isim_services.turkish import tr_lower, tr_title, tr_upper, turkish_sort_key


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("IŞIL", "Işıl"),
        ("iSMAİL", "İsmail"),
        ("ışık", "Işık"),
        ("ÇAĞLA", "Çağla"),
        ("ayşe nur", "Ayşe nur"),
    ],
)
def test_title_case_uses_turkish_dotted_and_dotless_i(raw, expected):
    assert tr_title(raw) == expected


def test_title_case_of_empty_string():
    assert tr_title("") == ""


def test_upper_and_lower_pair_dotted_and_dotless_letters():
    assert tr_upper("i") == "İ"
    assert tr_upper("ı") == "I"
    assert tr_lower("I") == "ı"
    assert tr_lower("İ") == "i"
    assert tr_lower("İSMAİL") == "ismail"


def test_sort_places_turkish_letters_in_alphabet_order():
    names = ["Deniz", "Çağla", "Bora", "Cem"]
    assert sorted(names, key=turkish_sort_key) == ["Bora", "Cem", "Çağla", "Deniz"]


def test_sort_puts_dotless_i_before_dotted_i():
    names = ["İpek", "Irmak", "Hale"]
    assert sorted(names, key=turkish_sort_key) == ["Hale", "Irmak", "İpek"]


def test_sort_orders_o_before_o_umlaut_and_s_before_s_cedilla():
    names = ["Şule", "Özge", "Sude", "Oya"]
    assert sorted(names, key=turkish_sort_key) == ["Oya", "Özge", "Sude", "Şule"]


def test_sort_is_case_insensitive_at_primary_level():
    assert sorted(["ayla", "Ali"], key=turkish_sort_key) == ["Ali", "ayla"]


def test_separator_sorts_before_letters():
    assert sorted(["Alican", "Ali Can"], key=turkish_sort_key) == ["Ali Can", "Alican"]
