# test_similarity.py
# Unit tests for the near-match and exact-match lookups

# @see: isim_services/similarity.py - Implementation under test

from isim_services.similarity import SimilarMatch, edit_distance, exact_match, nearest_match


def test_one_extra_letter_is_flagged():
    assert nearest_match("Meryemm", ["Ali", "Meryem"]) == SimilarMatch("Meryem", 1)


def test_identical_name_is_not_a_typo():
    assert nearest_match("Meryem", ["Meryem"]) is None


def test_three_edits_away_is_not_flagged():
    assert nearest_match("Mehmet", ["Melike"]) is None


def test_length_difference_over_two_is_skipped():
    assert nearest_match("Ali", ["Alihan"]) is None
    assert nearest_match("Ece", ["Ecem"]) == SimilarMatch("Ecem", 1)


def test_globally_nearest_match_wins():
    # "Aysel" is 2 edits from "Ayşe" and comes first, "Ayşen" is 1 edit away
    assert nearest_match("Ayşe", ["Aysel", "Ayşen"]) == SimilarMatch("Ayşen", 1)


def test_ties_keep_input_order():
    assert nearest_match("Selen", ["Selin", "Seren"]) == SimilarMatch("Selin", 1)
    assert nearest_match("Emre", ["Emine", "Emel"]) == SimilarMatch("Emine", 2)


def test_comparison_uses_turkish_lowercase():
    assert edit_distance("IŞIL", "ışıl") == 0
    assert edit_distance("Ali", "Zeynep", score_cutoff=2) == 3
    assert nearest_match("ISMAIL", ["İsmail"]) == SimilarMatch("İsmail", 2)


def test_empty_catalogue():
    assert nearest_match("Deniz", []) is None


def test_exact_match_ignores_turkish_case():
    records = [{"name": "Işıl", "gender": "Kız"}, {"name": "İsmail", "gender": "Erkek"}]
    assert exact_match("IŞIL", records) == records[0]
    assert exact_match("ismail", records) == records[1]
    assert exact_match("Ismail", records) is None
