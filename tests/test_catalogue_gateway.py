# test_catalogue_gateway.py
# Unit tests for catalogue filtering, pagination and atomic batch creation

# @see: isim_api/catalogue.py - Implementation under test
# @see: isim_api/mock_firestore.py - Store backing the gateway

import pytest
from google.api_core.exceptions import AlreadyExists
from unittest.mock import patch

from isim_api.catalogue import (
    CatalogueFilters,
    CatalogueGateway,
    PageRequest,
    load_catalogue,
)
from isim_api.cache import MemoryResponseCache
from isim_api.errors import DuplicateKeyError
from isim_api.mock_firestore import MockFirestoreClient, MockWriteBatch
from isim_api.models import Gender
from isim_api.validators import validate_record
from tests.factories import make_record, store_records


@pytest.fixture
def db():
    return MockFirestoreClient()


@pytest.fixture
def gateway(db):
    return CatalogueGateway(db, "names")


@pytest.fixture
def sample(db):
    records = [
        make_record("Deniz", gender="Her ikisi", syllables=2),
        make_record("Çağla", gender="Kız", syllables=2),
        make_record("Bora", gender="Erkek", syllables=2, origin="Moğolca"),
        make_record("Abdulkadir", gender="Erkek", syllables=4, origin="Arapça", inQuran=True),
        make_record("Muhammed Ali", gender="Erkek", syllables=5, origin="Arapça", inQuran=True),
        make_record("Işıl", gender="Kız", syllables=2),
        make_record("İsmail", gender="Erkek", syllables=3, origin="İbranice", inQuran=True),
    ]
    store_records(db, records)
    return records


def _names(page):
    return [record["name"] for record in page.records]


class TestPagination:
    def test_second_page_of_fifty(self, db, gateway):
        store_records(db, [make_record(f"Ad{i:03d}") for i in range(120)])

        page = gateway.list(None, PageRequest.clamp(page=2, limit=50))

        assert _names(page) == [f"Ad{i:03d}" for i in range(50, 100)]
        assert page.pagination() == {"page": 2, "limit": 50, "total": 120, "totalPages": 3}

    def test_page_past_the_end_is_empty(self, db, gateway):
        store_records(db, [make_record(f"Ad{i:03d}") for i in range(5)])
        page = gateway.list(None, PageRequest.clamp(page=3, limit=50))
        assert page.records == []
        assert page.total == 5

    def test_empty_catalogue_has_zero_pages(self, gateway):
        assert gateway.list().pagination() == {"page": 1, "limit": 50, "total": 0, "totalPages": 0}

    def test_all_mode_returns_every_row_as_one_page(self, db, gateway):
        store_records(db, [make_record(f"Ad{i:03d}") for i in range(120)])
        page = gateway.list(None, PageRequest.clamp(return_all=True))
        assert len(page.records) == 120
        assert page.pagination() == {"page": 1, "limit": 120, "total": 120, "totalPages": 1}

    @pytest.mark.parametrize(
        "page, limit, expected",
        [
            (None, None, (1, 50)),
            (0, 0, (1, 1)),
            (-3, 500, (1, 100)),
            (4, 20, (4, 20)),
        ],
    )
    def test_clamp(self, page, limit, expected):
        request = PageRequest.clamp(page=page, limit=limit)
        assert (request.page, request.limit) == expected


class TestFilters:
    def test_listing_uses_turkish_order(self, sample, gateway):
        assert _names(gateway.list()) == [
            "Abdulkadir", "Bora", "Çağla", "Deniz", "Işıl", "İsmail", "Muhammed Ali",
        ]

    def test_girl_includes_unisex_names(self, sample, gateway):
        page = gateway.list(CatalogueFilters(gender=Gender.GIRL))
        assert _names(page) == ["Çağla", "Deniz", "Işıl"]

    def test_both_returns_only_unisex_names(self, sample, gateway):
        assert _names(gateway.list(CatalogueFilters(gender=Gender.BOTH))) == ["Deniz"]

    def test_syllables_four_means_four_or_more(self, sample, gateway):
        page = gateway.list(CatalogueFilters(syllables=4))
        assert _names(page) == ["Abdulkadir", "Muhammed Ali"]

    def test_syllables_below_four_is_exact(self, sample, gateway):
        assert _names(gateway.list(CatalogueFilters(syllables=3))) == ["İsmail"]

    def test_origin_and_in_quran_combine(self, sample, gateway):
        page = gateway.list(CatalogueFilters(origin="Arapça", in_quran=True, gender=Gender.BOY))
        assert _names(page) == ["Abdulkadir", "Muhammed Ali"]

    def test_max_length(self, sample, gateway):
        assert _names(gateway.list(CatalogueFilters(max_length=4))) == ["Bora", "Işıl"]

    def test_search_is_turkish_case_insensitive(self, sample, gateway):
        assert _names(gateway.list(CatalogueFilters(search="IŞ"))) == ["Işıl"]
        assert _names(gateway.list(CatalogueFilters(search="İS"))) == ["İsmail"]

    def test_exclude_letters(self, sample, gateway):
        page = gateway.list(CatalogueFilters(exclude_letters=["a", "ı"]))
        assert _names(page) == ["Deniz"]

    def test_empty_filters(self):
        assert CatalogueFilters().is_empty()
        assert not CatalogueFilters(in_quran=True).is_empty()
        assert not CatalogueFilters(syllables=2).is_empty()


class TestCreate:
    def test_created_record_is_listed_once(self, gateway):
        created = gateway.create([validate_record(make_record("ayşe"))])

        assert created[0]["name"] == "Ayşe"
        assert _names(gateway.list()) == ["Ayşe"]

    def test_created_at_is_stored_but_not_listed(self, db, gateway):
        gateway.create([validate_record(make_record("Ayşe"))])

        stored = db.collection("names").document("Ayşe").get().to_dict()
        assert "createdAt" in stored
        assert "createdAt" not in gateway.list().records[0]

    def test_repeated_create_is_duplicate(self, gateway):
        gateway.create([validate_record(make_record("Ayşe"))])
        with pytest.raises(DuplicateKeyError) as exc_info:
            gateway.create([validate_record(make_record("Ayşe"))])
        assert exc_info.value.status_code == 409

    def test_batch_with_one_stored_duplicate_persists_nothing(self, sample, gateway):
        batch = [validate_record(make_record("Ayşe")), validate_record(make_record("Deniz"))]

        with pytest.raises(DuplicateKeyError):
            gateway.create(batch)

        assert "Ayşe" not in gateway.names()

    def test_batch_with_internal_duplicate_persists_nothing(self, gateway):
        batch = [
            validate_record(make_record("Ayşe")),
            validate_record(make_record("Elif")),
            validate_record(make_record("AYŞE")),
        ]
        with pytest.raises(DuplicateKeyError):
            gateway.create(batch)
        assert gateway.names() == []

    def test_commit_conflict_maps_to_duplicate(self, gateway):
        with patch.object(MockWriteBatch, "commit", side_effect=AlreadyExists("exists")):
            with pytest.raises(DuplicateKeyError):
                gateway.create([validate_record(make_record("Ayşe"))])


def test_load_catalogue_populates_then_hits_cache(sample, gateway):
    cache = MemoryResponseCache()

    records, hit = load_catalogue(gateway, cache)
    assert hit is False
    assert len(records) == len(sample)

    again, hit = load_catalogue(gateway, cache)
    assert hit is True
    assert again == records


def test_write_during_load_is_not_hidden_by_cache(gateway):
    cache = MemoryResponseCache()
    read_store = gateway.all_records

    def read_then_concurrent_create():
        snapshot = read_store()
        gateway.create([validate_record(make_record("Deniz"))])
        cache.invalidate()
        return snapshot

    with patch.object(gateway, "all_records", side_effect=read_then_concurrent_create):
        records, hit = load_catalogue(gateway, cache)
    assert records == []
    assert hit is False

    records, hit = load_catalogue(gateway, cache)
    assert hit is False
    assert [record["name"] for record in records] == ["Deniz"]


def test_row_cap_keeps_alphabetical_prefix(db, gateway, monkeypatch):
    monkeypatch.setattr("isim_api.catalogue.MAX_ROWS", 2)
    store_records(db, [make_record(name) for name in ("Zeynep", "Ümit", "Ayşe", "Bora")])

    assert [record["name"] for record in gateway.all_records()] == ["Ayşe", "Bora"]


def test_ping(gateway):
    assert gateway.ping() is True
