# catalogue.py
# Catalogue Store Gateway: filtered, paginated, Turkish-sorted name listings

# Wraps the Firestore "names" collection (real or mock). Equality filters
# (gender set, origin, inQuran) are pushed down to the Firestore query; the
# remaining predicates, the Turkish collation sort and pagination run in
# Python over the bounded result. Writes go through one WriteBatch of
# create() operations so a duplicate anywhere rejects the whole batch.

# @see: isim_api/routers/catalogue.py - HTTP surface for list/create
# @see: isim_api/mock_firestore.py - In-memory client used in dev and tests
# @see: tools/seed_catalogue.py - Bulk import through create()
# @note: Document ID is the normalized name, which makes `name` unique

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from google.api_core.exceptions import Conflict
from google.cloud.firestore_v1.base_query import FieldFilter

from isim_api.errors import DuplicateKeyError
from isim_api.logging_config import get_logger
from isim_api.models import RECORD_FIELDS, Gender, NameRecord
from isim_services.turkish import tr_lower, turkish_sort_key

logger = get_logger("catalogue")

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100
MAX_ROWS = 5000
SYLLABLES_OPEN_ENDED_FROM = 4

# Selecting Girl or Boy also returns unisex names
_GENDER_MATCHES = {
    Gender.GIRL: [Gender.GIRL.value, Gender.BOTH.value],
    Gender.BOY: [Gender.BOY.value, Gender.BOTH.value],
    Gender.BOTH: [Gender.BOTH.value],
}


# ============================================================================
# QUERY OBJECTS
# ============================================================================


@dataclass
class CatalogueFilters:
    """Optional predicates, combined with AND."""

    gender: Optional[Gender] = None
    origin: Optional[str] = None
    syllables: Optional[int] = None
    max_length: Optional[int] = None
    in_quran: bool = False
    search: Optional[str] = None
    exclude_letters: List[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not any([
            self.gender,
            self.origin,
            self.syllables is not None,
            self.max_length is not None,
            self.in_quran,
            self.search,
            self.exclude_letters,
        ])

    def matches(self, record: Dict[str, Any]) -> bool:
        """Predicates that Firestore cannot evaluate for us."""
        if self.syllables is not None:
            syllables = record.get("syllables", 0)
            if self.syllables >= SYLLABLES_OPEN_ENDED_FROM:
                if syllables < SYLLABLES_OPEN_ENDED_FROM:
                    return False
            elif syllables != self.syllables:
                return False

        if self.max_length is not None and record.get("length", 0) > self.max_length:
            return False

        name = tr_lower(record.get("name", ""))
        if self.search and tr_lower(self.search) not in name:
            return False
        if any(letter in name for letter in self.exclude_letters):
            return False
        return True


@dataclass(frozen=True)
class PageRequest:
    """1-indexed page of `limit` rows, or every row when return_all is set."""

    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE
    return_all: bool = False

    @classmethod
    def clamp(
        cls,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        return_all: bool = False,
    ) -> "PageRequest":
        page = max(1, page or 1)
        limit = DEFAULT_PAGE_SIZE if limit is None else min(max(1, limit), MAX_PAGE_SIZE)
        return cls(page=page, limit=limit, return_all=return_all)

    @property
    def is_default(self) -> bool:
        return not self.return_all and self.page == 1 and self.limit == DEFAULT_PAGE_SIZE


@dataclass
class CataloguePage:
    records: List[Dict[str, Any]]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        if self.total == 0:
            return 0
        return math.ceil(self.total / self.limit)

    def pagination(self) -> Dict[str, int]:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "totalPages": self.total_pages,
        }


def paginate(records: List[Dict[str, Any]], page_request: PageRequest) -> CataloguePage:
    """Slice an already sorted list according to page_request."""
    total = len(records)
    if page_request.return_all:
        rows = records[:MAX_ROWS]
        return CataloguePage(rows, total=total, page=1, limit=max(1, len(rows)))

    start = (page_request.page - 1) * page_request.limit
    rows = records[start:start + page_request.limit]
    return CataloguePage(rows, total=total, page=page_request.page, limit=page_request.limit)


def public_record(data: Dict[str, Any]) -> Dict[str, Any]:
    """Drop storage-only fields (timestamps, ids) from a document."""
    return {key: data[key] for key in RECORD_FIELDS if key in data}


# ============================================================================
# GATEWAY
# ============================================================================


class CatalogueGateway:
    """Query and insert NameRecords in a Firestore collection."""

    def __init__(self, db, collection_name: str = "names"):
        self.db = db
        self.collection_name = collection_name
        self.collection = self.db.collection(collection_name)

    @staticmethod
    def document_id(name: str) -> str:
        return name

    def _stream(self, filters: Optional[CatalogueFilters] = None) -> List[Dict[str, Any]]:
        """Matching records in Turkish order, capped at MAX_ROWS after sorting.

        Firestore cannot collate Turkish, so the whole match set is read and
        sorted here; the cap keeps the alphabetical prefix.
        """
        query = self.collection
        if filters is not None:
            if filters.gender is not None:
                query = query.where(
                    filter=FieldFilter("gender", "in", _GENDER_MATCHES[filters.gender])
                )
            if filters.origin:
                query = query.where(filter=FieldFilter("origin", "==", filters.origin))
            if filters.in_quran:
                query = query.where(filter=FieldFilter("inQuran", "==", True))

        records = [public_record(doc.to_dict()) for doc in query.stream()]
        if filters is not None:
            records = [record for record in records if filters.matches(record)]
        records.sort(key=lambda record: turkish_sort_key(record.get("name", "")))
        return records[:MAX_ROWS]

    def list(
        self,
        filters: Optional[CatalogueFilters] = None,
        page_request: Optional[PageRequest] = None,
    ) -> CataloguePage:
        """
        List catalogue records.

        Args:
            filters: Optional predicates (None or empty means everything)
            page_request: Page selection (defaults to page 1 of 50)

        Returns:
            CataloguePage with the selected rows and the total match count
        """
        page_request = page_request or PageRequest()
        records = self._stream(filters)
        return paginate(records, page_request)

    def all_records(self) -> List[Dict[str, Any]]:
        """Every record (up to MAX_ROWS) in Turkish alphabetical order."""
        return self._stream()

    def names(self, limit: int = MAX_ROWS) -> List[str]:
        return [record["name"] for record in self._stream()[:limit] if record.get("name")]

    def create(self, records: Iterable[NameRecord]) -> List[Dict[str, Any]]:
        """
        Persist validated records atomically.

        Args:
            records: Records that already passed validate_record()

        Returns:
            The stored records, in submission order

        Raises:
            DuplicateKeyError: A name repeats within the batch or already
                exists; nothing is written in that case
        """
        records = list(records)
        seen = set()
        for record in records:
            key = tr_lower(record.name)
            if key in seen:
                raise DuplicateKeyError(record.name)
            seen.add(key)

        for record in records:
            if self.collection.document(self.document_id(record.name)).get().exists:
                raise DuplicateKeyError(record.name)

        now = datetime.now(timezone.utc)
        batch = self.db.batch()
        created = []
        for record in records:
            data = record.model_dump(mode="json")
            batch.create(
                self.collection.document(self.document_id(record.name)),
                {**data, "createdAt": now},
            )
            created.append(data)

        try:
            batch.commit()
        except Conflict as exc:
            # Lost a race with a concurrent writer after the existence check
            logger.warning(f"Batch create conflicted: {exc}")
            raise DuplicateKeyError(
                ", ".join(record.name for record in records),
                details="A name with this value already exists",
            ) from exc

        logger.info(f"Created {len(created)} name(s) in '{self.collection_name}'")
        return created

    def ping(self) -> bool:
        try:
            list(self.collection.limit(1).stream())
            return True
        except Exception as e:
            logger.warning(f"Catalogue store unavailable: {e}")
            return False


def load_catalogue(gateway: CatalogueGateway, cache) -> Tuple[List[Dict[str, Any]], bool]:
    """
    Full sorted listing, served from the response cache when it is warm.

    Returns:
        (records, hit) where hit tells whether the cache answered
    """
    cached = cache.get()
    if cached is not None:
        return cached, True

    # Read before the store so a write that lands mid-read keeps its invalidation
    generation = cache.generation()
    records = gateway.all_records()
    if generation is not None:
        cache.put(records, generation=generation)
    return records, False
