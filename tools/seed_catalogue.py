"""
============================================================================
FILE: seed_catalogue.py
LOCATION: tools/seed_catalogue.py
============================================================================

PURPOSE:
    Bulk import a JSON file of names into the catalogue collection

ROLE IN PROJECT:
    Initial data seeding for Firestore or the mock store (MOCK_DB_FILE).
    Every record goes through the same validation as POST /api/names and
    is written with create() semantics, so re-running is safe: names that
    already exist are skipped.

DEPENDENCIES:
    - isim_api (config, catalogue gateway, validators)
    - firebase-admin when USE_REAL_FIREBASE=true

USAGE:
    python tools/seed_catalogue.py
    python tools/seed_catalogue.py --file data/names.sample.json --dry-run
    python tools/seed_catalogue.py --batch-size 50
    python tools/seed_catalogue.py --reset
============================================================================
"""
from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from isim_api.catalogue import CatalogueGateway
from isim_api.config import Settings, get_db
from isim_api.errors import DuplicateKeyError, ValidationError
from isim_api.models import NameRecord
from isim_api.validators import validate_record
from isim_services.turkish import tr_lower


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DEFAULT_SOURCE_PATH = PROJECT_ROOT / "data" / "names.sample.json"
DEFAULT_BATCH_SIZE = 100


class CatalogueSeeder:
    """Validates a names file and writes it to the catalogue in batches."""

    def __init__(
        self,
        gateway: CatalogueGateway,
        dry_run: bool = False,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        self.gateway = gateway
        self.dry_run = dry_run
        self.batch_size = max(1, batch_size)
        self.stats = {
            "created": 0,
            "skipped": 0,
            "invalid": 0,
            "errors": 0,
        }

    @staticmethod
    def load_names(path: Path) -> List[Any]:
        """Load a JSON array (or {"names": [...]}) of name objects."""
        if not path.exists():
            raise FileNotFoundError(f"Names file not found: {path}")

        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)

        if isinstance(data, dict):
            data = data.get("names", [])
        if not isinstance(data, list):
            raise ValueError(f"Expected a JSON array of names in {path}")

        logger.info("Loaded %s names from %s", len(data), path)
        return data

    def validate(self, raw_names: List[Any]) -> List[NameRecord]:
        """Validate every entry; drop invalid ones and in-file repeats."""
        existing = {tr_lower(name) for name in self.gateway.names()}
        seen = set()
        records: List[NameRecord] = []

        for index, raw in enumerate(raw_names):
            try:
                record = validate_record(raw)
            except ValidationError as exc:
                label = raw.get("name") if isinstance(raw, dict) else index
                logger.warning("Skipping invalid entry %s: %s", label, exc.details)
                self.stats["invalid"] += 1
                continue

            key = tr_lower(record.name)
            if key in existing or key in seen:
                self.stats["skipped"] += 1
                continue
            seen.add(key)
            records.append(record)

        return records

    def reset_data(self, confirm: bool = False) -> None:
        """Delete every document in the names collection (DANGEROUS)."""
        if self.dry_run:
            logger.info("Dry run mode - reset skipped")
            return

        if not confirm:
            answer = input(
                "WARNING: This will DELETE every name in "
                f"'{self.gateway.collection_name}'. Type 'yes' to confirm: "
            )
            if answer.lower() != "yes":
                logger.info("Reset cancelled")
                return

        deleted = 0
        batch = self.gateway.db.batch()
        for doc in self.gateway.collection.stream():
            batch.delete(doc.reference)
            deleted += 1
            if deleted % self.batch_size == 0:
                batch.commit()
                batch = self.gateway.db.batch()
        batch.commit()
        logger.info("Deleted %s names", deleted)

    def write(self, records: List[NameRecord]) -> None:
        for start in range(0, len(records), self.batch_size):
            chunk = records[start:start + self.batch_size]
            if self.dry_run:
                logger.info("[DRY RUN] Would create %s names", len(chunk))
                self.stats["created"] += len(chunk)
                continue
            try:
                self.gateway.create(chunk)
                self.stats["created"] += len(chunk)
            except DuplicateKeyError as exc:
                # Another writer added one of these names since validate()
                logger.error("Batch starting at %s rejected: %s", start, exc.details)
                self.stats["errors"] += len(chunk)
            logger.info(
                "Seeded %s/%s names...",
                min(start + len(chunk), len(records)),
                len(records),
            )

    def run(
        self,
        source: Path,
        reset: bool = False,
        confirm: bool = False,
    ) -> Dict[str, int]:
        """Run the import and return the stats."""
        logger.info("Starting catalogue seeding")
        if self.dry_run:
            logger.info("DRY RUN MODE - no changes will be made")

        if reset:
            self.reset_data(confirm=confirm)

        raw_names = self.load_names(source)
        records = self.validate(raw_names)
        self.write(records)

        logger.info("=" * 50)
        logger.info("Seeding complete")
        logger.info("  Created: %s", self.stats["created"])
        logger.info("  Skipped: %s", self.stats["skipped"])
        logger.info("  Invalid: %s", self.stats["invalid"])
        logger.info("  Errors:  %s", self.stats["errors"])
        logger.info("=" * 50)
        return self.stats


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser."""
    parser = argparse.ArgumentParser(
        description="Import a JSON names file into the catalogue",
    )
    parser.add_argument(
        "--file",
        default=str(DEFAULT_SOURCE_PATH),
        help="Path to the names JSON file",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate and report without writing",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=DEFAULT_BATCH_SIZE,
        help="Names per write batch",
    )
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Delete existing names before importing (DANGEROUS)",
    )
    parser.add_argument(
        "--yes",
        action="store_true",
        help="Skip the confirmation prompt for --reset",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """CLI entrypoint."""
    args = build_parser().parse_args(argv)

    settings = Settings.from_env()
    if not settings.use_real_firebase and not settings.mock_db_file:
        logger.warning("Using the in-memory store without MOCK_DB_FILE; nothing will persist")
    gateway = CatalogueGateway(get_db(settings), settings.names_collection)
    seeder = CatalogueSeeder(
        gateway,
        dry_run=args.dry_run,
        batch_size=args.batch_size,
    )
    seeder.run(Path(args.file), reset=args.reset, confirm=args.yes)


if __name__ == "__main__":
    main()
