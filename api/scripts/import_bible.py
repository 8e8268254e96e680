#!/usr/bin/env python3
"""
Import (or re-import) Bible text into the verse store.

Reads the nested JSON layout
    {"Book": [{"Chapter": [{"Verse": [{"Verseid": "...", "Verse": "..."}]}]}]}
either from a URL or a local file, and writes one row per verse with the
storage verse id computed by the chosen id scheme.

Run from the api directory.

Usage:
    python -m scripts.import_bible
    python -m scripts.import_bible --file bible.json --translation kjv
    python -m scripts.import_bible --scheme digit_packed --replace

Examples:
    # Download the default English text and import it
    cd api && python -m scripts.import_bible

    # Re-import from a local copy, replacing the existing translation
    cd api && python -m scripts.import_bible --file ~/bible.json --replace
"""

import argparse
import json
import logging
import os
import sys

import requests

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.config import (
    BIBLE_DB_PATH,
    BIBLE_JSON_URL,
    DEFAULT_TRANSLATION,
    IMPORT_BATCH_SIZE,
    VERSE_ID_SCHEME,
)
from services.references.books import get_book, resolve_book
from services.references.storage import VerseStore, VerseRecord
from services.references.verse_ids import (
    VerseIdScheme,
    SCHEMES,
    CHAPTER_MULTIPLIER,
    INVALID_VERSE_ID,
    get_scheme,
)

logger = logging.getLogger(__name__)

DOWNLOAD_TIMEOUT = 120


def download_bible_json(url: str) -> dict:
    """Download and decode the Bible JSON document."""
    logger.info(f"Downloading Bible data from {url}")
    response = requests.get(url, timeout=DOWNLOAD_TIMEOUT)
    response.raise_for_status()
    return response.json()


def load_bible_json(path: str) -> dict:
    """Read the Bible JSON document from disk."""
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _parse_number(value, default: int) -> int:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return default


def _verse_number(verse_id, position: int) -> int:
    """
    One-based verse number from a zero-based Verseid.

    Packed ids ("bbcccvvv") keep the zero-based verse in their last three
    digits. A missing id falls back to the position within the chapter.
    """
    value = _parse_number(verse_id, position) if verse_id else position
    if value >= CHAPTER_MULTIPLIER:
        value %= CHAPTER_MULTIPLIER
    return value + 1


def iter_verse_records(data: dict, scheme: VerseIdScheme, translation: str):
    """
    Convert the nested JSON document into VerseRecords.

    Book names come from the document when present, otherwise from the
    canon by position. Verse ids in the document are zero-based.
    """
    for position, book in enumerate(data.get("Book", [])):
        name = book.get("name") or ""
        if name:
            name, book_index = resolve_book(name)
        else:
            entry = get_book(position)
            if entry is None:
                logger.warning(f"Skipping book at position {position}: outside the 66-book canon")
                continue
            name, book_index = entry.canonical_name, entry.ordinal_index

        if book_index < 0:
            logger.warning(f"Skipping unknown book '{name}'")
            continue

        for chapter_position, chapter in enumerate(book.get("Chapter", [])):
            chapter_number = _parse_number(chapter.get("chapter"), chapter_position + 1)

            for verse_position, verse in enumerate(chapter.get("Verse", [])):
                verse_number = _verse_number(verse.get("Verseid"), verse_position)

                storage_id = scheme.to_storage_id(book_index, chapter_number, verse_number)
                if storage_id == INVALID_VERSE_ID:
                    logger.warning(f"Skipping {name} {chapter_number}:{verse_number}: no storage id")
                    continue

                yield VerseRecord(
                    book=name,
                    book_index=book_index,
                    chapter=chapter_number,
                    verse_number=verse_number,
                    storage_verse_id=storage_id,
                    text=(verse.get("Verse") or "").strip(),
                    translation=translation,
                )


def import_bible(
    data: dict,
    store: VerseStore,
    scheme: VerseIdScheme,
    translation: str,
    batch_size: int = IMPORT_BATCH_SIZE,
    replace: bool = False,
) -> int:
    """
    Write all verses of a document to the store in batches.

    Returns:
        Total verses written
    """
    store.ensure_schema()
    if replace:
        removed = store.clear(translation)
        logger.info(f"Removed {removed} existing '{translation}' verses")

    total = 0
    batch = []
    for record in iter_verse_records(data, scheme, translation):
        batch.append(record)
        if len(batch) >= batch_size:
            total += store.insert_verses(batch)
            logger.info(f"Imported {total} verses...")
            batch = []

    if batch:
        total += store.insert_verses(batch)

    logger.info(f"Successfully imported {total} total Bible verses.")
    return total


def main():
    parser = argparse.ArgumentParser(
        description="Import Bible text into the verse store",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m scripts.import_bible                        # Download and import
  python -m scripts.import_bible --file bible.json      # Import a local file
  python -m scripts.import_bible --replace              # Re-import translation
        """
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--file", help="Local Bible JSON file")
    source.add_argument("--url", default=BIBLE_JSON_URL, help="Bible JSON URL")
    parser.add_argument("--db", default=BIBLE_DB_PATH, help="Verse database path")
    parser.add_argument("--translation", default=DEFAULT_TRANSLATION, help="Translation code")
    parser.add_argument(
        "--scheme",
        default=VERSE_ID_SCHEME,
        choices=sorted(SCHEMES),
        help="Storage verse id scheme",
    )
    parser.add_argument(
        "--replace",
        action="store_true",
        help="Delete existing verses for this translation first",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    try:
        data = load_bible_json(args.file) if args.file else download_bible_json(args.url)
    except (OSError, ValueError, requests.RequestException) as e:
        logger.error(f"Failed to load Bible data: {e}")
        return 1

    store = VerseStore(args.db)
    total = import_bible(
        data,
        store,
        get_scheme(args.scheme),
        args.translation,
        replace=args.replace,
    )
    print(f"Imported {total} verses into {args.db} (scheme: {args.scheme})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
