# api/tests/conftest.py
"""
Shared fixtures for the reference resolution tests.
"""

import os
import sys

# Add api directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from services.references import VerseStore, VerseRecord, get_scheme, resolve_book


def make_records(scheme, book, chapter, verses, stored_as=None, translation="kjv"):
    """
    Build verse records whose text names their own location.

    Text is "<Book> <chapter>:<verse>" so assertions can see exactly which
    rows came back. stored_as overrides the book name written to the row.
    """
    canonical, book_index = resolve_book(book)
    return [
        VerseRecord(
            book=stored_as or canonical,
            book_index=book_index,
            chapter=chapter,
            verse_number=verse,
            storage_verse_id=scheme.to_storage_id(book_index, chapter, verse),
            text=f"{canonical} {chapter}:{verse}",
            translation=translation,
        )
        for verse in verses
    ]


@pytest.fixture
def scheme():
    return get_scheme("genesis_special")


@pytest.fixture
def verse_store(tmp_path):
    store = VerseStore(str(tmp_path / "bible.db"))
    store.ensure_schema()
    return store
