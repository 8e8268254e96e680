# api/tests/test_reference_service.py
"""
Tests for reference_service.py - citation resolution end to end.
"""

import os
import sys

# Add api directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from conftest import make_records
from services.references import (
    ReferenceService,
    ReferenceValidationError,
    VerseNotFoundError,
    VerseStore,
)


@pytest.fixture
def service(verse_store, scheme):
    verse_store.insert_verses(make_records(scheme, "John", 3, [16, 17]))
    verse_store.insert_verses(make_records(scheme, "Psalm", 23, range(1, 7)))
    verse_store.insert_verses(make_records(scheme, "Matthew", 5, [1]))
    verse_store.insert_verses(make_records(scheme, "Matthew", 6, [1]))
    verse_store.insert_verses(make_records(scheme, "Matthew", 7, [29, 30]))
    verse_store.insert_verses(make_records(scheme, "1 John", 5, [18, 21]))
    verse_store.insert_verses(make_records(scheme, "2 John", 1, [1, 3, 4]))
    return ReferenceService(store=verse_store, scheme=scheme, translation="kjv")


def test_single_verse(service):
    assert service.get_verse_by_reference("John 3:16") == "John 3:16"


def test_comma_list_joined_by_blank_line(service):
    assert service.get_verse_by_reference("John 3:16, John 3:17") == "John 3:16\n\nJohn 3:17"


def test_cross_chapter_range(service):
    text = service.get_verse_by_reference("Matthew 5:1-7:29")

    assert text == "[1] Matthew 5:1\n\n[1] Matthew 6:1\n\n[29] Matthew 7:29"
    assert "Matthew 7:30" not in text


def test_cross_book_range(service):
    text = service.get_verse_by_reference("1 John 5:18-2 John 1:3")

    assert text == "[18] 1 John 5:18 [21] 1 John 5:21\n\n[1] 2 John 1:1 [3] 2 John 1:3"


def test_whole_chapter(service):
    text = service.get_verse_by_reference("Psalm 23")

    assert text.startswith("[1] Psalm 23:1 ")
    assert text.endswith("[6] Psalm 23:6")


def test_partially_resolved_citation_keeps_found_parts(service):
    assert service.get_verse_by_reference("John 3:16, Jude 1:1") == "John 3:16"


@pytest.mark.parametrize("reference", ["Jude 1:1", "Jude 1", "Genesis 1:", "NoSuchBook 1:1"])
def test_nothing_found_raises(service, reference):
    with pytest.raises(VerseNotFoundError):
        service.get_verse_by_reference(reference)


def test_get_verses_by_references_is_partial(service):
    result = service.get_verses_by_references(["John 3:16", "Psalm 23:1-2", "NoSuchBook 1:1"])

    assert result == {
        "John 3:16": "John 3:16",
        "Psalm 23:1-2": "[1] Psalm 23:1 [2] Psalm 23:2",
    }


def test_get_verses_by_references_shares_segments(service):
    result = service.get_verses_by_references(["John 3:16", "John 3:16, John 3:17"])

    assert result["John 3:16"] == "John 3:16"
    assert result["John 3:16, John 3:17"] == "John 3:16\n\nJohn 3:17"


def test_lookup_returns_passage(service):
    passage = service.lookup("John 3:16, Jude 1:1")

    assert passage.segments == ["John 3:16", "Jude 1:1"]
    assert passage.text == "John 3:16"
    assert passage.missing == ["Jude 1:1"]
    assert not passage.is_complete
    assert passage.to_dict() == {
        "ref": "John 3:16, Jude 1:1",
        "segments": ["John 3:16", "Jude 1:1"],
        "text": "John 3:16",
        "translation": "kjv",
        "missing": ["Jude 1:1"],
        "complete": False,
    }


def test_lookup_rejects_invalid_reference(service):
    with pytest.raises(ReferenceValidationError) as exc_info:
        service.lookup("Genesis 1:")

    assert "missing verse number" in exc_info.value.reason


def test_lookup_not_found(service):
    with pytest.raises(VerseNotFoundError):
        service.lookup("Jude 1:1")


def test_validation_and_split_passthrough(service):
    assert service.is_valid_reference("John 3:16") == (True, None)
    assert service.is_valid_reference("Revelation")[0] is False
    assert service.split("Matthew 5:1-7:29") == ["Matthew 5:1-176", "Matthew 6:1-176", "Matthew 7:1-29"]


def test_translation_filter(tmp_path, scheme):
    db_path = str(tmp_path / "bible.db")
    store = VerseStore(db_path)
    store.ensure_schema()
    store.insert_verses(make_records(scheme, "John", 3, [16], translation="kjv"))
    store.insert_verses(make_records(scheme, "John", 3, [17], translation="web"))

    web = ReferenceService(store=VerseStore(db_path, translation="web"), scheme=scheme, translation="web")

    assert web.get_verse_by_reference("John 3:17") == "John 3:17"
    with pytest.raises(VerseNotFoundError):
        web.get_verse_by_reference("John 3:16")
