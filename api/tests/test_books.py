# api/tests/test_books.py
"""
Tests for books.py - the canon table and name resolution.
"""

import os
import sys

# Add api directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from services.references.books import (
    BOOKS,
    BOOK_NAMES,
    UNKNOWN_BOOK_INDEX,
    resolve_book,
    get_book,
    get_book_index,
    convert_book_name,
)


def test_canon_has_66_books_in_order():
    assert len(BOOKS) == 66
    assert BOOK_NAMES[0] == "Genesis"
    assert BOOK_NAMES[18] == "Psalm"
    assert BOOK_NAMES[42] == "John"
    assert BOOK_NAMES[65] == "Revelation"
    for index, entry in enumerate(BOOKS):
        assert entry.ordinal_index == index


def test_table_is_immutable():
    assert isinstance(BOOKS, tuple)
    with pytest.raises(Exception):
        BOOKS[0].canonical_name = "Genesis!"


@pytest.mark.parametrize("name", ["Psalm", "Ps", "Psa", "Psalms"])
def test_psalm_spellings_resolve_to_index_18(name):
    assert resolve_book(name) == ("Psalm", 18)


@pytest.mark.parametrize("name,expected", [
    ("Genesis", ("Genesis", 0)),
    ("Gen", ("Genesis", 0)),
    ("1 Cor", ("1 Corinthians", 45)),
    ("1Cor", ("1 Corinthians", 45)),
    ("1 John", ("1 John", 61)),
    ("Song of Solomon", ("Song of Solomon", 21)),
    ("Revelation", ("Revelation", 65)),
])
def test_resolve_book(name, expected):
    assert resolve_book(name) == expected


def test_unknown_names_come_back_unchanged():
    assert resolve_book("NoSuchBook") == ("NoSuchBook", UNKNOWN_BOOK_INDEX)
    assert get_book_index("NoSuchBook") == -1


def test_lookup_is_case_sensitive():
    assert resolve_book("ps") == ("ps", -1)
    assert resolve_book("john") == ("john", -1)


def test_get_book_and_placeholder():
    entry = get_book(42)
    assert entry.canonical_name == "John"
    assert entry.placeholder_name == "Book 43"
    assert get_book(-1) is None
    assert get_book(66) is None


def test_convert_book_name():
    assert convert_book_name("Ps") == "Psalm"
    assert convert_book_name("Psalm") == "Ps"
    assert convert_book_name("1 Corinthians") == "1Cor"
    assert convert_book_name("NoSuchBook") == "NoSuchBook"


def test_aliases_never_collide_with_names():
    for entry in BOOKS:
        assert entry.canonical_name not in entry.aliases
