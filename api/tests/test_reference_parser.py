# api/tests/test_reference_parser.py
"""
Tests for reference_parser.py - splitting and canonicalization.
"""

import os
import sys

# Add api directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from services.references.reference_parser import (
    CanonicalSegment,
    ReferenceParseError,
    MAX_VERSES_PER_CHAPTER,
    split_reference,
    split_references,
    normalize_reference,
    parse_segment,
)


SPLIT_CASES = [
    # (input, expected segments)
    ("Matthew 5:1-7", ["Matthew 5:1-7"]),
    ("Matthew 5:1-7:29", ["Matthew 5:1-176", "Matthew 6:1-176", "Matthew 7:1-29"]),
    ("John 3:16", ["John 3:16"]),
    ("1 John 1:1-5", ["1 John 1:1-5"]),
    ("2 Timothy 1:1-2:2", ["2 Timothy 1:1-176", "2 Timothy 2:1-2"]),
    ("Genesis 1-", ["Genesis 1-"]),
    ("Genesis", ["Genesis"]),
    ("Philemon 1:5-10", ["Philemon 1:5-10"]),
    ("John 3", ["John 3:1-176"]),
    ("1 John 5:18-2 John 1:3", ["1 John 5:18-176", "2 John 1:1-3"]),
]


@pytest.mark.parametrize("reference,expected", SPLIT_CASES)
def test_split_reference_table(reference, expected):
    assert split_references(reference) == expected
    assert split_reference(reference) == expected


def test_sentinel_is_longest_chapter():
    assert MAX_VERSES_PER_CHAPTER == 176
    assert split_references("Psalm 119") == ["Psalm 119:1-176"]


def test_cross_chapter_same_chapter_collapses():
    assert split_references("John 1:1-1:5") == ["John 1:1-5"]


def test_cross_chapter_adjacent_chapters_have_no_middle():
    assert split_references("Romans 8:28-9:3") == ["Romans 8:28-176", "Romans 9:1-3"]


def test_backwards_chapter_span_is_left_unchanged():
    assert split_references("John 5:1-3:2") == ["John 5:1-3:2"]


def test_cross_book_with_range_on_first_side_recurses():
    assert split_references("Genesis 1:1-5 - Exodus 2:3") == ["Genesis 1:1-5", "Exodus 2:1-3"]


def test_cross_book_accepts_en_dash():
    assert split_references("1 John 5:18 – 2 John 1:3") == ["1 John 5:18-176", "2 John 1:1-3"]


def test_same_chapter_range_with_spaces_around_dash():
    assert split_references("John 3:16 - 18") == ["John 3:16-18"]


def test_comma_separated_references_preserve_order():
    result = split_references("John 3:16, Psalm 23, Matthew 5:1-6:2")
    assert result == [
        "John 3:16",
        "Psalm 23:1-176",
        "Matthew 5:1-176",
        "Matthew 6:1-2",
    ]


def test_empty_comma_parts_are_dropped():
    assert split_references("John 3:16,, Romans 8:28,") == ["John 3:16", "Romans 8:28"]
    assert split_references(",") == []


def test_unrecognized_input_is_trimmed_and_passed_through():
    assert split_references("  John chapter 3 verse 16  ") == ["John chapter 3 verse 16"]
    assert split_references("") == [""]


def test_numbered_book_without_space():
    assert split_references("1Cor 13") == ["1Cor 13:1-176"]


def test_song_of_solomon_multi_word_book():
    assert split_references("Song of Solomon 2") == ["Song of Solomon 2:1-176"]
    assert split_references("Song of Solomon 1:1-2:3") == [
        "Song of Solomon 1:1-176",
        "Song of Solomon 2:1-3",
    ]


def test_whitespace_is_collapsed_in_book_names():
    assert split_references("1   John  3:16") == ["1 John 3:16"]


@pytest.mark.parametrize("reference", [
    "John 3:16",
    "John 3",
    "Matthew 5:1-7",
    "John 1:1-1:5",
    "John 1:1-2:5",
    "Philemon 1:5-10",
    "  Romans   8:28 ",
])
def test_normalize_is_idempotent(reference):
    once = normalize_reference(reference)
    assert normalize_reference(once) == once


@pytest.mark.parametrize("reference", [
    "Matthew 5:1-7:29",
    "1 John 5:18-2 John 1:3",
    "John 3",
    "Psalm 23:1-6",
])
def test_split_segments_are_fixed_points(reference):
    for segment in split_references(reference):
        assert split_references(segment) == [segment]


def test_normalize_reference_forms():
    assert normalize_reference("John  3:16") == "John 3:16"
    assert normalize_reference("John 3") == "John 3:1-176"
    assert normalize_reference("John 1:1-1:5") == "John 1:1-5"
    assert normalize_reference("John 1:1-2:5") == "John 1:1-2:5"
    assert normalize_reference(" not a reference ") == "not a reference"


def test_parse_segment_single_and_range():
    single = parse_segment("John 3:16")
    assert single == CanonicalSegment("John", 3, 16, None, "John 3:16")
    assert not single.is_range
    assert single.last_verse == 16

    ranged = parse_segment("1 John 5:18-176")
    assert ranged.book == "1 John"
    assert ranged.chapter == 5
    assert (ranged.start_verse, ranged.end_verse) == (18, 176)
    assert ranged.is_range
    assert ranged.normalized == "1 John 5:18-176"


def test_parse_segment_keeps_unknown_book_names():
    segment = parse_segment("NoSuchBook 1:1")
    assert segment.book == "NoSuchBook"


@pytest.mark.parametrize("segment", [
    "Genesis",
    "Genesis 1:",
    "John 3:abc",
    "3:16",
    "John 11:35-30",
    "John 0:1",
])
def test_parse_segment_rejects_malformed(segment):
    with pytest.raises(ReferenceParseError):
        parse_segment(segment)
