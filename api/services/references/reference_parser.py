# api/services/references/reference_parser.py
"""
Scripture reference splitter and canonicalizer.

Turns a free-form citation into canonical single-chapter segments of the
form "Book Chapter:StartVerse-EndVerse" (or "Book Chapter:Verse"):

- Comma lists: "John 3:16, Romans 8:28"
- Whole chapters: "John 3" -> "John 3:1-176"
- Same-chapter ranges: "Matthew 5:1-7" (unchanged)
- Cross-chapter ranges: "Matthew 5:1-7:29" -> one segment per chapter
- Cross-book ranges: "1 John 5:18-2 John 1:3" -> "1 John 5:18-176", "2 John 1:1-3"
- Single verses: "John 3:16" (unchanged)

Anything else is passed through trimmed; the validator decides whether it
is acceptable.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional

logger = logging.getLogger(__name__)


# Longest chapter in the canon (Psalm 119). Used as "end of chapter";
# lookups are always constrained to the requested chapter.
MAX_VERSES_PER_CHAPTER = 176

# Single-word names with an optional leading number ("John", "1 John",
# "1Cor"), plus the one multi-word book in the canon.
_BOOK = r"(?:Song\s+of\s+(?:Solomon|Songs)|[1-3]?\s*[A-Za-z]+)"
_DASH = r"\s*[-–—]\s*"

WHOLE_CHAPTER_RE = re.compile(rf"^({_BOOK})\s+(\d+)$")
CHAPTER_RANGE_RE = re.compile(rf"^({_BOOK})\s+(\d+):(\d+){_DASH}(\d+)(?::(\d+))?$")
CROSS_BOOK_RE = re.compile(
    rf"^({_BOOK}\s+\d+:\d+(?:{_DASH}\d+)?){_DASH}({_BOOK}\s+\d+:\d+(?:{_DASH}\d+)?)$"
)
SINGLE_VERSE_RE = re.compile(rf"^({_BOOK})\s+(\d+):(\d+)$")

# Segment shape consumed by the fetcher. The book part is deliberately
# loose so unknown names still reach the store's fallback lookups.
SEGMENT_RE = re.compile(r"^(.*?[^\s\d].*?)\s+(\d+):(\d+)(?:-(\d+))?$")


class ReferenceParseError(ValueError):
    """Raised when a segment cannot be decomposed into book/chapter/verses."""
    pass


@dataclass(frozen=True)
class CanonicalSegment:
    """
    A reference confined to a single chapter.

    Attributes:
        book: Book name as written in the segment (not yet resolved)
        chapter: Chapter number
        start_verse: First verse
        end_verse: Last verse (None for a single verse)
        original: The segment string this was parsed from
    """
    book: str
    chapter: int
    start_verse: int
    end_verse: Optional[int] = None
    original: str = ""

    @property
    def is_range(self) -> bool:
        return self.end_verse is not None

    @property
    def last_verse(self) -> int:
        return self.end_verse if self.end_verse is not None else self.start_verse

    @property
    def normalized(self) -> str:
        """Return the canonical segment string."""
        if self.is_range:
            return f"{self.book} {self.chapter}:{self.start_verse}-{self.end_verse}"
        return f"{self.book} {self.chapter}:{self.start_verse}"


def _clean_book(book: str) -> str:
    return re.sub(r"\s+", " ", book.strip())


# -----------------------------------------------------------------------------
# Grammar rules (tried in order; the first match wins)
# -----------------------------------------------------------------------------

def _whole_chapter(match: re.Match) -> list[str]:
    book, chapter = _clean_book(match.group(1)), int(match.group(2))
    return [f"{book} {chapter}:1-{MAX_VERSES_PER_CHAPTER}"]


def _chapter_range(match: re.Match) -> Optional[list[str]]:
    book = _clean_book(match.group(1))
    start_chapter = int(match.group(2))
    start_verse = int(match.group(3))

    if match.group(5) is None:
        # "Chapter:Verse-Verse"
        end_verse = int(match.group(4))
        logger.debug(f"Same-chapter verse range: {book} {start_chapter}:{start_verse}-{end_verse}")
        return [f"{book} {start_chapter}:{start_verse}-{end_verse}"]

    end_chapter = int(match.group(4))
    end_verse = int(match.group(5))
    logger.debug(
        f"Multi-chapter reference: {book} {start_chapter}:{start_verse}-{end_chapter}:{end_verse}"
    )

    if start_chapter == end_chapter:
        return [f"{book} {start_chapter}:{start_verse}-{end_verse}"]
    if end_chapter < start_chapter:
        # Backwards span; leave it for the validator to reject
        return None

    segments = [f"{book} {start_chapter}:{start_verse}-{MAX_VERSES_PER_CHAPTER}"]
    for chapter in range(start_chapter + 1, end_chapter):
        segments.append(f"{book} {chapter}:1-{MAX_VERSES_PER_CHAPTER}")
    segments.append(f"{book} {end_chapter}:1-{end_verse}")
    return segments


def _cross_book(match: re.Match) -> list[str]:
    first, second = match.group(1).strip(), match.group(2).strip()
    logger.debug(f"Splitting multi-book reference into '{first}' and '{second}'")

    segments = []

    simple = SINGLE_VERSE_RE.match(first)
    if simple:
        book, chapter, verse = _clean_book(simple.group(1)), int(simple.group(2)), int(simple.group(3))
        segments.append(f"{book} {chapter}:{verse}-{MAX_VERSES_PER_CHAPTER}")
    else:
        segments.extend(split_reference(first))

    simple = SINGLE_VERSE_RE.match(second)
    if simple:
        book, chapter, verse = _clean_book(simple.group(1)), int(simple.group(2)), int(simple.group(3))
        segments.append(f"{book} {chapter}:1-{verse}")
    else:
        segments.extend(split_reference(second))

    # TODO: emit the books lying between the two endpoints;
    # "2 John 1:1-Jude 1:2" currently omits 3 John.
    return segments


def _single_verse(match: re.Match) -> list[str]:
    book, chapter, verse = _clean_book(match.group(1)), int(match.group(2)), int(match.group(3))
    return [f"{book} {chapter}:{verse}"]


Rule = tuple[str, re.Pattern, Callable[[re.Match], Optional[list[str]]]]

# Cross-chapter parsing is selected over same-chapter parsing by the second
# ':' inside CHAPTER_RANGE_RE, and both come before the cross-book rule so
# "John 1:1-5" is never read as a span between two books.
GRAMMAR: tuple[Rule, ...] = (
    ("whole_chapter", WHOLE_CHAPTER_RE, _whole_chapter),
    ("chapter_range", CHAPTER_RANGE_RE, _chapter_range),
    ("cross_book", CROSS_BOOK_RE, _cross_book),
    ("single_verse", SINGLE_VERSE_RE, _single_verse),
)


# -----------------------------------------------------------------------------
# Public API
# -----------------------------------------------------------------------------

def split_reference(reference: str) -> list[str]:
    """
    Split one reference (no commas) into canonical single-chapter segments.

    Args:
        reference: e.g. "Matthew 5:1-7:29"

    Returns:
        e.g. ["Matthew 5:1-176", "Matthew 6:1-176", "Matthew 7:1-29"].
        Unrecognized input is returned as a single trimmed segment.
    """
    reference = reference.strip()

    for name, pattern, handler in GRAMMAR:
        match = pattern.match(reference)
        if not match:
            continue
        segments = handler(match)
        if segments is not None:
            return segments
        logger.debug(f"Rule {name} matched '{reference}' but produced no segments")
        break

    return [reference]


def split_references(reference_string: str) -> list[str]:
    """
    Split a citation that may hold several comma-separated references.

    Each comma-separated piece is split independently and the results are
    concatenated in order. Empty pieces between commas are dropped.

    Args:
        reference_string: e.g. "John 3:16, Romans 8:28-39"

    Returns:
        Ordered list of canonical segments
    """
    if "," not in reference_string:
        return split_reference(reference_string)

    segments = []
    for part in reference_string.split(","):
        part = part.strip()
        if not part:
            continue
        segments.extend(split_reference(part))
    return segments


def normalize_reference(reference: str) -> str:
    """
    Standardize one reference without splitting it.

    - "John  3:16" -> "John 3:16"
    - "John 3" -> "John 3:1-176"
    - "John 1:1-1:5" -> "John 1:1-5"
    - "John 1:1-2:5" stays a single cross-chapter string

    Unrecognized input is returned trimmed.
    """
    reference = reference.strip()

    match = SINGLE_VERSE_RE.match(reference)
    if match:
        return _single_verse(match)[0]

    match = CHAPTER_RANGE_RE.match(reference)
    if match:
        book = _clean_book(match.group(1))
        chapter, verse, end = match.group(2), match.group(3), match.group(4)
        end_verse = match.group(5)
        if end_verse is None or int(chapter) == int(end):
            return f"{book} {int(chapter)}:{int(verse)}-{int(end_verse or end)}"
        return f"{book} {int(chapter)}:{int(verse)}-{int(end)}:{int(end_verse)}"

    match = WHOLE_CHAPTER_RE.match(reference)
    if match:
        return _whole_chapter(match)[0]

    return reference


def parse_segment(segment: str) -> CanonicalSegment:
    """
    Parse a canonical segment string into its parts.

    Args:
        segment: "Book Chapter:Verse" or "Book Chapter:Start-End"

    Returns:
        CanonicalSegment

    Raises:
        ReferenceParseError: If the string is not segment-shaped or the
            range is inverted
    """
    text = segment.strip()
    match = SEGMENT_RE.match(text)
    if not match:
        raise ReferenceParseError(f"invalid reference format: {segment!r}")

    book = _clean_book(match.group(1))
    chapter = int(match.group(2))
    start_verse = int(match.group(3))
    end_verse = int(match.group(4)) if match.group(4) is not None else None

    if chapter < 1 or start_verse < 1:
        raise ReferenceParseError(f"chapter and verse must be positive: {segment!r}")
    if end_verse is not None and end_verse < start_verse:
        raise ReferenceParseError(
            f"invalid verse range {segment!r}: end verse must be greater than or equal to start verse"
        )

    return CanonicalSegment(
        book=book,
        chapter=chapter,
        start_verse=start_verse,
        end_verse=end_verse,
        original=segment,
    )
