# api/services/references/verse_ids.py
"""
Storage verse-id schemes.

The verse table keys each row by a single integer besides its
book/chapter/verse columns. Two encodings exist depending on how a
database was imported, and they are not interchangeable:

- genesis_special: Genesis rows use the bare verse number, every other
  book uses book_index * 1,000,000 + verse. The chapter is not encoded.
- digit_packed: book_index * 1,000,000 + (chapter - 1) * 1,000 + (verse - 1)
  for every book.

Pick the one matching the imported data with VERSE_ID_SCHEME. A wrong
choice does not raise; lookups simply stop matching.
"""

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


INVALID_VERSE_ID = -1
INVALID_VERSE = -1

BOOK_MULTIPLIER = 1_000_000
CHAPTER_MULTIPLIER = 1_000


class VerseIdScheme(ABC):
    """Converts between (book index, chapter, verse) and storage ids."""

    name = ""

    @abstractmethod
    def to_storage_id(self, book_index: int, chapter: int, verse: int) -> int:
        """Return the storage id, or INVALID_VERSE_ID for bad input."""

    @abstractmethod
    def to_simple_verse(self, book_index: int, storage_id: int) -> int:
        """Recover the plain verse number, or INVALID_VERSE."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class GenesisSpecialScheme(VerseIdScheme):
    """id = verse for Genesis, book_index * 1,000,000 + verse otherwise."""

    name = "genesis_special"

    def to_storage_id(self, book_index: int, chapter: int, verse: int) -> int:
        # chapter is not part of this encoding
        if book_index < 0 or verse <= 0:
            logger.warning(f"Invalid input to verse id mapping: book_index={book_index}, verse={verse}")
            return INVALID_VERSE_ID

        if book_index == 0:
            return verse
        return book_index * BOOK_MULTIPLIER + verse

    def to_simple_verse(self, book_index: int, storage_id: int) -> int:
        if book_index < 0 or storage_id <= 0:
            logger.warning(
                f"Invalid input to verse extraction: book_index={book_index}, storage_id={storage_id}"
            )
            return INVALID_VERSE

        if book_index == 0:
            return storage_id

        verse = storage_id - book_index * BOOK_MULTIPLIER
        if verse <= 0:
            logger.warning(
                f"Non-positive verse for book_index={book_index}, storage_id={storage_id} -> {verse}"
            )
            return INVALID_VERSE
        return verse


class DigitPackedScheme(VerseIdScheme):
    """id = book_index * 1,000,000 + (chapter - 1) * 1,000 + (verse - 1)."""

    name = "digit_packed"

    def to_storage_id(self, book_index: int, chapter: int, verse: int) -> int:
        if book_index < 0 or chapter <= 0 or verse <= 0:
            logger.warning(
                f"Invalid input to verse id mapping: book_index={book_index}, "
                f"chapter={chapter}, verse={verse}"
            )
            return INVALID_VERSE_ID
        if chapter > CHAPTER_MULTIPLIER or verse > CHAPTER_MULTIPLIER:
            logger.warning(f"Chapter/verse out of range for digit packing: {chapter}:{verse}")
            return INVALID_VERSE_ID

        return book_index * BOOK_MULTIPLIER + (chapter - 1) * CHAPTER_MULTIPLIER + (verse - 1)

    def to_simple_verse(self, book_index: int, storage_id: int) -> int:
        if book_index < 0 or storage_id < 0:
            return INVALID_VERSE
        if storage_id // BOOK_MULTIPLIER != book_index:
            logger.warning(f"Storage id {storage_id} does not belong to book_index={book_index}")
            return INVALID_VERSE
        return storage_id % CHAPTER_MULTIPLIER + 1

    def to_chapter(self, storage_id: int) -> int:
        """Recover the chapter number encoded in a storage id."""
        return (storage_id % BOOK_MULTIPLIER) // CHAPTER_MULTIPLIER + 1


SCHEMES = {
    GenesisSpecialScheme.name: GenesisSpecialScheme,
    DigitPackedScheme.name: DigitPackedScheme,
}


def get_scheme(name: str) -> VerseIdScheme:
    """
    Return a scheme instance by name.

    Raises:
        ValueError: For unknown scheme names
    """
    try:
        return SCHEMES[name]()
    except KeyError:
        raise ValueError(
            f"Unknown verse id scheme '{name}'. Expected one of: {', '.join(sorted(SCHEMES))}"
        ) from None
