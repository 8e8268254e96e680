# api/services/references/books.py
"""
Book index table for the 66-book canon.

Each book has a fixed ordinal index (0 = Genesis, 65 = Revelation), a
canonical display name, an OSIS-style abbreviation, and a set of aliases.
The table is built once at import time and never mutated afterwards.

Name lookups are case-sensitive exact matches: "Ps" resolves to "Psalm",
"ps" does not.
"""

from dataclasses import dataclass
from typing import Optional


UNKNOWN_BOOK_INDEX = -1
CANON_SIZE = 66


@dataclass(frozen=True)
class BookEntry:
    """
    One book of the canon.

    Attributes:
        canonical_name: Name used for storage and display (e.g., "1 John")
        ordinal_index: Zero-based position in canon order (0-65)
        abbreviation: OSIS abbreviation (e.g., "1John")
        aliases: Alternate spellings accepted by the resolver
    """
    canonical_name: str
    ordinal_index: int
    abbreviation: str
    aliases: frozenset = frozenset()

    @property
    def placeholder_name(self) -> str:
        """Generic name some import pipelines stored instead of the real one."""
        return f"Book {self.ordinal_index + 1}"


# (canonical name, OSIS abbreviation, aliases) in canon order
_CANON = [
    # Torah/Pentateuch
    ("Genesis", "Gen", ("Gn", "Ge")),
    ("Exodus", "Exod", ("Ex", "Exo")),
    ("Leviticus", "Lev", ("Lv",)),
    ("Numbers", "Num", ("Nm", "Nu")),
    ("Deuteronomy", "Deut", ("Dt", "Deu")),

    # Historical Books
    ("Joshua", "Josh", ("Jos",)),
    ("Judges", "Judg", ("Jdg", "Jg")),
    ("Ruth", "Ruth", ("Ru", "Rth")),
    ("1 Samuel", "1Sam", ("1 Sam", "1 Sa", "1Sa", "I Samuel")),
    ("2 Samuel", "2Sam", ("2 Sam", "2 Sa", "2Sa", "II Samuel")),
    ("1 Kings", "1Kgs", ("1 Kgs", "1 Ki", "1Ki", "I Kings")),
    ("2 Kings", "2Kgs", ("2 Kgs", "2 Ki", "2Ki", "II Kings")),
    ("1 Chronicles", "1Chr", ("1 Chr", "1 Ch", "1Ch", "I Chronicles")),
    ("2 Chronicles", "2Chr", ("2 Chr", "2 Ch", "2Ch", "II Chronicles")),
    ("Ezra", "Ezra", ("Ezr",)),
    ("Nehemiah", "Neh", ("Ne",)),
    ("Esther", "Esth", ("Est", "Es")),

    # Wisdom/Poetry
    ("Job", "Job", ("Jb",)),
    ("Psalm", "Ps", ("Psa", "Psalms", "Pss", "Psm")),
    ("Proverbs", "Prov", ("Pr", "Prv")),
    ("Ecclesiastes", "Eccl", ("Ecc", "Ec", "Qoh")),
    ("Song of Solomon", "Song", ("Song of Songs", "SOS", "Sg", "Canticles")),

    # Major Prophets
    ("Isaiah", "Isa", ("Is",)),
    ("Jeremiah", "Jer", ("Je",)),
    ("Lamentations", "Lam", ("La",)),
    ("Ezekiel", "Ezek", ("Eze", "Ezk")),
    ("Daniel", "Dan", ("Dn", "Da")),

    # Minor Prophets
    ("Hosea", "Hos", ("Ho",)),
    ("Joel", "Joel", ("Jl",)),
    ("Amos", "Amos", ("Am",)),
    ("Obadiah", "Obad", ("Ob",)),
    ("Jonah", "Jonah", ("Jon", "Jnh")),
    ("Micah", "Mic", ("Mi",)),
    ("Nahum", "Nah", ("Na",)),
    ("Habakkuk", "Hab", ("Hb",)),
    ("Zephaniah", "Zeph", ("Zep",)),
    ("Haggai", "Hag", ("Hg",)),
    ("Zechariah", "Zech", ("Zec",)),
    ("Malachi", "Mal", ("Ml",)),

    # Gospels and Acts
    ("Matthew", "Matt", ("Mt", "Mat")),
    ("Mark", "Mark", ("Mk", "Mr", "Mrk")),
    ("Luke", "Luke", ("Lk", "Lu", "Luk")),
    ("John", "John", ("Jn", "Joh", "Jhn")),
    ("Acts", "Acts", ("Ac", "Act")),

    # Pauline Epistles
    ("Romans", "Rom", ("Ro", "Rm")),
    ("1 Corinthians", "1Cor", ("1 Cor", "1 Co", "1Co", "I Corinthians")),
    ("2 Corinthians", "2Cor", ("2 Cor", "2 Co", "2Co", "II Corinthians")),
    ("Galatians", "Gal", ("Ga",)),
    ("Ephesians", "Eph", ("Ephes",)),
    ("Philippians", "Phil", ("Php", "Pp")),
    ("Colossians", "Col", ()),
    ("1 Thessalonians", "1Thess", ("1 Thess", "1 Th", "1Th", "I Thessalonians")),
    ("2 Thessalonians", "2Thess", ("2 Thess", "2 Th", "2Th", "II Thessalonians")),
    ("1 Timothy", "1Tim", ("1 Tim", "1 Ti", "1Ti", "I Timothy")),
    ("2 Timothy", "2Tim", ("2 Tim", "2 Ti", "2Ti", "II Timothy")),
    ("Titus", "Titus", ("Tit",)),
    ("Philemon", "Phlm", ("Philem", "Phm")),

    # General Epistles
    ("Hebrews", "Heb", ()),
    ("James", "Jas", ("Jm",)),
    ("1 Peter", "1Pet", ("1 Pet", "1 Pe", "1 Pt", "I Peter")),
    ("2 Peter", "2Pet", ("2 Pet", "2 Pe", "2 Pt", "II Peter")),
    ("1 John", "1John", ("1 Jn", "1 Jo", "1Jn", "I John")),
    ("2 John", "2John", ("2 Jn", "2Jn", "II John")),
    ("3 John", "3John", ("3 Jn", "3Jn", "III John")),
    ("Jude", "Jude", ("Jud", "Jd")),

    # Revelation
    ("Revelation", "Rev", ("Re", "Rv", "Revelations", "Apocalypse")),
]


def _build_table():
    """Build the immutable book tuple plus name and alias indexes."""
    books = []
    names = {}
    aliases = {}

    for index, (name, abbreviation, extra) in enumerate(_CANON):
        alias_set = frozenset({abbreviation, *extra} - {name})
        books.append(BookEntry(
            canonical_name=name,
            ordinal_index=index,
            abbreviation=abbreviation,
            aliases=alias_set,
        ))
        names[name] = index

    for entry in books:
        for alias in entry.aliases:
            if alias in names or alias in aliases:
                raise ValueError(f"Book alias '{alias}' is ambiguous")
            aliases[alias] = entry.ordinal_index

    if len(books) != CANON_SIZE:
        raise ValueError(f"Canon must have {CANON_SIZE} books, got {len(books)}")

    return tuple(books), names, aliases


BOOKS, _NAME_TO_INDEX, _ALIAS_TO_INDEX = _build_table()

# Canonical names in canon order
BOOK_NAMES = tuple(entry.canonical_name for entry in BOOKS)


def get_book(index: int) -> Optional[BookEntry]:
    """Return the book at an ordinal index, or None when out of range."""
    if 0 <= index < CANON_SIZE:
        return BOOKS[index]
    return None


def resolve_book(name: str) -> tuple[str, int]:
    """
    Resolve a book name or alias to its canonical name and ordinal index.

    Resolution order: canonical names, then aliases. Both are exact,
    case-sensitive matches.

    Args:
        name: Book name as written (e.g., "Ps", "1 Cor", "Romans")

    Returns:
        (canonical_name, ordinal_index). Unknown names come back unchanged
        with index UNKNOWN_BOOK_INDEX.
    """
    index = _NAME_TO_INDEX.get(name)
    if index is None:
        index = _ALIAS_TO_INDEX.get(name)
    if index is None:
        return name, UNKNOWN_BOOK_INDEX
    return BOOKS[index].canonical_name, index


def get_book_index(name: str) -> int:
    """Return the ordinal index for a book name or alias (-1 if unknown)."""
    return resolve_book(name)[1]


def convert_book_name(name: str) -> str:
    """
    Return the alternate spelling of a book name.

    Aliases map to the canonical name and canonical names map to their
    abbreviation. Unknown names are returned unchanged.
    """
    if name in _ALIAS_TO_INDEX:
        return BOOKS[_ALIAS_TO_INDEX[name]].canonical_name
    if name in _NAME_TO_INDEX:
        return BOOKS[_NAME_TO_INDEX[name]].abbreviation
    return name
