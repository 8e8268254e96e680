# api/services/references/__init__.py
"""
Scripture reference resolution.

This package provides:
- ReferenceService: Unified interface for citation lookup and validation
- Passage: Dataclass for a resolved citation
- split_references / normalize_reference: Citation canonicalization
- is_valid_reference: Validation with human-readable reasons
- resolve_book: Canonical book name and ordinal index lookup
- VerseIdScheme: Pluggable storage verse-id encodings
- VerseStore: SQLite verse table access
- VerseFetcher: Batch lookup with fallback chain
"""

from .books import (
    BookEntry,
    BOOKS,
    BOOK_NAMES,
    UNKNOWN_BOOK_INDEX,
    resolve_book,
    get_book,
    get_book_index,
    convert_book_name,
)
from .reference_parser import (
    CanonicalSegment,
    ReferenceParseError,
    MAX_VERSES_PER_CHAPTER,
    split_reference,
    split_references,
    normalize_reference,
    parse_segment,
)
from .validator import (
    ReferenceValidationError,
    is_valid_reference,
    validate_reference,
    collect_invalid_references,
    build_feedback,
)
from .verse_ids import (
    VerseIdScheme,
    GenesisSpecialScheme,
    DigitPackedScheme,
    INVALID_VERSE_ID,
    INVALID_VERSE,
    get_scheme,
)
from .storage import (
    VerseStore,
    VerseRecord,
    QueryCondition,
    VerseStoreError,
    StoreQueryError,
    QueryCancelledError,
)
from .verse_fetcher import (
    VerseFetcher,
    VerseNotFoundError,
)
from .reference_service import (
    ReferenceService,
    Passage,
)

__all__ = [
    # Unified Service (primary interface)
    "ReferenceService",
    "Passage",
    # Books
    "BookEntry",
    "BOOKS",
    "BOOK_NAMES",
    "UNKNOWN_BOOK_INDEX",
    "resolve_book",
    "get_book",
    "get_book_index",
    "convert_book_name",
    # Parsing
    "CanonicalSegment",
    "ReferenceParseError",
    "MAX_VERSES_PER_CHAPTER",
    "split_reference",
    "split_references",
    "normalize_reference",
    "parse_segment",
    # Validation
    "ReferenceValidationError",
    "is_valid_reference",
    "validate_reference",
    "collect_invalid_references",
    "build_feedback",
    # Verse ids
    "VerseIdScheme",
    "GenesisSpecialScheme",
    "DigitPackedScheme",
    "INVALID_VERSE_ID",
    "INVALID_VERSE",
    "get_scheme",
    # Storage
    "VerseStore",
    "VerseRecord",
    "QueryCondition",
    "VerseStoreError",
    "StoreQueryError",
    "QueryCancelledError",
    # Fetching
    "VerseFetcher",
    "VerseNotFoundError",
]
