# api/services/references/verse_fetcher.py
"""
Batch verse lookup with layered fallbacks.

fetch_many() resolves many canonical segments with one combined query:

1. Each segment becomes a point condition (book, chapter, verse) or a
   range condition (book, chapter, verse_id BETWEEN a AND b) using the
   canonical book name and the configured verse-id scheme.
2. All conditions are OR-ed and executed once.
3. Rows are grouped by (book, chapter, verse_id) and matched back to
   their segments. Ranges come out as "[1] text [2] text ...".
4. Segments still missing run the single-segment fallback chain. If the
   combined query itself fails, every segment runs it.

The fallback chain tries, in order: the canonical name, the book index,
the name exactly as written, its alternate spelling, and the "Book N"
placeholder some imports used. The first hit wins.

Failures of one segment never fail the batch; unresolved segments are
simply absent from the returned mapping.
"""

import logging
import threading
from collections import defaultdict
from dataclasses import dataclass
from typing import Optional

from .books import resolve_book, convert_book_name, get_book, UNKNOWN_BOOK_INDEX
from .reference_parser import CanonicalSegment, ReferenceParseError, parse_segment
from .storage import (
    VerseStore,
    VerseRecord,
    QueryCondition,
    StoreQueryError,
    QueryCancelledError,
)
from .verse_ids import VerseIdScheme, INVALID_VERSE_ID, INVALID_VERSE

logger = logging.getLogger(__name__)


class VerseNotFoundError(LookupError):
    """A reference has no matching verse after all lookups were tried."""
    pass


@dataclass(frozen=True)
class VerseRangeInfo:
    """Ties a batch condition back to the segment it was built for."""
    book: str
    book_index: int
    chapter: int
    start_verse: int
    end_verse: int


@dataclass
class _Plan:
    reference: str
    segment: CanonicalSegment
    condition: Optional[QueryCondition]
    range_info: VerseRangeInfo


def format_verses(numbered: list[tuple[int, str]]) -> str:
    """Join (verse, text) pairs as "[v] text" separated by single spaces."""
    return " ".join(f"[{verse}] {text}" for verse, text in numbered)


class VerseFetcher:
    """
    Resolves canonical segments against a VerseStore.

    Usage:
        fetcher = VerseFetcher(store, get_scheme("genesis_special"))

        texts = fetcher.fetch_many(["John 3:16", "Romans 8:28-30"])
        text = fetcher.fetch_one("Psalm 23:1-176")
    """

    def __init__(self, store: VerseStore, scheme: VerseIdScheme):
        self.store = store
        self.scheme = scheme

    # -------------------------------------------------------------------------
    # Batch lookup
    # -------------------------------------------------------------------------

    def fetch_many(
        self,
        references: list[str],
        cancel: Optional[threading.Event] = None,
    ) -> dict[str, str]:
        """
        Resolve many canonical segments in as few queries as possible.

        Args:
            references: Canonical segment strings (see reference_parser)
            cancel: Optional event; when set, pending queries are aborted

        Returns:
            Mapping of segment string -> text, for resolved segments only

        Raises:
            QueryCancelledError: If cancel was set
        """
        result: dict[str, str] = {}
        plans = self._plan(references)
        conditions = [p.condition for p in plans if p.condition is not None]

        if conditions:
            logger.info(
                f"Executing batch query for {len(references)} references with {len(conditions)} conditions"
            )
            try:
                records = self.store.find_any(conditions, cancel=cancel)
            except QueryCancelledError:
                raise
            except StoreQueryError as e:
                logger.error(f"Batch query failed, falling back to sequential lookup: {e}")
            else:
                grouped = self._group(records)
                for plan in plans:
                    if plan.condition is None:
                        continue
                    text = self._assemble(plan, grouped)
                    if text:
                        result[plan.reference] = text

        for plan in plans:
            if plan.reference in result:
                continue
            try:
                result[plan.reference] = self._resolve_sequential(plan.segment, cancel=cancel)
            except VerseNotFoundError as e:
                logger.debug(f"No verse content for '{plan.reference}': {e}")
            except StoreQueryError as e:
                logger.warning(f"Lookup failed for '{plan.reference}': {e}")

        logger.info(f"Fetched {len(result)}/{len(references)} requested verse references in batch")
        return result

    def fetch_one(self, reference: str, cancel: Optional[threading.Event] = None) -> str:
        """
        Resolve a single canonical segment.

        Raises:
            ReferenceParseError: If the segment is malformed
            VerseNotFoundError: If nothing matches
            StoreQueryError: If the store fails during the fallback chain
        """
        segment = parse_segment(reference)
        plan = self._plan_segment(reference, segment)

        if plan.condition is not None:
            try:
                records = self.store.find_any([plan.condition], cancel=cancel)
            except QueryCancelledError:
                raise
            except StoreQueryError as e:
                logger.warning(f"Primary lookup failed for '{reference}': {e}")
            else:
                text = self._assemble(plan, self._group(records))
                if text:
                    return text

        return self._resolve_sequential(segment, cancel=cancel)

    # -------------------------------------------------------------------------
    # Fallback chain
    # -------------------------------------------------------------------------

    def lookup_keys(self, book: str) -> list[dict]:
        """
        Ordered, de-duplicated book keys for the fallback chain.

        Each key is a dict with either "book" or "book_index".
        """
        canonical, book_index = resolve_book(book)
        keys = [{"book": canonical}]
        if book_index != UNKNOWN_BOOK_INDEX:
            keys.append({"book_index": book_index})
        keys.append({"book": book})
        keys.append({"book": convert_book_name(book)})
        if book_index != UNKNOWN_BOOK_INDEX:
            keys.append({"book": get_book(book_index).placeholder_name})

        unique = []
        for key in keys:
            if key not in unique:
                unique.append(key)
        return unique

    def find_single_verse(
        self,
        book: str,
        chapter: int,
        verse: int,
        cancel: Optional[threading.Event] = None,
    ) -> str:
        """
        Find one verse, trying each fallback key until one matches.

        Raises:
            VerseNotFoundError: If every key misses
        """
        for key in self.lookup_keys(book):
            record = self.store.find_one(chapter=chapter, verse=verse, cancel=cancel, **key)
            if record:
                if key.get("book") != book:
                    logger.debug(f"Found {book} {chapter}:{verse} via fallback key {key}")
                return record.text

        raise VerseNotFoundError(f"verse {book} {chapter}:{verse} not found")

    def find_range_with_fallback(
        self,
        segment: CanonicalSegment,
        cancel: Optional[threading.Event] = None,
    ) -> str:
        """
        Find a verse range by plain verse numbers, one query per fallback key.

        Raises:
            VerseNotFoundError: If every key misses
        """
        for key in self.lookup_keys(segment.book):
            records = self.store.find_verses(
                chapter=segment.chapter,
                start_verse=segment.start_verse,
                end_verse=segment.last_verse,
                cancel=cancel,
                **key,
            )
            if records:
                return format_verses([(r.verse_number, r.text) for r in records])

        raise VerseNotFoundError(
            f"no verses found in range {segment.book} {segment.chapter}:"
            f"{segment.start_verse}-{segment.last_verse}"
        )

    def _resolve_sequential(
        self,
        segment: CanonicalSegment,
        cancel: Optional[threading.Event] = None,
    ) -> str:
        if segment.is_range:
            return self.find_range_with_fallback(segment, cancel=cancel)
        return self.find_single_verse(segment.book, segment.chapter, segment.start_verse, cancel=cancel)

    # -------------------------------------------------------------------------
    # Planning and assembly
    # -------------------------------------------------------------------------

    def _plan(self, references: list[str]) -> list[_Plan]:
        plans = []
        seen = set()
        for reference in references:
            if reference in seen:
                continue
            seen.add(reference)
            try:
                segment = parse_segment(reference)
            except ReferenceParseError as e:
                logger.warning(f"Failed to parse reference '{reference}': {e}")
                continue
            plans.append(self._plan_segment(reference, segment))
        return plans

    def _plan_segment(self, reference: str, segment: CanonicalSegment) -> _Plan:
        canonical, book_index = resolve_book(segment.book)
        info = VerseRangeInfo(
            book=canonical,
            book_index=book_index,
            chapter=segment.chapter,
            start_verse=segment.start_verse,
            end_verse=segment.last_verse,
        )

        if not segment.is_range:
            condition = QueryCondition(book=canonical, chapter=segment.chapter, verse=segment.start_verse)
            return _Plan(reference, segment, condition, info)

        id_start = self.scheme.to_storage_id(book_index, segment.chapter, segment.start_verse)
        id_end = self.scheme.to_storage_id(book_index, segment.chapter, segment.last_verse)
        if id_start == INVALID_VERSE_ID or id_end == INVALID_VERSE_ID:
            # Unknown book: no id range to query, leave it to the fallback chain
            return _Plan(reference, segment, None, info)

        logger.debug(
            f"Mapping verse range {segment.start_verse}-{segment.last_verse} "
            f"to storage ids {id_start}-{id_end}"
        )
        condition = QueryCondition(book=canonical, chapter=segment.chapter, id_start=id_start, id_end=id_end)
        return _Plan(reference, segment, condition, info)

    @staticmethod
    def _group(records: list[VerseRecord]) -> dict:
        grouped = defaultdict(dict)
        for record in records:
            grouped[(record.book, record.chapter)][record.storage_verse_id] = record
        return grouped

    def _assemble(self, plan: _Plan, grouped: dict) -> Optional[str]:
        info = plan.range_info
        chapter_records = grouped.get((info.book, info.chapter), {})

        if not plan.segment.is_range:
            storage_id = self.scheme.to_storage_id(info.book_index, info.chapter, info.start_verse)
            record = chapter_records.get(storage_id)
            return record.text if record else None

        numbered = []
        for storage_id, record in chapter_records.items():
            verse = self.scheme.to_simple_verse(info.book_index, storage_id)
            if verse == INVALID_VERSE:
                logger.warning(
                    f"Skipping verse with failed simple verse extraction: "
                    f"book_index={info.book_index}, storage_id={storage_id}"
                )
                continue
            if info.start_verse <= verse <= info.end_verse:
                numbered.append((verse, record.text))

        if not numbered:
            logger.debug(
                f"No verses within {info.start_verse}-{info.end_verse} for {info.book} "
                f"{info.chapter} after filtering {len(chapter_records)} fetched rows"
            )
            return None

        numbered.sort(key=lambda pair: pair[0])
        return format_verses(numbered)
