# api/services/references/reference_service.py
"""
Unified reference service.

Single entry point used by routes and other services to turn raw
citations into verse text:

- get_verse_by_reference: one citation -> text (or VerseNotFoundError)
- get_verses_by_references: many citations -> {citation: text}, partial
- is_valid_reference: (valid, reason) for untrusted citations
- lookup: structured Passage for API responses
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Optional

from core.config import BIBLE_DB_PATH, DEFAULT_TRANSLATION, VERSE_ID_SCHEME

from .reference_parser import split_references, ReferenceParseError
from .storage import VerseStore
from .validator import is_valid_reference, ReferenceValidationError
from .verse_fetcher import VerseFetcher, VerseNotFoundError
from .verse_ids import VerseIdScheme, get_scheme

logger = logging.getLogger(__name__)

# Separator between the texts of a multi-segment citation
SEGMENT_SEPARATOR = "\n\n"


@dataclass
class Passage:
    """
    Resolved text for one citation.

    Attributes:
        reference: The citation as requested
        segments: Canonical single-chapter segments it was split into
        text: Resolved text, segments joined by blank lines
        translation: Translation the text came from
        missing: Segments that could not be resolved
    """
    reference: str
    segments: list[str]
    text: str
    translation: str
    missing: list[str] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return not self.missing

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "ref": self.reference,
            "segments": self.segments,
            "text": self.text,
            "translation": self.translation,
            "missing": self.missing,
            "complete": self.is_complete,
        }


class ReferenceService:
    """
    Resolves scripture citations against the verse store.

    Usage:
        service = ReferenceService()

        text = service.get_verse_by_reference("Matthew 5:1-7:29")
        texts = service.get_verses_by_references(["John 3:16", "Psalm 23"])
        valid, reason = service.is_valid_reference("Genesis 1:")
    """

    def __init__(
        self,
        store: Optional[VerseStore] = None,
        scheme: Optional[VerseIdScheme] = None,
        translation: Optional[str] = None,
    ):
        self.translation = translation or DEFAULT_TRANSLATION
        self.store = store or VerseStore(BIBLE_DB_PATH, translation=self.translation)
        self.scheme = scheme or get_scheme(VERSE_ID_SCHEME)
        self.fetcher = VerseFetcher(self.store, self.scheme)

    def get_verse_by_reference(
        self,
        reference: str,
        cancel: Optional[threading.Event] = None,
    ) -> str:
        """
        Get the full text for one citation.

        Args:
            reference: e.g. "John 3:16", "Psalm 23", "Matthew 5:1-7:29"
            cancel: Optional event that aborts pending store queries

        Returns:
            Verse text; multi-segment citations are joined by blank lines

        Raises:
            VerseNotFoundError: If no segment could be resolved
        """
        logger.info(f"Getting verse content for reference: {reference}")
        segments = split_references(reference)
        logger.debug(f"Split reference into {len(segments)} parts")

        if len(segments) == 1 and segments[0] == reference:
            try:
                return self.fetcher.fetch_one(reference, cancel=cancel)
            except ReferenceParseError as e:
                raise VerseNotFoundError(f"failed to get verse content for {reference}: {e}") from e

        texts = self._resolve(segments, cancel)
        if not texts:
            raise VerseNotFoundError(f"failed to get any verse content for reference {reference}")
        return SEGMENT_SEPARATOR.join(texts)

    def get_verses_by_references(
        self,
        references: list[str],
        cancel: Optional[threading.Event] = None,
    ) -> dict[str, str]:
        """
        Get text for many citations with a single batch lookup.

        Returns:
            Mapping of citation -> text. Citations with nothing resolved
            are absent; that is not an error.
        """
        split = {reference: split_references(reference) for reference in references}
        all_segments = []
        for segments in split.values():
            for segment in segments:
                if segment not in all_segments:
                    all_segments.append(segment)

        resolved = self.fetcher.fetch_many(all_segments, cancel=cancel)

        result = {}
        for reference, segments in split.items():
            texts = [resolved[s] for s in segments if s in resolved]
            if texts:
                result[reference] = SEGMENT_SEPARATOR.join(texts)
            else:
                logger.debug(f"No verse content resolved for '{reference}'")
        return result

    def is_valid_reference(self, reference: str) -> tuple[bool, Optional[str]]:
        """Return (valid, reason) for a citation."""
        return is_valid_reference(reference)

    def split(self, reference: str) -> list[str]:
        """Return the canonical segments for a citation."""
        return split_references(reference)

    def lookup(
        self,
        reference: str,
        cancel: Optional[threading.Event] = None,
    ) -> Passage:
        """
        Validate and resolve a citation into a Passage.

        Raises:
            ReferenceValidationError: If the citation is malformed
            VerseNotFoundError: If no segment could be resolved
        """
        valid, reason = is_valid_reference(reference)
        if not valid:
            raise ReferenceValidationError(reference, reason)

        segments = split_references(reference)
        resolved = self.fetcher.fetch_many(segments, cancel=cancel)
        texts = [resolved[s] for s in segments if s in resolved]
        if not texts:
            raise VerseNotFoundError(f"failed to get any verse content for reference {reference}")

        return Passage(
            reference=reference,
            segments=segments,
            text=SEGMENT_SEPARATOR.join(texts),
            translation=self.translation,
            missing=[s for s in segments if s not in resolved],
        )

    def _resolve(self, segments: list[str], cancel: Optional[threading.Event]) -> list[str]:
        resolved = self.fetcher.fetch_many(segments, cancel=cancel)
        return [resolved[s] for s in segments if s in resolved]
