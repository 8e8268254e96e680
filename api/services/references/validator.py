# api/services/references/validator.py
"""
Reference validation.

References produced by untrusted generators (LLM plan content, user input)
are split exactly as the lookup path splits them, then every segment must
look like "Book Chapter:Verse" or "Book Chapter:StartVerse-EndVerse".
Failures come with a specific, stable reason string that can be shown to
a user or fed back into a regeneration prompt.
"""

import re
from typing import Iterable, Mapping, Optional

from .reference_parser import split_reference, split_references


# Book part needs at least one letter; numbered and multi-word names allowed.
VALID_SEGMENT_RE = re.compile(r"^([1-3]?\s*[A-Za-z]+(?:\s+[A-Za-z]+)*)\s+(\d+):(\d+)(?:-(\d+))?$")


class ReferenceValidationError(ValueError):
    """A reference failed validation. Carries the reason string."""

    def __init__(self, reference: str, reason: str):
        super().__init__(reason)
        self.reference = reference
        self.reason = reason


def _check_segment(segment: str) -> Optional[str]:
    """Return the rejection reason for one segment, or None if it is fine."""
    match = VALID_SEGMENT_RE.match(segment)
    if not match:
        if ":" not in segment and len(segment.split()) == 1:
            return f"reference part '{segment}' is incomplete (missing chapter/verse)"
        if segment.endswith(":") or segment.endswith("-"):
            return f"reference part '{segment}' is incomplete (missing verse number)"
        return (
            f"reference part '{segment}' does not match expected format "
            f"'Book Chapter:Verse' or 'Book Chapter:StartVerse-EndVerse'"
        )

    if match.group(4) is not None:
        start_verse, end_verse = int(match.group(3)), int(match.group(4))
        if start_verse > end_verse:
            return (
                f"reference part '{segment}' has start verse ({start_verse}) "
                f"greater than end verse ({end_verse})"
            )

    return None


def is_valid_reference(reference: str) -> tuple[bool, Optional[str]]:
    """
    Check whether a reference can be resolved into well-formed segments.

    The splitter drops empty comma pieces so lookups of "John 3:16," still
    succeed, but here a blank piece is reported with the generic format
    reason.

    Args:
        reference: Raw reference, e.g. "Matthew 5:1-7:29"

    Returns:
        (True, None) when every segment is well formed, otherwise
        (False, reason) for the first failing segment.
    """
    if not split_references(reference):
        return False, f"reference '{reference}' resulted in an empty split, likely invalid input"

    for part in reference.split(","):
        if not part.strip():
            return False, _check_segment("")
        for segment in split_reference(part):
            reason = _check_segment(segment.strip())
            if reason:
                return False, reason

    return True, None


def validate_reference(reference: str) -> list[str]:
    """
    Validate a reference and return its canonical segments.

    Raises:
        ReferenceValidationError: With the rejection reason
    """
    valid, reason = is_valid_reference(reference)
    if not valid:
        raise ReferenceValidationError(reference, reason)
    return split_references(reference)


# -----------------------------------------------------------------------------
# Plan content
# -----------------------------------------------------------------------------

def collect_invalid_references(entries: Iterable[Mapping]) -> dict[str, str]:
    """
    Validate the references of generated reading-plan entries.

    Each entry is a mapping with a "reference" field that may hold several
    comma-separated references.

    Returns:
        Mapping of offending reference (or "Day N" for empty entries) to
        its rejection reason. Empty when everything is valid.
    """
    invalid = {}
    for day, entry in enumerate(entries, start=1):
        reference = (entry.get("reference") or "").strip()
        if not reference:
            invalid[f"Day {day}"] = "reference field is empty"
            continue

        for part in reference.split(","):
            part = part.strip()
            if not part:
                continue
            valid, reason = is_valid_reference(part)
            if not valid:
                invalid[part] = reason

    return invalid


def build_feedback(invalid: Mapping[str, str]) -> str:
    """Build correction text for a plan regeneration prompt."""
    if not invalid:
        return ""

    lines = [
        "",
        "",
        "The previous plan contained invalid or incorrectly formatted references. "
        "Please correct the following:",
    ]
    for reference, reason in invalid.items():
        lines.append(f"- '{reference}': {reason}")
    lines.append(
        "Ensure all references strictly follow the required formats "
        "('Book Ch:V' or 'Book Ch:V-V') and are complete."
    )
    return "\n".join(lines)
