# routes/references_api.py
"""
API endpoints for scripture reference lookup and validation.

Provides access to:
- Passage lookup for a single citation
- Batch lookup for many citations
- Citation validation with rejection reasons
- Citation splitting into canonical segments
"""

import logging

from flask import Blueprint, request, jsonify

from services.references import (
    ReferenceService,
    ReferenceValidationError,
    VerseNotFoundError,
    VerseStoreError,
    is_valid_reference,
    split_references,
)
from utils.errors import (
    invalid_reference,
    verse_not_found,
    missing_field,
    invalid_field,
    lookup_failed,
)

logger = logging.getLogger(__name__)

references_bp = Blueprint("references_api", __name__, url_prefix="/api/references")

# Lazily initialized service instance
_service = None


def get_service() -> ReferenceService:
    """Get or create ReferenceService instance."""
    global _service
    if _service is None:
        _service = ReferenceService()
    return _service


# =============================================================================
# Lookup Endpoints
# =============================================================================

@references_bp.get("/lookup")
def lookup_reference():
    """
    Look up a scripture passage.

    Query params:
        ref: Reference string (required) e.g., "Matthew 5:1-7:29"

    Returns:
        {
            "ref": "John 3",
            "segments": ["John 3:1-176"],
            "text": "[1] There was a man ...",
            "translation": "kjv",
            "missing": [],
            "complete": true
        }
    """
    ref = request.args.get("ref")
    if not ref:
        return missing_field("ref")

    try:
        passage = get_service().lookup(ref)
        return jsonify(passage.to_dict())
    except ReferenceValidationError as e:
        return invalid_reference(ref, e.reason)
    except VerseNotFoundError as e:
        return verse_not_found(str(e))
    except VerseStoreError as e:
        logger.error(f"Verse store failure for {ref}: {e}")
        return lookup_failed(str(e))


@references_bp.post("/batch")
def batch_lookup():
    """
    Look up many citations at once.

    Request body:
        {
            "references": ["John 3:16", "Psalm 23", "NoSuchBook 1:1"]
        }

    Returns:
        {
            "results": {"John 3:16": "...", "Psalm 23": "..."},
            "missing": ["NoSuchBook 1:1"]
        }
    """
    data = request.get_json(silent=True) or {}
    references = data.get("references")

    if references is None:
        return missing_field("references")
    if not isinstance(references, list) or not all(isinstance(r, str) for r in references):
        return invalid_field("references", "references must be a list of strings")

    try:
        results = get_service().get_verses_by_references(references)
    except VerseStoreError as e:
        logger.error(f"Verse store failure during batch lookup: {e}")
        return lookup_failed(str(e))

    return jsonify({
        "results": results,
        "missing": [r for r in references if r not in results],
    })


# =============================================================================
# Parsing Endpoints
# =============================================================================

@references_bp.get("/validate")
def validate():
    """
    Validate a citation.

    Query params:
        ref: Reference string (required)

    Returns:
        {"ref": "Genesis 1:", "valid": false, "reason": "... (missing verse number)"}
    """
    ref = request.args.get("ref")
    if ref is None:
        return missing_field("ref")

    valid, reason = is_valid_reference(ref)
    return jsonify({"ref": ref, "valid": valid, "reason": reason})


@references_bp.get("/split")
def split():
    """
    Split a citation into canonical single-chapter segments.

    Query params:
        ref: Reference string (required)

    Returns:
        {"ref": "Matthew 5:1-7:29", "segments": ["Matthew 5:1-176", ...]}
    """
    ref = request.args.get("ref")
    if not ref:
        return missing_field("ref")

    return jsonify({"ref": ref, "segments": split_references(ref)})
