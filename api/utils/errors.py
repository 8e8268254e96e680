# api/utils/errors.py
"""
JSON error responses for the reference endpoints.

Every error body is {"error": "<code>", "detail": "<message>"} plus any
extra fields the caller passes. Codes are snake_case so clients can
branch on them without parsing the detail text.

Status mapping:
    400  request is missing a field or the citation is malformed
    404  citation is well formed but no verse text exists for it
    500  the verse store could not be queried
"""

from flask import jsonify


def error_response(code: str, status: int = 400, detail: str = None, **extra):
    """
    Build an error response tuple for a Flask view.

    Args:
        code: Machine-readable error code
        status: HTTP status code
        detail: Human-readable explanation, omitted when empty
        **extra: Additional fields merged into the body

    Returns:
        (response, status)
    """
    body = {"error": code}
    if detail:
        body["detail"] = detail
    body.update(extra)
    return jsonify(body), status


# 400
def missing_field(field: str):
    return error_response(f"{field}_required", 400, f"Missing required field: {field}")


def invalid_field(field: str, detail: str = None):
    return error_response(f"invalid_{field}", 400, detail)


def invalid_reference(ref: str, reason: str):
    """Citation failed validation; echoes the citation back."""
    return error_response("invalid_reference", 400, reason, ref=ref)


# 404
def verse_not_found(detail: str = None):
    return error_response("not_found", 404, detail or "verse not found")


# 500
def lookup_failed(detail: str = None):
    """The verse store raised while resolving a citation."""
    return error_response("lookup_failed", 500, detail)
