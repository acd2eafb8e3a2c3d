"""Input validation and sanitization helpers shared by the services."""

from fastapi import HTTPException, status

# Order matters: "&" first so the other entities are not double-escaped
_HTML_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#x27;"),
)


def sanitize_input(value: str) -> str:
    """Escape HTML-significant characters before storage."""
    for char, entity in _HTML_ESCAPES:
        value = value.replace(char, entity)
    return value


def validate_length(value: str, min_length: int, max_length: int, field: str) -> str:
    """Trim a string and check its length, returning the trimmed value.

    Raises:
        HTTPException(400) if the trimmed length is outside [min_length, max_length]
    """
    trimmed = value.strip()
    if len(trimmed) < min_length or len(trimmed) > max_length:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{field} must be {min_length}-{max_length} characters",
        )
    return trimmed


def clamp_limit(limit: int, ceiling: int, floor: int = 1) -> int:
    """Clamp a caller-supplied page size into [floor, ceiling]."""
    return max(floor, min(limit, ceiling))
