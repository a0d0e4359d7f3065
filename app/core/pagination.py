"""Pagination helpers."""

from app.core.exceptions import InputValidationError


def validate_page(limit: int, offset: int, max_limit: int = 100) -> tuple[int, int]:
    """Check limit/offset bounds; return (limit, offset).

    Out-of-range values are rejected rather than clamped so callers see the mistake.
    """
    if limit < 1 or limit > max_limit:
        raise InputValidationError(
            f"limit must be between 1 and {max_limit}",
            details={"limit": limit},
        )
    if offset < 0:
        raise InputValidationError("offset must be non-negative", details={"offset": offset})
    return limit, offset
