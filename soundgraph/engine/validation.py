"""Input checks shared by engine components. All run before any storage call."""
import uuid
from typing import Any

from soundgraph.engine.errors import InvalidArgument

# Largest OFFSET / LIMIT a signed BIGINT column can carry
MAX_OFFSET = 2**63 - 1
DEFAULT_MAX_PAGE_SIZE = 100


def require_id(value: Any, field: str = "id") -> str:
    """Return `value` in canonical UUID form or raise InvalidArgument."""
    if not isinstance(value, str):
        raise InvalidArgument(f"Invalid {field}!")
    try:
        return str(uuid.UUID(value))
    except ValueError:
        raise InvalidArgument(f"Invalid {field}!") from None


def require_non_negative_int(value: Any, field: str) -> int:
    # bool is an int subclass; True/False as a page size is a caller bug
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgument(f"{field} must be an integer, got {value!r}")
    if value < 0:
        raise InvalidArgument(f"{field} must be non-negative, got {value}")
    return value


def page_window(
    limit: Any, page_number: Any, max_limit: int = DEFAULT_MAX_PAGE_SIZE
) -> tuple[int, int]:
    """Validate pagination input and return (skip, limit)."""
    limit = require_non_negative_int(limit, "limit")
    page_number = require_non_negative_int(page_number, "page_number")
    if limit > max_limit:
        raise InvalidArgument(f"limit must be at most {max_limit}, got {limit}")

    skip = page_number * limit
    if page_number > MAX_OFFSET or skip > MAX_OFFSET:
        raise InvalidArgument(f"page_number {page_number} is out of range")
    return skip, limit
