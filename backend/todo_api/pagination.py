from __future__ import annotations

import math
from dataclasses import dataclass

DEFAULT_PAGE_SIZE = 10
# LIMIT/OFFSET are signed 64-bit in the database
MAX_PAGE_SIZE = 2**63 - 1


@dataclass(frozen=True)
class Page:
    total: int
    pages: int
    size: int
    number: int

    @property
    def offset(self) -> int:
        return (self.number - 1) * self.size


def _positive_int(raw: str | int | None) -> int | None:
    if raw is None:
        return None
    try:
        value = int(str(raw).strip())
    except ValueError:
        return None
    return value if value > 0 else None


def paginate(total: int, page: str | int | None, perpage: str | int | None) -> Page:
    """Resolve the requested page against ``total`` items.

    Bad, missing or out-of-range ``perpage`` means 10. A page past the end
    clamps to the last page, and anything that ends up as 0 (bad input, or no
    items at all) becomes page 1.
    """
    size = _positive_int(perpage)
    if not size or size > MAX_PAGE_SIZE:
        size = DEFAULT_PAGE_SIZE
    pages = math.ceil(total / size)
    requested = _positive_int(page)
    number = min(requested, pages) if requested else 0
    return Page(total=total, pages=pages, size=size, number=number or 1)
