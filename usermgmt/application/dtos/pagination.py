"""Pagination envelope shared by every list operation."""

import math
from dataclasses import asdict, dataclass, is_dataclass
from typing import Any

from usermgmt.domain.exceptions import ValidationException

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10


def validate_page_args(page: int, limit: int) -> None:
    """Reject page < 1 or limit < 1 (offset math would go negative or divide by zero)."""
    if page < 1:
        raise ValidationException("page must be >= 1", field="page")
    if limit < 1:
        raise ValidationException("limit must be >= 1", field="limit")


def page_offset(page: int, limit: int) -> int:
    """Rows to skip for a 1-based page."""
    return (page - 1) * limit


def page_count(total: int, limit: int) -> int:
    """Number of pages needed for total rows: ceil(total / limit)."""
    return math.ceil(total / limit)


@dataclass(frozen=True)
class Pagination:
    page: int
    limit: int
    total: int
    pages: int


@dataclass(frozen=True)
class Page[ItemT]:
    """One page of items plus the pagination block."""

    items: list[ItemT]
    pagination: Pagination

    @classmethod
    def build(cls, items: list[ItemT], *, page: int, limit: int, total: int) -> "Page[ItemT]":
        return cls(
            items=items,
            pagination=Pagination(
                page=page, limit=limit, total=total, pages=page_count(total, limit)
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        """Envelope form: {"items": [...], "pagination": {page, limit, total, pages}}."""
        return {
            "items": [asdict(i) if is_dataclass(i) else i for i in self.items],
            "pagination": asdict(self.pagination),
        }
