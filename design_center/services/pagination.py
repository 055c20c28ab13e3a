from __future__ import annotations

from ..domain.pagination import PaginationMeta, PaginationParams


def build_pagination_meta(params: PaginationParams, *, total: int, count: int) -> PaginationMeta:
    """Describe one page of a query that matched ``total`` rows and returned ``count``."""

    end = params.offset + count
    next_offset = end if end < total else None
    return PaginationMeta(
        limit=params.limit,
        offset=params.offset,
        count=count,
        total=total,
        has_more=next_offset is not None,
        next_offset=next_offset,
    )
