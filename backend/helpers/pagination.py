"""
Pagination parameters shared by list endpoints.
"""

from typing import Annotated

from fastapi import Query

MAX_PAGE_SIZE = 100

PageNumber = Annotated[int, Query(ge=1, description="Page number, starting at 1")]
PageLimit = Annotated[
    int,
    Query(ge=1, le=MAX_PAGE_SIZE, description="Number of records per page"),
]


def page_to_offset(page: int, limit: int) -> int:
    """Translate a 1-based page into a row offset."""
    return (max(page, 1) - 1) * limit
