"""Pagination helpers for list endpoints.

Query parameters: page (1-indexed, default 1) and per_page (default 20,
capped at 100 so an admin listing can never pull the whole company table
in one response).
"""

from dataclasses import dataclass

from fastapi import Query

DEFAULT_PER_PAGE = 20
MAX_PER_PAGE = 100


@dataclass(frozen=True)
class PaginationParams:
    """Validated page/per_page pair with SQL offset and limit helpers."""

    page: int
    per_page: int

    @property
    def offset(self) -> int:
        """Rows to skip before the requested page."""
        return (self.page - 1) * self.per_page

    @property
    def limit(self) -> int:
        """Rows in one page."""
        return self.per_page


def pagination_params(
    page: int = Query(default=1, ge=1, description="Page number (1-indexed)"),
    per_page: int = Query(
        default=DEFAULT_PER_PAGE,
        ge=1,
        le=MAX_PER_PAGE,
        description=f"Items per page (max {MAX_PER_PAGE})",
    ),
) -> PaginationParams:
    """FastAPI dependency for pagination query parameters.

    Usage:
        @router.get("/companies")
        async def list_companies(
            pagination: PaginationParams = Depends(pagination_params),
        ):
            ...

    Returns:
        PaginationParams with validated page and per_page.
    """
    return PaginationParams(page=page, per_page=per_page)
