"""Admin API router.

Company listing for the admin console. Write operations on companies go
through /company/unify.
"""

from fastapi import APIRouter

from quest.api.deps import DbSession, Pagination
from quest.api.routes.company import company_summary
from quest.core.responses import ListResponse, PaginationMeta
from quest.repositories.company_repository import CompanyRepository
from quest.schemas.company import CompanySummary

router = APIRouter()


@router.get("/companies")
async def list_companies(
    db: DbSession,
    pagination: Pagination,
) -> ListResponse[CompanySummary]:
    """List companies ordered by name, one page at a time."""
    rows, total = await CompanyRepository.list_page(
        db, offset=pagination.offset, limit=pagination.limit
    )
    return ListResponse(
        data=[company_summary(row) for row in rows],
        meta=PaginationMeta(
            total=total,
            page=pagination.page,
            per_page=pagination.per_page,
        ),
    )
