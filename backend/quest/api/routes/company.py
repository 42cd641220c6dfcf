"""Company API router.

- POST /company/unify: find (dry run) or merge near-duplicate companies
- GET  /company/unify: usage document
- GET  /company/search: name search
- POST /company/create-simple: register a company by name + website
- GET  /company/{company_id}: company detail with member count

Static paths are declared before /{company_id} so they are not captured by it.
"""

from typing import Annotated

from fastapi import APIRouter, Query, Request, Response, status

from quest.api.deps import DbSession
from quest.core.config import settings
from quest.core.errors import NotFoundError
from quest.core.rate_limiting import limiter
from quest.core.responses import DataResponse
from quest.models.company import CompanyProfile
from quest.repositories.company_repository import CompanyRepository
from quest.schemas.company import (
    CompanyCreateRequest,
    CompanyCreateResponse,
    CompanyDetail,
    CompanySummary,
    UnifyApplyResponse,
    UnifyDryRunResponse,
    UnifyDuplicateGroup,
    UnifyRequest,
    UnifyUsageResponse,
    UnifyVariant,
)
from quest.services.company_registration import register_company
from quest.services.company_unification import run_unification

router = APIRouter()

_MIN_SEARCH_LENGTH = 2
_DEFAULT_SEARCH_LIMIT = 10
_MAX_SEARCH_LIMIT = 50

SearchQuery = Annotated[
    str,
    Query(max_length=255, description="Substring of the company name"),
]
SearchLimit = Annotated[
    int,
    Query(ge=1, le=_MAX_SEARCH_LIMIT, description="Maximum results"),
]


def company_summary(row: CompanyProfile) -> CompanySummary:
    """Build CompanySummary from ORM row, lifting known metadata keys."""
    meta = row.metadata_ or {}
    return CompanySummary(
        id=str(row.id),
        name=row.name,
        domain=meta.get("domain"),
        website=meta.get("website"),
        logo_url=meta.get("logo_url"),
        headquarters=meta.get("headquarters"),
        description=meta.get("description"),
    )


# =============================================================================
# Unification
# =============================================================================


@router.post("/unify")
@limiter.limit(lambda: settings.rate_limit_unify)
async def unify_companies(
    request: Request,  # noqa: ARG001 - required by slowapi
    db: DbSession,
    body: UnifyRequest | None = None,
) -> UnifyDryRunResponse | UnifyApplyResponse:
    """Find near-duplicate companies and, unless dryRun, merge them.

    The whole run shares the request transaction: any failure rolls back
    every group merged so far.
    """
    dry_run = body.dry_run if body is not None else True
    result = await run_unification(db, dry_run=dry_run)

    if dry_run:
        return UnifyDryRunResponse(
            message="Company unification analysis (dry run)",
            duplicates_found=result.duplicates_found,
            duplicates=[
                UnifyDuplicateGroup(
                    canonical_name=merge.canonical_name,
                    variants=[
                        UnifyVariant(
                            id=member.record.id,
                            name=member.record.name,
                            similarity=member.similarity,
                        )
                        for member in merge.members
                    ],
                    recommended=merge.recommended,
                )
                for merge in result.merges
            ],
        )

    return UnifyApplyResponse(
        message="Company unification completed",
        groups_merged=result.groups_merged,
        total_duplicates_resolved=result.total_duplicates_resolved,
    )


@router.get("/unify")
async def unify_usage() -> UnifyUsageResponse:
    """Describe the unification endpoint. No side effects."""
    return UnifyUsageResponse(
        message="Company Unification API",
        usage='POST /api/company/unify with {"dryRun": true} to analyze duplicates',
        description=(
            "Finds and merges duplicate company records using name similarity"
        ),
    )


# =============================================================================
# Search and registration
# =============================================================================


@router.get("/search")
async def search_companies(
    db: DbSession,
    query: SearchQuery = "",
    limit: SearchLimit = _DEFAULT_SEARCH_LIMIT,
) -> DataResponse[list[CompanySummary]]:
    """Case-insensitive name search. Queries under 2 characters match nothing."""
    query = query.strip()
    if len(query) < _MIN_SEARCH_LENGTH:
        return DataResponse(data=[])

    rows = await CompanyRepository.search_by_name(db, query, limit=limit)
    return DataResponse(data=[company_summary(row) for row in rows])


@router.post("/create-simple")
async def create_company(
    db: DbSession,
    body: CompanyCreateRequest,
    response: Response,
) -> CompanyCreateResponse:
    """Register a company by website domain (201), or return the known one (200)."""
    result = await register_company(
        db, name=body.name, website=body.website, country=body.country
    )
    if not result.created:
        return CompanyCreateResponse(
            data=company_summary(result.company),
            message="Company already exists in our database",
        )

    await db.commit()
    response.status_code = status.HTTP_201_CREATED
    return CompanyCreateResponse(
        data=company_summary(result.company),
        message="Company profile created successfully",
    )


# =============================================================================
# Detail
# =============================================================================


@router.get("/{company_id}")
async def get_company(
    db: DbSession,
    company_id: str,
) -> DataResponse[CompanyDetail]:
    """Fetch one company with the number of people who work there."""
    company = await CompanyRepository.get_by_id(db, company_id)
    if company is None:
        raise NotFoundError("Company", company_id)

    member_count = await CompanyRepository.count_members(db, str(company.id))
    summary = company_summary(company)
    return DataResponse(
        data=CompanyDetail(
            **summary.model_dump(),
            metadata=company.metadata_ or {},
            member_count=member_count,
            created_at=company.created_at,
            updated_at=company.updated_at,
        )
    )
