"""Pydantic request/response schemas for API endpoints."""

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

__all__ = [
    # Company resources
    "CompanyCreateRequest",
    "CompanyCreateResponse",
    "CompanyDetail",
    "CompanySummary",
    # Unification
    "UnifyApplyResponse",
    "UnifyDryRunResponse",
    "UnifyDuplicateGroup",
    "UnifyRequest",
    "UnifyUsageResponse",
    "UnifyVariant",
]
