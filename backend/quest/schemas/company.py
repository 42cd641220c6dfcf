"""Company API request/response schemas.

The unification endpoint keeps the camelCase body used by the admin UI
(dryRun, duplicatesFound, canonicalName, ...). Field names stay snake_case
in Python and are aliased on the wire.

All request schemas use ConfigDict(extra="forbid") to reject unexpected fields.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator
from pydantic.alias_generators import to_camel

_MAX_NAME_LENGTH = 255
_MAX_WEBSITE_LENGTH = 2048
_MAX_COUNTRY_LENGTH = 100

_CAMEL_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Unification
# =============================================================================


class UnifyRequest(BaseModel):
    """Body for POST /company/unify. An absent body means a dry run.

    dryRun must be a JSON boolean: strings such as "false" are rejected
    rather than coerced into an apply run.
    """

    model_config = ConfigDict(
        extra="forbid", alias_generator=to_camel, populate_by_name=True
    )

    dry_run: StrictBool = True


class UnifyVariant(BaseModel):
    """One member of a proposed duplicate group."""

    model_config = _CAMEL_CONFIG

    id: str
    name: str
    similarity: float


class UnifyDuplicateGroup(BaseModel):
    """A proposed merge: canonical name plus every variant."""

    model_config = _CAMEL_CONFIG

    canonical_name: str
    variants: list[UnifyVariant]
    recommended: Literal["merge", "keep"]


class UnifyDryRunResponse(BaseModel):
    """Dry-run report of duplicate groups."""

    model_config = _CAMEL_CONFIG

    message: str
    duplicates_found: int
    duplicates: list[UnifyDuplicateGroup]


class UnifyApplyResponse(BaseModel):
    """Summary of an applied unification."""

    model_config = _CAMEL_CONFIG

    message: str
    groups_merged: int
    total_duplicates_resolved: int


class UnifyUsageResponse(BaseModel):
    """Static usage document for GET /company/unify."""

    message: str
    usage: str
    description: str


# =============================================================================
# Company resources
# =============================================================================


class CompanySummary(BaseModel):
    """Company fields shown in lists, search results and create responses."""

    id: str
    name: str
    domain: str | None = None
    website: str | None = None
    logo_url: str | None = None
    headquarters: str | None = None
    description: str | None = None


class CompanyDetail(CompanySummary):
    """Single company with enrichment payload and member count."""

    metadata: dict[str, Any]
    member_count: int
    created_at: datetime
    updated_at: datetime


class CompanyCreateRequest(BaseModel):
    """Body for POST /company/create-simple."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=_MAX_NAME_LENGTH)
    website: str = Field(max_length=_MAX_WEBSITE_LENGTH)
    country: str | None = Field(default=None, max_length=_MAX_COUNTRY_LENGTH)

    @field_validator("name", "website")
    @classmethod
    def _require_non_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            msg = "must not be blank"
            raise ValueError(msg)
        return value


class CompanyCreateResponse(BaseModel):
    """Created (or already existing) company with a status message."""

    data: CompanySummary
    message: str
