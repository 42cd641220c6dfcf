"""Repository for company_profiles and the person_profiles that reference them.

Bulk statements used by company unification are written as raw SQL (the
JSONB path update has no tidy ORM spelling). All ids cross this boundary as
strings, matching how person_profiles store metadata->>'company_id'.
"""

import uuid
from collections.abc import Sequence
from typing import Any

from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from quest.models.company import CompanyProfile, PersonProfile

# Arbitrary but stable key for pg_advisory_xact_lock: one unification
# apply-run at a time per database.
UNIFICATION_LOCK_KEY = 7_204_311

_LIKE_ESCAPE = "\\"


def _escape_like(value: str) -> str:
    """Escape LIKE wildcards so user input matches literally."""
    return (
        value.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", f"{_LIKE_ESCAPE}%")
        .replace("_", f"{_LIKE_ESCAPE}_")
    )


def _to_uuid(value: str) -> uuid.UUID | None:
    try:
        return uuid.UUID(value)
    except ValueError:
        return None


class CompanyRepository:
    """Stateless repository for company table operations.

    All methods are static. Pass an AsyncSession for every call so the
    caller controls transaction boundaries.
    """

    @staticmethod
    async def list_ordered_by_name(db: AsyncSession) -> Sequence[CompanyProfile]:
        """Fetch every company, ordered by name ascending.

        The ordering decides which member of a duplicate group becomes
        canonical, so it must stay a plain ``ORDER BY name``.
        """
        result = await db.execute(select(CompanyProfile).order_by(CompanyProfile.name))
        return result.scalars().all()

    @staticmethod
    async def list_page(
        db: AsyncSession, *, offset: int, limit: int
    ) -> tuple[Sequence[CompanyProfile], int]:
        """Fetch one page of companies ordered by name, plus the total count."""
        total = await db.scalar(select(func.count()).select_from(CompanyProfile))
        result = await db.execute(
            select(CompanyProfile)
            .order_by(CompanyProfile.name, CompanyProfile.id)
            .offset(offset)
            .limit(limit)
        )
        return result.scalars().all(), total or 0

    @staticmethod
    async def get_by_id(db: AsyncSession, company_id: str) -> CompanyProfile | None:
        """Fetch a company by id.

        Returns None for unknown ids and for strings that are not UUIDs.
        """
        parsed = _to_uuid(company_id)
        if parsed is None:
            return None
        return await db.get(CompanyProfile, parsed)

    @staticmethod
    async def get_by_domain(db: AsyncSession, domain: str) -> CompanyProfile | None:
        """Fetch the first company whose metadata domain matches exactly."""
        stmt = (
            select(CompanyProfile)
            .where(CompanyProfile.metadata_["domain"].astext == domain)
            .order_by(CompanyProfile.created_at)
            .limit(1)
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def search_by_name(
        db: AsyncSession, query: str, *, limit: int
    ) -> Sequence[CompanyProfile]:
        """Case-insensitive substring search on company name."""
        pattern = f"%{_escape_like(query)}%"
        stmt = (
            select(CompanyProfile)
            .where(CompanyProfile.name.ilike(pattern, escape=_LIKE_ESCAPE))
            .order_by(CompanyProfile.name)
            .limit(limit)
        )
        result = await db.execute(stmt)
        return result.scalars().all()

    @staticmethod
    async def create(
        db: AsyncSession, *, name: str, metadata: dict[str, Any]
    ) -> CompanyProfile:
        """Insert a company and return it with server defaults populated."""
        company = CompanyProfile(name=name, metadata_=metadata)
        db.add(company)
        await db.flush()
        await db.refresh(company)
        return company

    @staticmethod
    async def count_members(db: AsyncSession, company_id: str) -> int:
        """Count person profiles whose metadata.company_id is this company."""
        stmt = (
            select(func.count())
            .select_from(PersonProfile)
            .where(PersonProfile.metadata_["company_id"].astext == company_id)
        )
        return await db.scalar(stmt) or 0

    @staticmethod
    async def acquire_unification_lock(db: AsyncSession) -> None:
        """Serialize unification runs until the current transaction ends."""
        await db.execute(
            text("SELECT pg_advisory_xact_lock(:key)"),
            {"key": UNIFICATION_LOCK_KEY},
        )

    @staticmethod
    async def repoint_person_profiles(
        db: AsyncSession, canonical_id: str, duplicate_ids: list[str]
    ) -> int:
        """Point every person profile at canonical_id instead of a duplicate.

        Single batched UPDATE. Returns the number of profiles changed.
        """
        result = await db.execute(
            text(
                "UPDATE person_profiles "
                "SET metadata = jsonb_set(metadata, '{company_id}', "
                "to_jsonb(CAST(:cid AS text))), "
                "updated_at = now() "
                "WHERE metadata->>'company_id' = ANY(:dids)"
            ),
            {"cid": canonical_id, "dids": duplicate_ids},
        )
        return result.rowcount

    @staticmethod
    async def delete_by_ids(db: AsyncSession, company_ids: list[str]) -> int:
        """Delete companies by id in one statement. Returns rows deleted."""
        result = await db.execute(
            text("DELETE FROM company_profiles WHERE id = ANY(:ids)"),
            {"ids": [uuid.UUID(cid) for cid in company_ids]},
        )
        return result.rowcount
