"""Tests for manual company registration."""

import uuid
from unittest.mock import AsyncMock, patch

import pytest

from quest.core.errors import ValidationError
from quest.models.company import CompanyProfile
from quest.repositories.company_repository import CompanyRepository
from quest.services.company_registration import (
    country_name,
    normalize_website,
    register_company,
)


class TestNormalizeWebsite:
    """Scheme handling and domain extraction."""

    @pytest.mark.parametrize(
        ("website", "expected"),
        [
            ("acme.com", ("https://acme.com", "acme.com")),
            ("  acme.com/about ", ("https://acme.com/about", "acme.com")),
            ("http://Acme.com", ("http://Acme.com", "acme.com")),
            ("HTTPS://www.acme.co.uk", ("HTTPS://www.acme.co.uk", "www.acme.co.uk")),
        ],
    )
    def test_normalizes(self, website: str, expected: tuple[str, str]) -> None:
        assert normalize_website(website) == expected

    @pytest.mark.parametrize("website", ["", "   ", "https://", "http:///path"])
    def test_rejects_missing_host(self, website: str) -> None:
        with pytest.raises(ValidationError) as exc_info:
            normalize_website(website)

        assert exc_info.value.status_code == 400
        assert exc_info.value.details == [{"field": "website", "value": website}]


class TestCountryName:
    """ISO codes map to country names for headquarters."""

    @pytest.mark.parametrize(
        ("code", "expected"),
        [("CA", "Canada"), (" de ", "Germany"), ("USA", "United States")],
    )
    def test_known_codes(self, code: str, expected: str) -> None:
        assert country_name(code) == expected

    @pytest.mark.parametrize("code", ["XX", "ZZZ", "Canada", ""])
    def test_unknown_codes(self, code: str) -> None:
        assert country_name(code) is None


class TestRegisterCompany:
    """Domain lookup then insert."""

    async def test_returns_existing_company_for_known_domain(self) -> None:
        db = AsyncMock()
        existing = CompanyProfile(id=uuid.uuid4(), name="Acme", metadata_={})
        create = AsyncMock()

        with (
            patch.object(
                CompanyRepository,
                "get_by_domain",
                new=AsyncMock(return_value=existing),
            ) as get_by_domain,
            patch.object(CompanyRepository, "create", new=create),
        ):
            result = await register_company(db, name="Acme Corp", website="acme.com")

        assert result.company is existing
        assert result.created is False
        get_by_domain.assert_awaited_once_with(db, "acme.com")
        create.assert_not_awaited()

    async def test_creates_company_with_metadata(self) -> None:
        db = AsyncMock()
        created = CompanyProfile(id=uuid.uuid4(), name="Acme", metadata_={})
        create = AsyncMock(return_value=created)

        with (
            patch.object(
                CompanyRepository, "get_by_domain", new=AsyncMock(return_value=None)
            ),
            patch.object(CompanyRepository, "create", new=create),
        ):
            result = await register_company(
                db, name="Acme", website="acme.com", country="ca"
            )

        assert result.created is True
        assert result.company is created
        create.assert_awaited_once_with(
            db,
            name="Acme",
            metadata={
                "domain": "acme.com",
                "website": "https://acme.com",
                "logo_url": "https://www.google.com/s2/favicons?domain=acme.com&sz=128",
                "description": "Acme company profile",
                "enrichment_sources": ["manual"],
                "headquarters": "Canada",
            },
        )

    async def test_omits_headquarters_for_unknown_country(self) -> None:
        create = AsyncMock()

        with (
            patch.object(
                CompanyRepository, "get_by_domain", new=AsyncMock(return_value=None)
            ),
            patch.object(CompanyRepository, "create", new=create),
        ):
            await register_company(
                AsyncMock(), name="Acme", website="acme.com", country="XX"
            )

        assert "headquarters" not in create.await_args.kwargs["metadata"]

    async def test_omits_headquarters_without_country(self) -> None:
        create = AsyncMock()

        with (
            patch.object(
                CompanyRepository, "get_by_domain", new=AsyncMock(return_value=None)
            ),
            patch.object(CompanyRepository, "create", new=create),
        ):
            await register_company(AsyncMock(), name="Acme", website="acme.com")

        assert "headquarters" not in create.await_args.kwargs["metadata"]

    async def test_invalid_website_never_queries(self) -> None:
        get_by_domain = AsyncMock()

        with (
            patch.object(CompanyRepository, "get_by_domain", new=get_by_domain),
            pytest.raises(ValidationError),
        ):
            await register_company(AsyncMock(), name="Acme", website="https://")

        get_by_domain.assert_not_awaited()
