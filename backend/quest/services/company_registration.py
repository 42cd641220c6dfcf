"""Manual company registration.

A user who cannot find their employer in search registers it by name and
website. Companies are keyed by web domain: registering a domain that already
exists returns the existing company instead of creating a near-duplicate.
"""

import logging
from dataclasses import dataclass
from urllib.parse import urlsplit

import pycountry
from sqlalchemy.ext.asyncio import AsyncSession

from quest.core.errors import ValidationError
from quest.models.company import CompanyProfile
from quest.repositories.company_repository import CompanyRepository

logger = logging.getLogger(__name__)

_FAVICON_URL = "https://www.google.com/s2/favicons?domain={domain}&sz=128"


@dataclass
class RegistrationResult:
    """Company returned by register_company and whether it is new."""

    company: CompanyProfile
    created: bool


def country_name(code: str) -> str | None:
    """Map an ISO 3166 alpha-2 or alpha-3 code to the country's name.

    Returns None for unknown codes.
    """
    code = code.strip().upper()
    if len(code) == 2:
        country = pycountry.countries.get(alpha_2=code)
    elif len(code) == 3:
        country = pycountry.countries.get(alpha_3=code)
    else:
        return None
    return country.name if country else None


def normalize_website(website: str) -> tuple[str, str]:
    """Return (url, domain) for a user-typed website.

    Adds an ``https://`` scheme when none is given.

    Raises:
        ValidationError: If no host name can be extracted.
    """
    url = website.strip()
    if not url.lower().startswith(("http://", "https://")):
        url = f"https://{url}"

    try:
        host = urlsplit(url).hostname
    except ValueError:
        host = None
    if not host:
        raise ValidationError(
            "Invalid website URL",
            details=[{"field": "website", "value": website}],
        )
    return url, host


async def register_company(
    db: AsyncSession,
    *,
    name: str,
    website: str,
    country: str | None = None,
) -> RegistrationResult:
    """Create a company from a name and website, or return the existing one.

    Args:
        db: Active async session. Caller commits.
        name: Company display name.
        website: Website as typed by the user (scheme optional).
        country: Optional ISO country code of the headquarters. Unknown
            codes are dropped.

    Returns:
        RegistrationResult with created=False when the domain was known.
    """
    url, domain = normalize_website(website)

    existing = await CompanyRepository.get_by_domain(db, domain)
    if existing is not None:
        return RegistrationResult(company=existing, created=False)

    metadata = {
        "domain": domain,
        "website": url,
        "logo_url": _FAVICON_URL.format(domain=domain),
        "description": f"{name} company profile",
        "enrichment_sources": ["manual"],
    }
    headquarters = country_name(country) if country else None
    if headquarters:
        metadata["headquarters"] = headquarters

    company = await CompanyRepository.create(db, name=name, metadata=metadata)
    logger.info("Registered company %s (%s)", name, domain)
    return RegistrationResult(company=company, created=True)
