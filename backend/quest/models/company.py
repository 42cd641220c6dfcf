"""Company and person profile models.

company_profiles rows are created by enrichment or manual entry and removed
when company unification absorbs them into a canonical row.

person_profiles reference a company only through the text value
metadata->>'company_id' (no foreign key constraint), so unification must
repoint them explicitly before deleting a duplicate company.
"""

import uuid
from typing import Any

from sqlalchemy import Index, String, Text, text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from quest.models.base import Base, TimestampMixin

_DEFAULT_UUID = text("gen_random_uuid()")
_DEFAULT_EMPTY_OBJECT = text("'{}'::jsonb")


class CompanyProfile(Base, TimestampMixin):
    """A company known to Quest.

    The ``metadata`` column holds enrichment output (domain, website,
    logo_url, headquarters, description, enrichment_sources, ...). The
    attribute is named ``metadata_`` because ``metadata`` is reserved on
    declarative classes.
    """

    __tablename__ = "company_profiles"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        server_default=_DEFAULT_UUID,
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    metadata_: Mapped[dict[str, Any]] = mapped_column(
        "metadata",
        JSONB,
        server_default=_DEFAULT_EMPTY_OBJECT,
        nullable=False,
    )

    __table_args__ = (
        Index("idx_company_profiles_name", "name"),
        Index(
            "idx_company_profiles_domain",
            text("(metadata->>'domain')"),
        ),
    )


class PersonProfile(Base, TimestampMixin):
    """A person's career profile.

    ``metadata_["company_id"]`` is the string form of the current employer's
    CompanyProfile id.
    """

    __tablename__ = "person_profiles"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        server_default=_DEFAULT_UUID,
    )
    full_name: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    metadata_: Mapped[dict[str, Any]] = mapped_column(
        "metadata",
        JSONB,
        server_default=_DEFAULT_EMPTY_OBJECT,
        nullable=False,
    )

    __table_args__ = (
        Index(
            "idx_person_profiles_company_id",
            text("(metadata->>'company_id')"),
        ),
    )
