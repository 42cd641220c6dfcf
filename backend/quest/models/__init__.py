"""SQLAlchemy ORM models for Quest.

All models are exported from this module for convenient imports:
    from quest.models import CompanyProfile, PersonProfile

- base.py: Base, TimestampMixin
- company.py: CompanyProfile, PersonProfile
"""

from quest.models.base import Base
from quest.models.company import CompanyProfile, PersonProfile

__all__ = [
    "Base",
    "CompanyProfile",
    "PersonProfile",
]
