"""Shared dependencies for API endpoints.

Authentication happens upstream (the auth vendor fronts every request), so
endpoints only need a database session.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from quest.core.database import get_db
from quest.core.pagination import PaginationParams, pagination_params

DbSession = Annotated[AsyncSession, Depends(get_db)]
Pagination = Annotated[PaginationParams, Depends(pagination_params)]
