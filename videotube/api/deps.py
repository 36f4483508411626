"""
Route-level dependencies shared by several routers.
"""

from typing import Annotated

from fastapi import Depends

from videotube.core.context import AppSettings
from videotube.db.deps import DBSession
from videotube.services.aggregation import AggregationService, get_aggregation_service


def get_aggregations(db: DBSession, settings: AppSettings) -> AggregationService:
    """Aggregation service bound to the request's session."""
    return get_aggregation_service(db, max_page_size=settings.PAGE_SIZE_MAX)


Aggregations = Annotated[AggregationService, Depends(get_aggregations)]
