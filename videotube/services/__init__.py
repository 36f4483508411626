"""Business logic services."""

from videotube.services.aggregation import AggregationService, get_aggregation_service
from videotube.services.media import CloudinaryMediaStore, MediaAsset, MediaStore

__all__ = [
    "AggregationService",
    "get_aggregation_service",
    "CloudinaryMediaStore",
    "MediaAsset",
    "MediaStore",
]
