"""
Healthcheck endpoint under the API prefix.

The infrastructure probe with a database check is ``GET /health`` in
videotube.main.
"""

from fastapi import APIRouter

from videotube.schemas.common import ApiResponse, ok

router = APIRouter(prefix="/healthcheck", tags=["health"])


@router.get("", response_model=ApiResponse[dict])
async def healthcheck():
    return ok({"status": "OK"}, "Service is healthy")
