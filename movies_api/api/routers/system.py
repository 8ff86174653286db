"""
System API endpoints (health).
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from movies_api.api.config import Settings, get_settings
from movies_api.api.dependencies import get_database_manager
from movies_api.database.connection import DatabaseManager

router = APIRouter(tags=["system"])


@router.get("/healthz")
def health_check(
    settings: Settings = Depends(get_settings),
    db_manager: DatabaseManager = Depends(get_database_manager),
):
    """Healthy only if the database answers within the health timeout."""
    if not db_manager.ping(timeout=settings.health_timeout_secs):
        return JSONResponse(status_code=503, content={"status": "unavailable"})
    return {"status": "ok"}
