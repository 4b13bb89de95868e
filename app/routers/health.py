from fastapi import APIRouter, Depends

from app.core.config import Settings
from app.db.migrate import get_schema_version
from app.routers.deps import get_app_settings

router = APIRouter(tags=["health"])


@router.get("/health", summary="Liveness and schema check")
async def health(settings: Settings = Depends(get_app_settings)):
    return {
        "status": "ok",
        "version": settings.version,
        "schema_version": get_schema_version(settings.db_path),
        "rate_provider": settings.exchange_rate_provider,
    }
