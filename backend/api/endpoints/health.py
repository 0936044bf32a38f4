from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse, PlainTextResponse

from core import database
from core.config import Settings
from dependencies import get_app_settings

router = APIRouter(tags=["health"])


@router.get("/", response_class=PlainTextResponse)
async def root(settings: Settings = Depends(get_app_settings)):
    return f"{settings.PROJECT_NAME} API Server - v{settings.VERSION}"


@router.get("/health")
async def health():
    healthy = await database.is_healthy()
    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "ok" if healthy else "error",
            "database": "connected" if healthy else "disconnected",
        }
    )
