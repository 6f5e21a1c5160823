"""基础接口"""

from datetime import datetime

from fastapi import APIRouter

from bits_web_api.deps import AppSettings
from bits_web_api.schemas import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse, summary="健康检查")
async def health_check(app_settings: AppSettings):
    return HealthResponse(
        status="healthy",
        version=app_settings.APP_VERSION,
        timestamp=datetime.now().isoformat(),
    )
