from fastapi import APIRouter, FastAPI

from bits_web_api.routes.base import router as base_router
from bits_web_api.routes.buildpack_cache import router as buildpack_cache_router
from bits_web_api.routes.buildpacks import router as buildpacks_router
from bits_web_api.routes.droplets import router as droplets_router
from bits_web_api.routes.packages import router as packages_router
from bits_web_api.routes.sign import router as sign_router

api_router = APIRouter()

api_router.include_router(base_router, tags=["基础"])
api_router.include_router(sign_router, tags=["签名"])
api_router.include_router(buildpacks_router, prefix="/buildpacks", tags=["Buildpack"])
api_router.include_router(droplets_router, prefix="/droplets", tags=["Droplet"])
api_router.include_router(packages_router, prefix="/packages", tags=["Package"])
api_router.include_router(buildpack_cache_router, prefix="/buildpack_cache", tags=["Buildpack 缓存"])


def register_routes(app: FastAPI) -> None:
    """注册所有 API 路由"""
    app.include_router(api_router)


__all__ = ["api_router", "register_routes"]
