"""Buildpack 缓存接口

缓存条目按 app_guid/stack_name 存储，可按应用或全部批量删除。
"""

from fastapi import APIRouter, Path, Request, Response, status
from loguru import logger

from bits_core.infrastructure.storage import get_blobstore, partitioned_key
from bits_web_api.deps import AppSettings
from bits_web_api.routes.blobs import delete_blob, read_upload, store_blob, stream_blob
from bits_web_api.schemas import GUID_PATTERN, STACK_PATTERN, BlobResponse

RESOURCE = "buildpack_cache"

router = APIRouter()


def _entry_key(app_guid: str, stack_name: str) -> str:
    return partitioned_key(app_guid, stack_name)


@router.put(
    "/entries/{app_guid}/{stack_name}",
    status_code=status.HTTP_201_CREATED,
    response_model=BlobResponse,
)
async def upload_cache_entry(
    request: Request,
    app_settings: AppSettings,
    app_guid: str = Path(..., pattern=GUID_PATTERN),
    stack_name: str = Path(..., pattern=STACK_PATTERN),
):
    upload = await read_upload(request, RESOURCE)
    return await store_blob(
        app_settings, RESOURCE, _entry_key(app_guid, stack_name), f"{app_guid}/{stack_name}", upload
    )


@router.get("/entries/{app_guid}/{stack_name}")
async def download_cache_entry(
    app_settings: AppSettings,
    app_guid: str = Path(..., pattern=GUID_PATTERN),
    stack_name: str = Path(..., pattern=STACK_PATTERN),
):
    return await stream_blob(app_settings, RESOURCE, _entry_key(app_guid, stack_name), f"{app_guid}/{stack_name}")


@router.delete("/entries/{app_guid}/{stack_name}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_cache_entry(
    app_settings: AppSettings,
    app_guid: str = Path(..., pattern=GUID_PATTERN),
    stack_name: str = Path(..., pattern=STACK_PATTERN),
):
    return await delete_blob(app_settings, RESOURCE, _entry_key(app_guid, stack_name), f"{app_guid}/{stack_name}")


@router.delete("/entries/{app_guid}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_app_cache_entries(app_settings: AppSettings, app_guid: str = Path(..., pattern=GUID_PATTERN)):
    """删除应用的全部缓存条目"""
    deleted = await get_blobstore(RESOURCE, app_settings).delete_prefix(partitioned_key(app_guid))
    logger.info(f"已删除应用 {app_guid} 的 {deleted} 个缓存条目")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/entries", status_code=status.HTTP_204_NO_CONTENT)
async def delete_all_cache_entries(app_settings: AppSettings):
    """删除全部缓存条目"""
    deleted = await get_blobstore(RESOURCE, app_settings).delete_prefix("")
    logger.info(f"已删除全部 {deleted} 个缓存条目")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
