"""Package 接口

PUT 支持两种请求体：
- multipart 字段 package：上传 package，?async=true 时后台保存并返回 202
- JSON {"source_guid": ...}：复制已存在的 package
"""

from fastapi import APIRouter, BackgroundTasks, Path, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import ValidationError

from bits_core.common.config import Settings
from bits_core.common.exceptions import BlobTooLargeError
from bits_core.infrastructure.storage import get_blobstore, partitioned_key
from bits_web_api.deps import AppSettings
from bits_web_api.exceptions import BlobTooLargeException, ResourceNotFoundException
from bits_web_api.routes.blobs import delete_blob, read_upload, store_blob, stream_blob
from bits_web_api.schemas import GUID_PATTERN, BlobResponse, CopyPackageRequest

RESOURCE = "packages"

router = APIRouter()


async def _store_in_background(app_settings: Settings, key: str, guid: str, payload: bytes) -> None:
    try:
        meta = await get_blobstore(RESOURCE, app_settings).put(key, payload)
    except (BlobTooLargeError, IOError) as e:
        logger.error(f"后台保存 package {guid} 失败: {e}")
        return
    logger.info(f"后台保存 package {guid} 完成: {meta.size} 字节")


async def _copy_package(request: Request, app_settings: Settings, guid: str) -> JSONResponse:
    try:
        body = CopyPackageRequest.model_validate(await request.json())
    except (ValueError, ValidationError) as e:
        errors = e.errors() if isinstance(e, ValidationError) else [{"loc": ("body",), "msg": str(e)}]
        raise RequestValidationError(errors) from e

    store = get_blobstore(RESOURCE, app_settings)
    src_key = partitioned_key(body.source_guid)
    dst_key = partitioned_key(guid)
    if not await store.copy(src_key, dst_key):
        raise ResourceNotFoundException(RESOURCE, body.source_guid)

    logger.info(f"已复制 package {body.source_guid} -> {guid}")
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content={"guid": guid, "source_guid": body.source_guid, "key": dst_key},
    )


@router.put("/{guid}", status_code=status.HTTP_201_CREATED, response_model=BlobResponse)
async def upload_package(
    request: Request,
    background_tasks: BackgroundTasks,
    app_settings: AppSettings,
    guid: str = Path(..., pattern=GUID_PATTERN),
    async_upload: bool = Query(False, alias="async"),
):
    """上传或复制 package"""
    if request.headers.get("content-type", "").startswith("application/json"):
        return await _copy_package(request, app_settings, guid)

    upload = await read_upload(request, RESOURCE)
    key = partitioned_key(guid)

    if not async_upload:
        return await store_blob(app_settings, RESOURCE, key, guid, upload)

    if upload.size is not None and upload.size > app_settings.MAX_BODY_SIZE:
        raise BlobTooLargeException(app_settings.MAX_BODY_SIZE)

    await upload.seek(0)
    payload = await upload.read()
    background_tasks.add_task(_store_in_background, app_settings, key, guid, payload)
    logger.info(f"已接收 package {guid}，后台保存中")
    return JSONResponse(status_code=status.HTTP_202_ACCEPTED, content={"guid": guid, "state": "processing"})


@router.get("/{guid}")
async def download_package(app_settings: AppSettings, guid: str = Path(..., pattern=GUID_PATTERN)):
    return await stream_blob(app_settings, RESOURCE, partitioned_key(guid), guid)


@router.delete("/{guid}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_package(app_settings: AppSettings, guid: str = Path(..., pattern=GUID_PATTERN)):
    return await delete_blob(app_settings, RESOURCE, partitioned_key(guid), guid)
