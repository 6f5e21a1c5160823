"""制品上传/下载/删除的公共处理逻辑

所有函数都按请求所属应用的配置选择存储后端。
"""

from collections.abc import AsyncIterator

from fastapi import Request, Response, status
from fastapi.responses import RedirectResponse, StreamingResponse
from loguru import logger
from starlette.datastructures import UploadFile

from bits_core.common.config import Settings
from bits_core.common.exceptions import BlobTooLargeError
from bits_core.infrastructure.storage import RESOURCE_FORM_FIELDS, Blobstore, get_blobstore
from bits_web_api.exceptions import (
    BlobTooLargeException,
    MissingUploadException,
    ResourceNotFoundException,
    StorageException,
)
from bits_web_api.schemas import BlobResponse

PRESIGNED_URL_EXPIRES = 3600


async def read_upload(request: Request, resource: str) -> UploadFile:
    """从 multipart 表单中读取资源对应的上传文件"""
    field = RESOURCE_FORM_FIELDS[resource]
    form = await request.form()
    upload = form.get(field)
    if not isinstance(upload, UploadFile):
        raise MissingUploadException(field)
    return upload


async def store_blob(app_settings: Settings, resource: str, key: str, guid: str, source) -> BlobResponse:
    """保存制品并返回元数据"""
    store = get_blobstore(resource, app_settings)
    try:
        meta = await store.put(key, source)
    except BlobTooLargeError as e:
        logger.warning(f"{resource} {guid} 超过大小限制: {e.size} > {e.max_size}")
        raise BlobTooLargeException(e.max_size) from e
    except IOError as e:
        raise StorageException(str(e)) from e

    logger.info(f"已保存 {resource} {guid}: {meta.size} 字节, md5={meta.md5}")
    return BlobResponse(guid=guid, **meta.to_dict())


async def stream_blob(app_settings: Settings, resource: str, key: str, guid: str) -> Response:
    """下载制品：S3 后端重定向到预签名 URL，否则流式返回"""
    store = get_blobstore(resource, app_settings)
    if not await store.exists(key):
        raise ResourceNotFoundException(resource, guid)

    if store.is_s3_backend():
        try:
            url = await store.presigned_url(key, PRESIGNED_URL_EXPIRES)
            logger.debug(f"下载重定向到 S3 预签名 URL: {resource} {guid}")
            return RedirectResponse(url=url, status_code=status.HTTP_302_FOUND)
        except (NotImplementedError, IOError) as e:
            logger.warning(f"生成预签名 URL 失败，回退到流式下载: {e}")

    return await _streaming_response(store, key)


async def _streaming_response(store: Blobstore, key: str) -> StreamingResponse:
    file_size = await store.size(key)

    async def iter_blob() -> AsyncIterator[bytes]:
        async for chunk in store.open(key):
            yield chunk

    return StreamingResponse(
        iter_blob(),
        media_type="application/octet-stream",
        headers={"Content-Length": str(file_size)},
    )


async def delete_blob(app_settings: Settings, resource: str, key: str, guid: str) -> Response:
    """删除制品"""
    if not await get_blobstore(resource, app_settings).delete(key):
        raise ResourceNotFoundException(resource, guid)
    logger.info(f"已删除 {resource} {guid}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
