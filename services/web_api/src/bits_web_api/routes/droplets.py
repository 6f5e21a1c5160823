"""Droplet 接口"""

from fastapi import APIRouter, Path, Request, status

from bits_core.infrastructure.storage import partitioned_key
from bits_web_api.deps import AppSettings
from bits_web_api.routes.blobs import delete_blob, read_upload, store_blob, stream_blob
from bits_web_api.schemas import GUID_PATTERN, BlobResponse

RESOURCE = "droplets"

router = APIRouter()


@router.put("/{guid}", status_code=status.HTTP_201_CREATED, response_model=BlobResponse)
async def upload_droplet(request: Request, app_settings: AppSettings, guid: str = Path(..., pattern=GUID_PATTERN)):
    upload = await read_upload(request, RESOURCE)
    return await store_blob(app_settings, RESOURCE, partitioned_key(guid), guid, upload)


@router.get("/{guid}")
async def download_droplet(app_settings: AppSettings, guid: str = Path(..., pattern=GUID_PATTERN)):
    return await stream_blob(app_settings, RESOURCE, partitioned_key(guid), guid)


@router.delete("/{guid}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_droplet(app_settings: AppSettings, guid: str = Path(..., pattern=GUID_PATTERN)):
    return await delete_blob(app_settings, RESOURCE, partitioned_key(guid), guid)
