"""本地文件存储后端"""

import shutil
from datetime import datetime
from pathlib import Path
from typing import Any, AsyncIterator

import aiofiles
import aiofiles.os

from bits_core.infrastructure.storage.base import BlobMetadata, Blobstore


class LocalBlobstore(Blobstore):
    """本地文件存储后端，每种资源一个子目录"""

    def __init__(self, resource: str, storage_root: str, max_body_size: int):
        super().__init__(resource, max_body_size)
        self.storage_root = Path(storage_root) / resource
        self.storage_root.mkdir(parents=True, exist_ok=True)

    def _resolve(self, key: str) -> Path:
        path = (self.storage_root / key).resolve()
        root = self.storage_root.resolve()
        if path != root and root not in path.parents:
            raise ValueError(f"非法存储键: {key}")
        return path

    def full_path(self, key: str) -> str:
        return str(self._resolve(key))

    async def put(self, key: str, source: Any) -> BlobMetadata:
        md5, size = await self.calculate_hash(source)
        full_path = self._resolve(key)
        full_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = full_path.with_name(f".{full_path.name}.tmp")

        try:
            async with aiofiles.open(tmp_path, "wb") as f:
                if isinstance(source, (bytes, bytearray)):
                    await f.write(source)
                else:
                    await source.seek(0)
                    while chunk := await source.read(self.CHUNK_SIZE):
                        await f.write(chunk)
            await aiofiles.os.replace(tmp_path, full_path)
        except Exception as e:
            tmp_path.unlink(missing_ok=True)
            raise IOError(f"保存失败: {e}") from e

        return BlobMetadata(
            key=key,
            size=size,
            md5=md5,
            created_at=datetime.now().isoformat(),
        )

    async def open(self, key: str) -> AsyncIterator[bytes]:
        full_path = self._resolve(key)

        if not full_path.is_file():
            raise FileNotFoundError(f"文件不存在: {key}")

        async with aiofiles.open(full_path, "rb") as f:
            while chunk := await f.read(self.CHUNK_SIZE):
                yield chunk

    async def exists(self, key: str) -> bool:
        return self._resolve(key).is_file()

    async def delete(self, key: str) -> bool:
        full_path = self._resolve(key)
        if not full_path.is_file():
            return False
        full_path.unlink()
        return True

    async def delete_prefix(self, prefix: str) -> int:
        target = self._resolve(prefix) if prefix else self.storage_root
        if target.is_file():
            target.unlink()
            return 1
        if not target.is_dir():
            return 0

        count = sum(1 for p in target.rglob("*") if p.is_file())
        if target == self.storage_root:
            for child in target.iterdir():
                if child.is_dir():
                    shutil.rmtree(child)
                else:
                    child.unlink()
        else:
            shutil.rmtree(target)
        return count

    async def copy(self, src_key: str, dst_key: str) -> bool:
        src = self._resolve(src_key)
        if not src.is_file():
            return False
        dst = self._resolve(dst_key)
        dst.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(src, dst)
        return True

    async def size(self, key: str) -> int:
        full_path = self._resolve(key)
        if not full_path.is_file():
            raise FileNotFoundError(f"文件不存在: {key}")
        return full_path.stat().st_size
