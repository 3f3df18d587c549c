"""Local-disk file storage for uploaded bytes."""
import asyncio
import logging
import os
import uuid
from pathlib import Path
from typing import Optional

import aiofiles
import aiofiles.os
from starlette.datastructures import UploadFile

from fileshare.errors import StorageError

logger = logging.getLogger(__name__)


class FileStorageService:
    """Streams uploads into a single flat directory, one file per upload."""

    def __init__(self, base_path: Path, chunk_size: int = 1024 * 1024):
        self.base_path = Path(base_path)
        self.chunk_size = chunk_size
        self.base_path.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def new_file_id() -> str:
        return str(uuid.uuid4())

    def path_for(self, file_id: str, ext: str) -> Path:
        return self.base_path / f"{file_id}{ext}"

    async def save(self, upload: UploadFile, file_id: str, ext: str) -> tuple[Path, int]:
        """Copy the upload stream to disk. Returns (path, bytes written).

        The file is flushed and fsynced before returning, so callers may rely
        on the bytes being on stable storage.
        """
        file_path = self.path_for(file_id, ext)
        size = 0
        try:
            async with aiofiles.open(file_path, "wb") as f:
                while True:
                    chunk = await upload.read(self.chunk_size)
                    if not chunk:
                        break
                    await f.write(chunk)
                    size += len(chunk)
                await f.flush()
                await asyncio.to_thread(os.fsync, f.fileno())
        except OSError as e:
            raise StorageError(f"Could not write {file_path}: {e}") from e

        logger.info("File saved: %s (%d bytes)", file_path, size)
        return file_path, size

    def resolve(self, name: str) -> Optional[Path]:
        """Map a public file name to its path, or None if it is not a stored file."""
        base = self.base_path.resolve()
        candidate = (base / name).resolve()
        if candidate.parent != base or not candidate.is_file():
            return None
        return candidate

    async def delete(self, file_path: Path) -> None:
        """Delete a stored file if it is still there."""
        if await aiofiles.os.path.exists(file_path):
            await aiofiles.os.remove(file_path)
            logger.info("Removed stored file %s", file_path)
