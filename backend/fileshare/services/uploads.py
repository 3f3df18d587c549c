"""Upload workflow: store the bytes, then record the metadata row."""
import logging
from pathlib import PurePath

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile

from fileshare.config import Settings
from fileshare.errors import PersistenceError
from fileshare.models.file_record import FileRecord
from fileshare.services.file_storage import FileStorageService

logger = logging.getLogger(__name__)

DEFAULT_MIMETYPE = "application/octet-stream"
FILES_PREFIX = "/files"


def file_extension(filename: str) -> str:
    """Suffix of the client-supplied name from its last dot, e.g. ".txt".

    Leading dots do not start an extension (".bashrc" has none), but a trailing
    one does: "a." gives ".". Unlike PurePath.suffix, which returns "" there.
    """
    name = PurePath(filename).name
    if "." not in name.lstrip("."):
        return ""
    return name[name.rindex("."):]


class UploadService:
    def __init__(self, db: AsyncSession, storage: FileStorageService, settings: Settings):
        self.db = db
        self.storage = storage
        self.settings = settings

    def public_url(self, file_id: str, ext: str) -> str:
        return f"{self.settings.public_base_url}{FILES_PREFIX}/{file_id}{ext}"

    async def create(self, upload: UploadFile, ip: str) -> FileRecord:
        """Store one uploaded file and insert its record.

        The insert only starts once the disk write has completed. If the insert
        fails the stored file is kept unless CLEANUP_ORPHANED_FILES is set.
        """
        filename = upload.filename or ""
        ext = file_extension(filename)
        file_id = self.storage.new_file_id()
        logger.info("Uploading file: %s, IP: %s", filename, ip)

        file_path, size = await self.storage.save(upload, file_id, ext)

        record = FileRecord(
            file_id=file_id,
            filename=filename,
            mimetype=upload.content_type or DEFAULT_MIMETYPE,
            size=size,
            url=self.public_url(file_id, ext),
            ip=ip,
        )
        try:
            self.db.add(record)
            await self.db.commit()
            await self.db.refresh(record)
        except SQLAlchemyError as e:
            await self.db.rollback()
            if self.settings.CLEANUP_ORPHANED_FILES:
                await self.storage.delete(file_path)
            raise PersistenceError(f"Could not record upload {file_id}: {e}") from e

        logger.info("File record created: %s", record.file_id)
        return record
