"""Upload and file serving routes."""
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import FormData, UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException

from fileshare.config import Settings
from fileshare.context import AppContext, get_context
from fileshare.database import get_db
from fileshare.errors import ClientInputError, FileShareError, NotFoundError
from fileshare.schemas.file import FileRecordResponse
from fileshare.services.uploads import FILES_PREFIX, UploadService

router = APIRouter(tags=["files"])

UNKNOWN_IP = "unknown"
NO_FILE_MESSAGE = "No file uploaded"


def first_file_part(form: FormData) -> Optional[UploadFile]:
    """The first part carrying a file, whatever its field name.

    Browsers send an empty part with filename="" when no file was picked;
    that counts as no file.
    """
    for _, value in form.multi_items():
        if isinstance(value, UploadFile) and value.filename:
            return value
    return None


def client_ip(request: Request, settings: Settings) -> str:
    """Requester address, honouring the trusted proxy header when configured."""
    if settings.TRUSTED_PROXY_HEADER:
        forwarded = request.headers.get(settings.TRUSTED_PROXY_HEADER)
        if forwarded:
            first = forwarded.split(",")[0].strip()
            if first:
                return first
    if request.client and request.client.host:
        return request.client.host
    return UNKNOWN_IP


@router.post("/upload", response_model=FileRecordResponse)
async def upload_file(
    request: Request,
    db: AsyncSession = Depends(get_db),
    context: AppContext = Depends(get_context),
):
    """Store one uploaded file and return its metadata record."""
    try:
        form = await request.form()
    except StarletteHTTPException as e:
        # Malformed multipart body, e.g. no boundary.
        raise ClientInputError(NO_FILE_MESSAGE) from e

    try:
        upload = first_file_part(form)
        if upload is None:
            raise ClientInputError(NO_FILE_MESSAGE)

        service = UploadService(db, context.storage, context.settings)
        return await service.create(upload, client_ip(request, context.settings))
    except FileShareError:
        raise
    except Exception as e:
        raise FileShareError(f"Unexpected upload failure: {e}") from e
    finally:
        await form.close()


@router.get(FILES_PREFIX + "/{name}")
async def download_file(name: str, context: AppContext = Depends(get_context)):
    """Serve a stored file; the content type is inferred from its extension."""
    path = context.storage.resolve(name)
    if path is None:
        raise NotFoundError(f"File not found: {name}")
    return FileResponse(path=path)
