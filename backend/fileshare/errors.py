"""Error taxonomy and the handlers that turn it into HTTP responses."""
import html
import logging

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import HTMLResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

INTERNAL_ERROR_BODY = "Internal Server Error"

NOT_FOUND_PAGE = """<!DOCTYPE html>
<html>
<head>
  <title>404 Not Found</title>
</head>
<body>
  <h1>404 Not Found</h1>
  <p>The requested URL {path} was not found on this server.</p>
  <p>For more information, visit <a href="/">the documentation</a>.</p>
</body>
</html>
"""


class FileShareError(Exception):
    """Base error. Subclasses set the HTTP status they map to."""

    status_code = 500

    def __init__(self, message: str = INTERNAL_ERROR_BODY):
        super().__init__(message)
        self.message = message


class ClientInputError(FileShareError):
    """The request is unusable as sent, e.g. no file part."""

    status_code = 400


class StorageError(FileShareError):
    """Writing the uploaded bytes to disk failed."""


class PersistenceError(FileShareError):
    """Inserting the metadata row failed after the file was stored."""


class NotFoundError(FileShareError):
    status_code = 404


def render_not_found(path: str) -> HTMLResponse:
    return HTMLResponse(NOT_FOUND_PAGE.format(path=html.escape(path)), status_code=404)


async def file_share_error_handler(request: Request, exc: FileShareError):
    if isinstance(exc, NotFoundError):
        return await not_found_handler(request, exc)
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc, exc_info=exc)
        return PlainTextResponse(INTERNAL_ERROR_BODY, status_code=exc.status_code)
    logger.warning("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return PlainTextResponse(exc.message, status_code=exc.status_code)


async def not_found_handler(request: Request, exc: Exception):
    logger.info("404 error page served for URL: %s", request.url.path)
    return render_not_found(request.url.path)


async def starlette_http_error_handler(request: Request, exc: StarletteHTTPException):
    """Unknown paths and known paths hit with the wrong method both get the 404 page.

    Other client errors are answered in plain text.
    """
    if exc.status_code in (404, 405):
        return await not_found_handler(request, exc)
    if exc.status_code < 500:
        logger.warning("%s %s rejected: %s", request.method, request.url.path, exc.detail)
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=exc.headers)
    return await http_exception_handler(request, exc)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(FileShareError, file_share_error_handler)
    app.add_exception_handler(StarletteHTTPException, starlette_http_error_handler)
