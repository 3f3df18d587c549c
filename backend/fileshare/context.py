"""Process-wide application context, built once per app and shared by handlers."""
from dataclasses import dataclass

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from fileshare.config import Settings
from fileshare.database import build_engine, build_session_factory
from fileshare.services.file_storage import FileStorageService


@dataclass
class AppContext:
    settings: Settings
    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]
    storage: FileStorageService

    @classmethod
    def from_settings(cls, settings: Settings) -> "AppContext":
        engine = build_engine(settings)
        return cls(
            settings=settings,
            engine=engine,
            session_factory=build_session_factory(engine),
            storage=FileStorageService(settings.FILE_STORAGE_PATH, settings.UPLOAD_CHUNK_SIZE),
        )


def get_context(request: Request) -> AppContext:
    """FastAPI dependency returning the context attached to the running app."""
    return request.app.state.context
