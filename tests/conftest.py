from contextlib import asynccontextmanager

import httpx
import pytest
import pytest_asyncio
from sqlalchemy import select

from fileshare.config import Settings
from fileshare.main import create_app
from fileshare.models import FileRecord

CLIENT_ADDR = ("203.0.113.7", 4321)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'fileshare.db'}",
        FILE_STORAGE_PATH=tmp_path / "uploads",
        PUBLIC_BASE_URL="http://testserver/",
        _env_file=None,
    )


@asynccontextmanager
async def running_app(settings: Settings):
    """Build the app and run its lifespan, like uvicorn would."""
    app = create_app(settings)
    async with app.router.lifespan_context(app):
        yield app


@asynccontextmanager
async def client_for(app):
    transport = httpx.ASGITransport(app=app, client=CLIENT_ADDR)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest_asyncio.fixture
async def app(settings):
    async with running_app(settings) as app:
        yield app


@pytest_asyncio.fixture
async def client(app):
    async with client_for(app) as client:
        yield client


async def fetch_records(app) -> list[FileRecord]:
    async with app.state.context.session_factory() as session:
        result = await session.execute(select(FileRecord).order_by(FileRecord.id))
        return list(result.scalars().all())


def stored_files(settings: Settings) -> list[str]:
    return sorted(p.name for p in settings.FILE_STORAGE_PATH.iterdir())
