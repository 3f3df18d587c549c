"""File record response schema."""
from datetime import datetime
from typing import Optional

from fileshare.schemas.base import CamelORMModel


class FileRecordResponse(CamelORMModel):
    id: int
    file_id: str
    filename: str
    mimetype: str
    size: int
    url: str
    ip: str
    created_at: Optional[datetime] = None
