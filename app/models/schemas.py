from datetime import datetime
from typing import Any

from pydantic import ConfigDict, Field

from app.models.domain import CamelModel


class ErrorResponse(CamelModel):
    message: str
    details: Any = None


class BookmarkCreate(CamelModel):
    user_id: int | None = None
    library_id: int | None = None
    notes: str | None = None
    tags: list[str] = Field(default_factory=list)


class LibraryOut(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    owner: str
    description: str | None = None
    url: str
    stars: int
    forks: int
    topics: list[str] = []
    updated_at: datetime
    created_at: datetime | None = None


class BookmarkOut(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    library_id: int
    notes: str | None = None
    tags: list[str] = []
    created_at: datetime | None = None


class BookmarkWithLibrary(BookmarkOut):
    library: LibraryOut | None = None


class MessageResponse(CamelModel):
    message: str


class HealthResponse(CamelModel):
    status: str
    database_connected: bool = True
    llm_configured: bool = False
    github_rate_limit_remaining: int | None = None
