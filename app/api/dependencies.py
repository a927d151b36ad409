"""FastAPI dependency injection providers."""

from fastapi import Request

from app.services.library_store import BookmarkStore, SearchHistory
from app.services.search_pipeline import SearchPipeline


def get_pipeline(request: Request) -> SearchPipeline:
    return request.app.state.pipeline


def get_search_history(request: Request) -> SearchHistory:
    return request.app.state.search_history


def get_bookmark_store(request: Request) -> BookmarkStore:
    return request.app.state.bookmarks
