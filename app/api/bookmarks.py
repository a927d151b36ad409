"""Bookmark endpoints."""

import logging

from fastapi import APIRouter, Depends, Query

from app.api.dependencies import get_bookmark_store
from app.errors import ApiError
from app.models.schemas import (
    BookmarkCreate,
    BookmarkOut,
    BookmarkWithLibrary,
    MessageResponse,
)
from app.services.library_store import BookmarkStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


@router.post("/bookmarks", response_model=BookmarkOut)
async def create_bookmark(
    body: BookmarkCreate | None = None,
    store: BookmarkStore = Depends(get_bookmark_store),
):
    if body is None or not body.user_id or not body.library_id:
        raise ApiError(400, "Missing required fields")

    try:
        bookmark = await store.create(body.user_id, body.library_id, body.notes, body.tags)
    except Exception:
        logger.exception("Bookmark creation failed")
        raise ApiError(500, "Failed to create bookmark")
    return BookmarkOut.model_validate(bookmark)


@router.get("/bookmarks", response_model=list[BookmarkWithLibrary])
async def list_bookmarks(
    user_id: int | None = Query(default=None, alias="userId"),
    store: BookmarkStore = Depends(get_bookmark_store),
):
    """List a user's bookmarks with the bookmarked library attached."""
    if not user_id:
        raise ApiError(400, "User ID is required")

    try:
        bookmarks = await store.list_for_user(user_id)
    except Exception:
        logger.exception("Bookmark retrieval failed for user %d", user_id)
        raise ApiError(500, "Failed to retrieve bookmarks")
    return [BookmarkWithLibrary.model_validate(b) for b in bookmarks]


@router.delete("/bookmarks/{bookmark_id}", response_model=MessageResponse)
async def delete_bookmark(
    bookmark_id: int,
    user_id: int | None = Query(default=None, alias="userId"),
    store: BookmarkStore = Depends(get_bookmark_store),
):
    if not user_id:
        raise ApiError(400, "User ID is required")

    try:
        deleted = await store.delete(bookmark_id, user_id)
    except Exception:
        logger.exception("Bookmark deletion failed for %d", bookmark_id)
        raise ApiError(500, "Failed to delete bookmark")

    if not deleted:
        raise ApiError(404, "Bookmark not found")
    return MessageResponse(message="Bookmark deleted successfully")
