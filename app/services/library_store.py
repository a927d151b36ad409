"""Persistence of search history and user bookmarks."""

import logging
from collections.abc import Sequence
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from app.models.domain import RawRepository, SearchRequest
from app.models.tables import Bookmark, Library, Search, SearchResult

logger = logging.getLogger(__name__)


async def upsert_library(session: AsyncSession, repo: RawRepository) -> Library:
    """Insert or refresh the library row for *repo*, keyed by URL."""
    result = await session.execute(select(Library).where(Library.url == repo.url))
    library = result.scalar_one_or_none()
    if library is None:
        library = Library(url=repo.url)
        session.add(library)

    library.name = repo.name
    library.owner = repo.owner
    library.description = repo.description
    library.stars = repo.stars
    library.forks = repo.forks
    library.topics = list(repo.topics)
    library.updated_at = repo.updated_at or datetime.now(timezone.utc)
    await session.flush()
    return library


class SearchHistory:
    def __init__(self, session_factory: async_sessionmaker) -> None:
        self.session_factory = session_factory

    async def record(
        self,
        request: SearchRequest,
        repos: Sequence[RawRepository],
        user_id: int | None = None,
    ) -> list[int]:
        """Store a search and its ranked results.

        Returns the library id of each repository, in the order given.
        """
        async with self.session_factory() as session:
            search = Search(
                user_id=user_id,
                language=request.language,
                description=request.description,
                example=request.example,
            )
            session.add(search)
            await session.flush()

            library_ids: list[int] = []
            for rank, repo in enumerate(repos, start=1):
                library = await upsert_library(session, repo)
                session.add(SearchResult(search_id=search.id, library_id=library.id, rank=rank))
                library_ids.append(library.id)

            await session.commit()

        logger.info("Recorded search %d with %d results", search.id, len(library_ids))
        return library_ids


class BookmarkStore:
    def __init__(self, session_factory: async_sessionmaker) -> None:
        self.session_factory = session_factory

    async def create(
        self,
        user_id: int,
        library_id: int,
        notes: str | None = None,
        tags: Sequence[str] | None = None,
    ) -> Bookmark:
        async with self.session_factory() as session:
            bookmark = Bookmark(
                user_id=user_id,
                library_id=library_id,
                notes=notes,
                tags=list(tags or []),
            )
            session.add(bookmark)
            await session.commit()
            await session.refresh(bookmark)
        return bookmark

    async def list_for_user(self, user_id: int) -> list[Bookmark]:
        """All bookmarks of *user_id* with their library row loaded."""
        async with self.session_factory() as session:
            result = await session.execute(
                select(Bookmark)
                .where(Bookmark.user_id == user_id)
                .options(selectinload(Bookmark.library))
                .order_by(Bookmark.id)
            )
            return list(result.scalars().all())

    async def delete(self, bookmark_id: int, user_id: int) -> bool:
        """Delete a bookmark owned by *user_id*. Returns False when there is none."""
        async with self.session_factory() as session:
            result = await session.execute(
                select(Bookmark).where(Bookmark.id == bookmark_id, Bookmark.user_id == user_id)
            )
            bookmark = result.scalar_one_or_none()
            if bookmark is None:
                return False
            await session.delete(bookmark)
            await session.commit()
        return True
