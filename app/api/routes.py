"""Library search endpoint."""

import logging

from fastapi import APIRouter, Depends, Query, Request

from app.api.dependencies import get_pipeline, get_search_history
from app.config import settings
from app.errors import ApiError, UpstreamError
from app.models.domain import AnalyzedRepository, SearchRequest
from app.rate_limit import limiter
from app.services.library_store import SearchHistory
from app.services.search_pipeline import SearchPipeline

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


@router.get(
    "/search",
    response_model=list[AnalyzedRepository],
    response_model_exclude_none=True,
)
@limiter.limit(settings.search_rate_limit)
async def search(
    request: Request,
    language: str | None = None,
    description: str | None = None,
    example: str | None = None,
    user_id: int | None = Query(default=None, alias="userId"),
    pipeline: SearchPipeline = Depends(get_pipeline),
    history: SearchHistory = Depends(get_search_history),
):
    """Find GitHub libraries matching a described need."""
    if not language or not description:
        raise ApiError(400, "Missing required parameters")

    body = SearchRequest(language=language, description=description, example=example or None)

    try:
        results = await pipeline.run(body)
    except UpstreamError as e:
        logger.error("GitHub search failed: %s %s", e.message, e.details)
        raise ApiError(e.status_code, e.message, e.details)
    except Exception as e:
        logger.exception("Search failed for %r", body.description)
        raise ApiError(500, "Failed to search repositories", str(e))

    if not results:
        return []

    # History is best effort; results are returned without ids when it fails.
    try:
        library_ids = await history.record(body, results, user_id=user_id)
    except Exception:
        logger.exception("Failed to record search history")
        return results

    return [r.model_copy(update={"id": lib_id}) for r, lib_id in zip(results, library_ids)]
