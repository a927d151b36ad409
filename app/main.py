"""FastAPI application entry point with lifespan management."""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text

from app.api.bookmarks import router as bookmarks_router
from app.api.routes import router as api_router
from app.config import settings
from app.db import create_engine, create_session_factory, init_models
from app.errors import ApiError
from app.models.schemas import ErrorResponse, HealthResponse
from app.rate_limit import limiter
from app.services.analyzer import LibraryAnalyzer
from app.services.github_client import GitHubClient
from app.services.library_store import BookmarkStore, SearchHistory
from app.services.llm_client import LLMClient
from app.services.search_pipeline import SearchPipeline
from app.services.term_generator import TermGenerator

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize services on startup, clean up on shutdown."""
    logger.info("Initializing services...")

    github_client = GitHubClient(token=settings.github_token)
    llm = LLMClient(
        api_key=settings.openai_api_key,
        model=settings.openai_model,
        base_url=settings.openai_base_url,
        timeout=settings.llm_timeout,
    )

    engine = create_engine(settings.database_url)
    if settings.database_auto_create:
        await init_models(engine)
    session_factory = create_session_factory(engine)

    pipeline = SearchPipeline(
        github_client=github_client,
        term_generator=TermGenerator(llm, max_terms=settings.search_max_terms),
        analyzer=LibraryAnalyzer(llm, readme_chars=settings.readme_excerpt_chars),
        fan_out=settings.search_fan_out,
        per_term_limit=settings.search_per_term_limit,
        legacy_limit=settings.search_legacy_limit,
        result_limit=settings.search_result_limit,
        call_timeout=settings.upstream_call_timeout,
    )

    app.state.github_client = github_client
    app.state.llm = llm
    app.state.engine = engine
    app.state.pipeline = pipeline
    app.state.search_history = SearchHistory(session_factory)
    app.state.bookmarks = BookmarkStore(session_factory)

    logger.info("All services initialized.")
    yield

    logger.info("Shutting down services...")
    await github_client.close()
    await llm.close()
    await engine.dispose()
    logger.info("Services shut down.")


app = FastAPI(title="LibFinder", version="0.1.0", lifespan=lifespan)
app.state.limiter = limiter
app.include_router(api_router)
app.include_router(bookmarks_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log request method, path, and response time."""
    start = time.monotonic()
    response = await call_next(request)
    elapsed = (time.monotonic() - start) * 1000
    logger.info(
        "%s %s - %d (%.1fms)", request.method, request.url.path, response.status_code, elapsed
    )
    return response


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    body = ErrorResponse(message=exc.message, details=exc.details)
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(mode="json", exclude_none=True),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Render malformed query, path or body values as a 400 ErrorResponse."""
    body = ErrorResponse(
        message="Invalid request parameters", details=jsonable_encoder(exc.errors())
    )
    return JSONResponse(status_code=400, content=body.model_dump(mode="json"))


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    logger.warning("Rate limit hit on %s: %s", request.url.path, exc.detail)
    body = ErrorResponse(message="Too many requests", details={"limit": str(exc.detail)})
    return JSONResponse(status_code=429, content=body.model_dump(mode="json"))


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Return clean JSON for unhandled exceptions."""
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"message": "Internal server error"},
    )


@app.get("/api/health", response_model=HealthResponse)
async def health():
    """Health check endpoint."""
    database_connected = True
    try:
        async with app.state.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception:
        database_connected = False

    rate_limit = None
    if hasattr(app.state, "github_client"):
        rate_limit = app.state.github_client.rate_limit_remaining

    llm = getattr(app.state, "llm", None)

    return HealthResponse(
        status="ok" if database_connected else "degraded",
        database_connected=database_connected,
        llm_configured=bool(llm and llm.configured),
        github_rate_limit_remaining=rate_limit,
    )
