import pytest

from app.db import create_engine, create_session_factory, init_models
from app.models.domain import RawRepository
from app.rate_limit import limiter

limiter.enabled = False


def make_repo(name: str, stars: int = 100, owner: str = "owner", **overrides) -> RawRepository:
    fields = {
        "url": f"https://github.com/{owner}/{name}",
        "name": name,
        "owner": owner,
        "full_name": f"{owner}/{name}",
        "description": f"{name} description",
        "stars": stars,
        "forks": stars // 10,
        "topics": ["python"],
        "updated_at": "2025-06-01T12:00:00Z",
    }
    fields.update(overrides)
    return RawRepository(**fields)


@pytest.fixture
async def engine():
    engine = create_engine("sqlite+aiosqlite://")
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)
