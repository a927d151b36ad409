from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SearchRequest(BaseModel):
    language: str
    description: str
    example: str | None = None


class RawRepository(CamelModel):
    url: str
    name: str
    owner: str
    full_name: str
    description: str = ""
    stars: int = 0
    forks: int = 0
    topics: list[str] = []
    updated_at: datetime | None = None


class Pricing(CamelModel):
    type: Literal["free", "paid", "freemium"]
    starting_price: str | None = None


class Analysis(CamelModel):
    is_open_source: bool
    pricing: Pricing | None = None
    integration_complexity: int = Field(ge=1, le=5)
    complexity_reason: str


class AnalyzedRepository(RawRepository):
    id: int | None = None
    analysis: Analysis | None = None
