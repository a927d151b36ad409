"""Search pipeline: term expansion, GitHub fan-out, merge/rank, LLM enrichment."""

import logging
from collections.abc import Iterable, Sequence

from app.models.domain import Analysis, AnalyzedRepository, RawRepository, SearchRequest
from app.services.analyzer import LibraryAnalyzer
from app.services.github_client import GitHubClient
from app.services.query_builder import build_search_query
from app.services.settled import Failure, gather_settled
from app.services.term_generator import TermGenerator

logger = logging.getLogger(__name__)


class ReadmeNotFound(LookupError):
    pass


def dedup_key(url: str) -> str:
    """Canonical form of a repository URL used to merge search results."""
    return url.rstrip("/").lower()


def dedupe_and_rank(
    results: Iterable[Sequence[RawRepository]], limit: int = 10
) -> list[RawRepository]:
    """Merge per-term result lists into one star-ranked list.

    The first record seen for a URL wins, later duplicates are discarded even
    when their fields differ. ``sorted`` is stable, so equal star counts keep
    discovery order.
    """
    unique: dict[str, RawRepository] = {}
    for page in results:
        for repo in page:
            unique.setdefault(dedup_key(repo.url), repo)

    ranked = sorted(unique.values(), key=lambda r: r.stars, reverse=True)
    return ranked[:limit]


class SearchPipeline:
    def __init__(
        self,
        github_client: GitHubClient,
        term_generator: TermGenerator,
        analyzer: LibraryAnalyzer,
        *,
        fan_out: bool = True,
        per_term_limit: int = 5,
        legacy_limit: int = 10,
        result_limit: int = 10,
        call_timeout: float | None = None,
    ) -> None:
        self.github = github_client
        self.term_generator = term_generator
        self.analyzer = analyzer
        self.fan_out = fan_out
        self.per_term_limit = per_term_limit
        self.legacy_limit = legacy_limit
        self.result_limit = result_limit
        self.call_timeout = call_timeout

    async def _search_term(
        self, term: str, language: str, example: str | None, per_page: int
    ) -> list[RawRepository]:
        query = build_search_query(language, term, example)
        logger.info("GitHub search: %r", query)
        return await self.github.search_repositories(
            query, sort="stars", order="desc", per_page=per_page
        )

    async def search(
        self, terms: Sequence[str], language: str, example: str | None = None
    ) -> list[list[RawRepository]]:
        """Run one GitHub search per term concurrently.

        A term whose search fails contributes an empty list.
        """
        outcomes = await gather_settled(
            (self._search_term(t, language, example, self.per_term_limit) for t in terms),
            timeout=self.call_timeout,
        )

        pages: list[list[RawRepository]] = []
        for term, outcome in zip(terms, outcomes):
            if isinstance(outcome, Failure):
                logger.warning(
                    "Search for term %r failed (%s): %s",
                    term,
                    outcome.reason.value,
                    outcome.error,
                )
                pages.append([])
            else:
                pages.append(outcome.value)
        return pages

    async def _analyze(self, repo: RawRepository) -> Analysis:
        readme = await self.github.fetch_readme(repo.owner, repo.name)
        if readme is None:
            raise ReadmeNotFound(f"{repo.full_name} has no README")
        return await self.analyzer.analyze(repo.name, repo.description, readme)

    async def enrich(self, repos: Sequence[RawRepository]) -> list[AnalyzedRepository]:
        """Attach an LLM analysis to each repository, concurrently.

        Repositories whose README or analysis cannot be obtained are kept,
        just without an ``analysis``.
        """
        outcomes = await gather_settled(
            (self._analyze(repo) for repo in repos), timeout=self.call_timeout
        )

        enriched: list[AnalyzedRepository] = []
        for repo, outcome in zip(repos, outcomes):
            analysis = None
            if isinstance(outcome, Failure):
                logger.warning(
                    "Analysis of %s failed (%s): %s",
                    repo.full_name,
                    outcome.reason.value,
                    outcome.error,
                )
            else:
                analysis = outcome.value
            enriched.append(AnalyzedRepository(**repo.model_dump(), analysis=analysis))
        return enriched

    async def run(self, request: SearchRequest) -> list[AnalyzedRepository]:
        """Full search for one request.

        In legacy (non fan-out) mode a single query is built from the raw
        description and upstream errors propagate to the caller.
        """
        if self.fan_out:
            terms = await self.term_generator.generate(request.language, request.description)
            logger.info("Search terms: %s", terms)
            pages = await self.search(terms, request.language, request.example)
        else:
            pages = [
                await self._search_term(
                    request.description, request.language, request.example, self.legacy_limit
                )
            ]

        ranked = dedupe_and_rank(pages, limit=self.result_limit)
        if not ranked:
            return []

        return await self.enrich(ranked)
