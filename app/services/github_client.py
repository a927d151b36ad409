"""GitHub API client for repository search and README retrieval.

Tracks rate-limit headers and translates the status codes the search API
uses for rate limiting (403/429) and rejected queries (422) into typed
errors the HTTP layer can surface.
"""

import base64
import logging

import httpx

from app.errors import UpstreamInvalidQuery, UpstreamRateLimited
from app.models.domain import RawRepository

logger = logging.getLogger(__name__)


def _parse_repo_json(data: dict) -> RawRepository:
    """Map a GitHub API repository JSON object to a RawRepository model."""
    owner = data.get("owner") or {}
    return RawRepository(
        url=data["html_url"],
        name=data["name"],
        owner=owner.get("login", ""),
        full_name=data["full_name"],
        description=data.get("description") or "",
        stars=data.get("stargazers_count", 0),
        forks=data.get("forks_count", 0),
        topics=data.get("topics") or [],
        updated_at=data.get("updated_at"),
    )


def _error_body(response: httpx.Response) -> dict:
    try:
        body = response.json()
    except ValueError:
        return {"message": response.text}
    return body if isinstance(body, dict) else {"message": body}


class GitHubClient:
    """Async GitHub API client with rate-limit tracking.

    Parameters
    ----------
    token:
        Optional personal access token. Requests are sent unauthenticated
        (with the lower anonymous rate limit) when it is empty.

    ``rate_limit_remaining`` and ``rate_limit_reset`` hold the headers of
    whichever response was processed last. Concurrent searches race on them,
    so treat the values as approximate.
    """

    def __init__(self, token: str = "", timeout: float = 30.0) -> None:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url="https://api.github.com",
            headers=headers,
            timeout=timeout,
        )
        self.rate_limit_remaining: int | None = None
        self.rate_limit_reset: float | None = None

    async def close(self) -> None:
        """Close the underlying HTTP client and release resources."""
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _update_rate_limit(self, response: httpx.Response) -> None:
        """Extract rate-limit headers and store them on the instance."""
        remaining = response.headers.get("X-RateLimit-Remaining")
        reset = response.headers.get("X-RateLimit-Reset")
        if remaining is not None:
            self.rate_limit_remaining = int(remaining)
        if reset is not None:
            self.rate_limit_reset = float(reset)

    async def _request(
        self,
        method: str,
        url: str,
        *,
        allow_404: bool = False,
        **kwargs,
    ) -> httpx.Response | None:
        """Send a request and raise on any non-2xx status.

        Parameters
        ----------
        method:
            HTTP method (``"GET"``, ``"POST"``, etc.).
        url:
            Path relative to ``base_url`` (e.g. ``"/repos/owner/repo"``).
        allow_404:
            When *True*, a 404 response returns ``None`` instead of raising.
        **kwargs:
            Forwarded to ``httpx.AsyncClient.request``.

        Raises
        ------
        UpstreamRateLimited
            On 403 or 429, with the remaining quota in ``details``.
        UpstreamInvalidQuery
            On 422 (GitHub rejected the search syntax).
        httpx.HTTPStatusError
            For any other non-2xx response.
        """
        response = await self._client.request(method, url, **kwargs)

        self._update_rate_limit(response)

        if allow_404 and response.status_code == 404:
            return None

        if response.status_code in (403, 429):
            details = {"rateLimit": response.headers.get("X-RateLimit-Remaining")}
            details.update(_error_body(response))
            raise UpstreamRateLimited(details=details)
        if response.status_code == 422:
            raise UpstreamInvalidQuery(details=_error_body(response))

        response.raise_for_status()
        return response

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def search_repositories(
        self,
        query: str,
        sort: str = "stars",
        order: str = "desc",
        per_page: int = 30,
    ) -> list[RawRepository]:
        """Search GitHub repositories.

        Wraps ``GET /search/repositories`` and returns a list of
        :class:`RawRepository` instances in the order GitHub ranked them.
        """
        response = await self._request(
            "GET",
            "/search/repositories",
            params={"q": query, "sort": sort, "order": order, "per_page": per_page},
        )
        items = response.json().get("items", [])
        return [_parse_repo_json(item) for item in items]

    async def fetch_readme(self, owner: str, repo: str) -> str | None:
        """Fetch and base64-decode the default README for a repository.

        Returns ``None`` when the repository has no README (404).
        """
        response = await self._request("GET", f"/repos/{owner}/{repo}/readme", allow_404=True)
        if response is None:
            return None

        content_b64 = response.json()["content"]
        return base64.b64decode(content_b64).decode("utf-8", errors="replace")
