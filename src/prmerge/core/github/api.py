"""
GitHub REST API access for prmerge.

Only two read-only list endpoints are used: open pull requests and
collaborators. Both are paged with a ``Link: <...>; rel="next"`` header,
which fetch_all follows until the chain ends or the page budget runs out.
"""

from __future__ import annotations

import base64
import logging
from typing import Any
from urllib.parse import quote

import httpx

from prmerge import __version__
from prmerge.core.errors import HttpError, ParseError
from prmerge.core.github.models import Collaborator, PullRequest, RepoInfo

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_MAX_PAGES = 100
ACCEPT_HEADER = "application/vnd.github.v3+json"


def web_host(api_url: str) -> str:
    """
    Host that git remotes use for the GitHub instance behind ``api_url``.

    Example:
        >>> web_host("https://api.github.com")
        'github.com'
        >>> web_host("https://ghe.example.com/api/v3")
        'ghe.example.com'
    """
    host = httpx.URL(api_url).host
    return host.removeprefix("api.")


def basic_auth_header(credentials: str) -> str:
    """
    Build a Basic Authorization header value.

    The credentials are encoded as given; no validation of the
    ``user:password`` shape is performed.
    """
    token = base64.b64encode(credentials.encode("utf-8")).decode("ascii")
    return f"Basic {token}"


class GitHubApi:
    """
    Minimal blocking client for the GitHub REST API.

    Example:
        >>> with GitHubApi(auth="user:token") as api:
        ...     prs = api.fetch_pull_requests(repo, "master")
    """

    def __init__(
        self,
        auth: str | None = None,
        *,
        api_url: str = DEFAULT_API_URL,
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        """
        Initialize GitHubApi.

        Args:
            auth: Optional ``user:password`` or ``user:token`` credentials
            api_url: Base URL of the API (override for GitHub Enterprise)
            timeout: Per-request timeout in seconds (None waits forever)
            client: Pre-built httpx client, mainly for tests
        """
        self.api_url = api_url.rstrip("/")
        headers = {
            "Accept": ACCEPT_HEADER,
            "User-Agent": f"prmerge/{__version__}",
        }
        if auth is not None:
            headers["Authorization"] = basic_auth_header(auth)

        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)
        self._headers = headers

    def __enter__(self) -> GitHubApi:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            self._client.close()

    def _get_page(self, url: str) -> tuple[list[Any], str | None]:
        logger.info("Fetching '%s'", url)
        try:
            response = self._client.get(url, headers=self._headers)
        except httpx.HTTPError as e:
            raise HttpError(url, None, str(e)) from e

        if response.status_code != 200:
            raise HttpError(url, response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise ParseError(url, response.text) from e
        if not isinstance(data, list):
            raise ParseError(url, response.text)

        next_url = response.links.get("next", {}).get("url")
        return data, next_url

    def fetch_all(self, url: str, max_pages: int = DEFAULT_MAX_PAGES) -> list[Any]:
        """
        Fetch every page of a list endpoint.

        Pages are requested one after another and concatenated in the order
        they were visited. At most ``max_pages`` requests are made; if the
        chain is longer the result is silently truncated.

        Args:
            url: Absolute URL of the first page
            max_pages: Page budget

        Returns:
            Concatenated JSON array elements

        Raises:
            HttpError: If a page does not return HTTP 200
            ParseError: If a page body is not a JSON array
        """
        results: list[Any] = []
        next_url: str | None = url
        pages = 0

        while next_url is not None and pages < max_pages:
            data, next_url = self._get_page(next_url)
            results.extend(data)
            pages += 1

        if next_url is not None:
            logger.warning(
                "Stopped after %d page(s); results from '%s' onward were not fetched",
                pages,
                next_url,
            )
        return results

    def pulls_url(self, repo: RepoInfo, base: str) -> str:
        """URL of the open pull requests targeting ``base``."""
        return f"{self.api_url}/repos/{repo.full_name}/pulls?state=open&base={quote(base, safe='')}"

    def collaborators_url(self, repo: RepoInfo) -> str:
        """URL of the repository collaborators list."""
        return f"{self.api_url}/repos/{repo.full_name}/collaborators"

    def fetch_pull_requests(
        self,
        repo: RepoInfo,
        base: str,
        max_pages: int = DEFAULT_MAX_PAGES,
    ) -> list[PullRequest]:
        """
        Fetch open pull requests targeting ``base``, in API order.

        Raises:
            HttpError: On a non-200 response
            ParseError: On a malformed response
        """
        url = self.pulls_url(repo, base)
        data = self.fetch_all(url, max_pages)
        try:
            return [PullRequest.from_api(item) for item in data]
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise ParseError(url, f"pull request without a valid number: {e}") from e

    def fetch_trusted_authors(
        self,
        repo: RepoInfo,
        max_pages: int = DEFAULT_MAX_PAGES,
    ) -> set[str]:
        """
        Fetch the logins of collaborators with push access.

        Raises:
            HttpError: On a non-200 response
            ParseError: On a malformed response
        """
        url = self.collaborators_url(repo)
        collaborators = [
            Collaborator.from_api(item) for item in self.fetch_all(url, max_pages) if isinstance(item, dict)
        ]
        trusted = {c.login for c in collaborators if c.push and c.login}
        logger.debug("%d of %d collaborator(s) can push", len(trusted), len(collaborators))
        return trusted
