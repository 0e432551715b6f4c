import asyncio
import logging
from typing import Optional

import aiohttp
import orjson
from mashumaro.exceptions import MissingField

from .. import __version__
from ..errors import ListingError
from .rest import RepoPage, RepoSort, RepoSummary, RepoType, SortDirection

logger = logging.getLogger(__name__)

API_URL = "https://api.github.com"
REQUEST_TIMEOUT = 30


class GitHubRepoLister:
    """List an organization's repositories through the GitHub REST API.

    Use as an async context manager, the session is created on enter and
    closed on exit unless one was passed in.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        *,
        repo_type: RepoType = RepoType.ALL,
        sort: RepoSort = RepoSort.FULL_NAME,
        direction: SortDirection = SortDirection.ASC,
        session: Optional[aiohttp.ClientSession] = None,
        api_url: str = API_URL,
    ):
        self.repo_type = repo_type
        self.sort = sort
        self.direction = direction
        self.api_url = api_url.removesuffix("/")
        self._session = session
        self._owns_session = session is None

        self.headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": f"git-intel/{__version__}",
        }
        if token:
            self.headers["Authorization"] = f"Bearer {token}"

    async def __aenter__(self) -> "GitHubRepoLister":
        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=REQUEST_TIMEOUT),
            )
        return self

    async def __aexit__(self, *exc_info) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    async def list_by_org(self, org: str, page: int, per_page: int) -> RepoPage:
        if self._session is None:
            raise RuntimeError("GitHubRepoLister used outside of 'async with'")

        url = f"{self.api_url}/orgs/{org}/repos"
        params = {
            "type": str(self.repo_type),
            "sort": str(self.sort),
            "direction": str(self.direction),
            "per_page": per_page,
            "page": page,
        }
        logger.debug(f"GET {url} {params=}")

        try:
            async with self._session.get(url, params=params, headers=self.headers) as resp:
                resp.raise_for_status()
                content = await resp.read()
                next_page = _next_page(resp)
        except aiohttp.ClientResponseError as e:
            raise ListingError(
                f"listing repos of {org} failed: {e.status} {e.message}"
            ) from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise ListingError(f"listing repos of {org} failed: {e!r}") from e

        try:
            data = orjson.loads(content)
        except orjson.JSONDecodeError as e:
            raise ListingError(f"unexpected response listing repos of {org}: {e}") from e
        if not isinstance(data, list):
            raise ListingError(f"unexpected response listing repos of {org}: {data!r}")

        # a field of the wrong type or an item that is not an object
        try:
            repos = [RepoSummary.from_dict(item) for item in data]
        except (MissingField, ValueError) as e:
            raise ListingError(f"unexpected response listing repos of {org}: {e}") from e

        logger.debug(f"{org} page {page}: {len(repos)} repos, next page {next_page}")
        return RepoPage(repositories=repos, next_page=next_page)


# GitHub announces the next page in the Link header:
#   <https://api.github.com/organizations/1/repos?page=2>; rel="next"
# no rel="next" means this was the last page
def _next_page(resp) -> int:
    link = resp.links.get("next")
    if link is None:
        return 0
    page = link["url"].query.get("page")
    if page is None or not page.isdigit():
        return 0
    return int(page)
