"""Fetch upstream file contents from git hosts that serve raw files over HTTP.

Only GitHub is supported: ``owner/repo`` at ``commit`` is read from
``https://raw.githubusercontent.com/<owner>/<repo>/<commit>/<path>``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from urllib.parse import quote

import httpx

from vendaudit.config import Settings
from vendaudit.errors import FetchError
from vendaudit.manifest.models import GitSource

logger = logging.getLogger(__name__)

SUPPORTED_DOMAINS = ("github.com",)

# git@github.com:owner/repo.git, https://github.com/owner/repo, github.com/owner/repo
_REPO_RE = re.compile(
    r"^(?:git@|https?://)?(?P<domain>[\w.-]+)[/:](?P<repo>[\w./-]+?)(?:\.git)?/?$"
)


@dataclass(frozen=True)
class RepoAddress:
    domain: str
    repo: str  # "owner/name"


def parse_repo(repo: str) -> RepoAddress:
    """Split a git remote address into its host and ``owner/name`` parts."""
    match = _REPO_RE.match(repo.strip())
    if match is None:
        raise FetchError(
            'Must specify full git repo, such as "git@github.com:owner/name.git" or '
            f'"https://github.com/owner/name.git", got: "{repo}"',
            kind=FetchError.UNSUPPORTED_DOMAIN,
        )
    return RepoAddress(domain=match.group("domain"), repo=match.group("repo"))


def raw_url(source: GitSource, file_name: str, base_url: str) -> str:
    """Build the raw-content URL for *file_name* from *source*."""
    address = parse_repo(source.repo)
    if address.domain not in SUPPORTED_DOMAINS:
        raise FetchError(
            f"Unknown git domain, must be {list(SUPPORTED_DOMAINS)}, got: {address.domain}",
            kind=FetchError.UNSUPPORTED_DOMAIN,
        )
    segments = [*address.repo.split("/"), source.commit, *source.remote_path(file_name).split("/")]
    return "/".join([base_url.rstrip("/"), *(quote(segment, safe="") for segment in segments)])


class GitFetcher:
    """Reads upstream baselines through a shared ``httpx.AsyncClient``.

    Use as an async context manager so the client is closed::

        async with GitFetcher(settings) as fetcher:
            text = await fetcher.fetch(item.source, "lib/util.py")
    """

    def __init__(self, settings: Settings | None = None, client: httpx.AsyncClient | None = None):
        self.settings = settings or Settings()
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> GitFetcher:
        if self._client is None:
            headers = {}
            if self.settings.github_token:
                headers["Authorization"] = f"Bearer {self.settings.github_token}"
            self._client = httpx.AsyncClient(
                timeout=self.settings.http_timeout,
                headers=headers,
                follow_redirects=True,
            )
        return self

    async def __aexit__(self, *exc) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def fetch(self, source: GitSource, file_name: str) -> str:
        """Return the upstream text of *file_name*, or raise ``FetchError``."""
        if self._client is None:
            raise RuntimeError("GitFetcher must be entered with 'async with' before fetching")

        url = raw_url(source, file_name, self.settings.raw_base_url)
        logger.debug("Fetching %s", url)
        try:
            response = await self._client.get(url)
        except httpx.HTTPError as e:
            raise FetchError(f"Failed to fetch {url}: {e}", kind=FetchError.NETWORK, url=url) from e

        if response.status_code == 404:
            raise FetchError(f"Not found upstream: {url}", kind=FetchError.NOT_FOUND, url=url)
        if response.is_error:
            raise FetchError(
                f"Failed to fetch {url}: HTTP {response.status_code}",
                kind=FetchError.NETWORK,
                url=url,
            )
        return response.text
