"""Tests for the GitHub raw-content fetcher."""

import asyncio

import httpx
import pytest

from vendaudit.config import Settings
from vendaudit.errors import FetchError
from vendaudit.manifest.models import GitSource
from vendaudit.sources.git import GitFetcher, parse_repo, raw_url

BASE = "https://raw.githubusercontent.com"


@pytest.mark.parametrize(
    "repo",
    [
        "git@github.com:owner/name.git",
        "https://github.com/owner/name.git",
        "http://github.com/owner/name",
        "github.com/owner/name",
    ],
)
def test_parse_repo_forms(repo):
    address = parse_repo(repo)
    assert address.domain == "github.com"
    assert address.repo == "owner/name"


def test_parse_repo_rejects_garbage():
    with pytest.raises(FetchError) as exc:
        parse_repo("not a repo")
    assert exc.value.kind == FetchError.UNSUPPORTED_DOMAIN


def test_raw_url():
    source = GitSource(repo="git@github.com:owner/name.git", commit="abc", path=("lib",))
    assert raw_url(source, "util.js", BASE) == f"{BASE}/owner/name/abc/lib/util.js"


def test_raw_url_with_file_token():
    source = GitSource(repo="https://github.com/o/r", commit="c", path=("pkgs/{file}/src/index.js",))
    assert raw_url(source, "pad", BASE + "/") == f"{BASE}/o/r/c/pkgs/pad/src/index.js"


def test_raw_url_unsupported_domain():
    source = GitSource(repo="git@gitlab.com:owner/name.git", commit="abc")
    with pytest.raises(FetchError) as exc:
        raw_url(source, "util.js", BASE)
    assert exc.value.kind == FetchError.UNSUPPORTED_DOMAIN


def _fetch(handler, source: GitSource, file_name: str, settings: Settings | None = None) -> str:
    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            async with GitFetcher(settings, client=client) as fetcher:
                return await fetcher.fetch(source, file_name)

    return asyncio.run(run())


def test_fetch_returns_text():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200, text="upstream\n")

    source = GitSource(repo="git@github.com:owner/name.git", commit="abc")
    assert _fetch(handler, source, "a.txt") == "upstream\n"
    assert seen == [f"{BASE}/owner/name/abc/a.txt"]


def test_fetch_uses_configured_base_url():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.host == "mirror.example"
        return httpx.Response(200, text="ok")

    source = GitSource(repo="git@github.com:owner/name.git", commit="abc")
    settings = Settings(raw_base_url="https://mirror.example/raw")
    assert _fetch(handler, source, "a.txt", settings) == "ok"


def test_fetch_not_found():
    source = GitSource(repo="git@github.com:owner/name.git", commit="abc")
    with pytest.raises(FetchError) as exc:
        _fetch(lambda request: httpx.Response(404, text="404: Not Found"), source, "a.txt")
    assert exc.value.kind == FetchError.NOT_FOUND
    assert exc.value.url.endswith("/a.txt")


def test_fetch_server_error():
    source = GitSource(repo="git@github.com:owner/name.git", commit="abc")
    with pytest.raises(FetchError) as exc:
        _fetch(lambda request: httpx.Response(503), source, "a.txt")
    assert exc.value.kind == FetchError.NETWORK


def test_fetch_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("boom", request=request)

    source = GitSource(repo="git@github.com:owner/name.git", commit="abc")
    with pytest.raises(FetchError) as exc:
        _fetch(handler, source, "a.txt")
    assert exc.value.kind == FetchError.NETWORK


def test_fetch_requires_context_manager():
    source = GitSource(repo="git@github.com:owner/name.git", commit="abc")
    with pytest.raises(RuntimeError):
        asyncio.run(GitFetcher().fetch(source, "a.txt"))


@pytest.mark.parametrize(
    "file_name, raw_path",
    [
        ("docs/a#b.md", b"/o/r/c/docs/a%23b.md"),
        ("what?.txt", b"/o/r/c/what%3F.txt"),
        ("100%.txt", b"/o/r/c/100%25.txt"),
        ("with space.txt", b"/o/r/c/with%20space.txt"),
    ],
)
def test_fetch_quotes_reserved_characters(file_name, raw_path):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.url.raw_path, request.url.fragment))
        return httpx.Response(200, text="ok")

    source = GitSource(repo="https://github.com/o/r", commit="c")
    assert _fetch(handler, source, file_name) == "ok"
    assert seen == [(raw_path, "")]
