from __future__ import annotations

import asyncio

import pytest

from vendaudit.errors import FetchError


class FakeFetcher:
    """In-memory upstream: file name -> baseline text.

    Names in *delays* sleep that many seconds before answering; the ones that
    get cancelled while sleeping are recorded in ``cancelled``.
    """

    def __init__(self, baselines: dict[str, str], delays: dict[str, float] | None = None):
        self.baselines = baselines
        self.delays = delays or {}
        self.requests: list[tuple[str, str]] = []
        self.cancelled: list[str] = []

    async def fetch(self, source, file_name: str) -> str:
        self.requests.append((source.commit, file_name))
        if file_name in self.delays:
            try:
                await asyncio.sleep(self.delays[file_name])
            except asyncio.CancelledError:
                self.cancelled.append(file_name)
                raise
        if file_name not in self.baselines:
            raise FetchError(f"Not found upstream: {file_name}", kind=FetchError.NOT_FOUND)
        return self.baselines[file_name]


@pytest.fixture()
def make_fetcher():
    return FakeFetcher
