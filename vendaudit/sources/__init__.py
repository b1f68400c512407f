"""Upstream source fetchers.

A fetcher is any object with ``async fetch(source, file_name) -> str``. The
audit and sync flows only depend on that method, so tests can pass an
in-memory fetcher instead of ``GitFetcher``.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Protocol

from vendaudit.config import Settings, load_settings
from vendaudit.manifest.models import Source
from vendaudit.sources.git import GitFetcher


class SourceFetcher(Protocol):
    async def fetch(self, source: Source, file_name: str) -> str: ...


@asynccontextmanager
async def open_fetcher(
    fetcher: SourceFetcher | None = None,
    settings: Settings | None = None,
) -> AsyncIterator[SourceFetcher]:
    """Yield *fetcher* as is, or a ``GitFetcher`` that is closed on exit."""
    if fetcher is not None:
        yield fetcher
        return

    async with GitFetcher(settings or load_settings()) as git:
        yield git
