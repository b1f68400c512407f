"""Sync flow. Rebuild every declared file from upstream plus its recorded patches.

Recorded patches describe how the local file differs from upstream
(``diff(local, upstream)``), so the local file is recovered by applying the
inverted patches to the upstream baseline.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from vendaudit.audit.report import NullReporter, Reporter, SyncReport
from vendaudit.config import Settings
from vendaudit.errors import PatchApplyError
from vendaudit.manifest.loader import load_manifest
from vendaudit.manifest.models import Manifest, ManifestItem
from vendaudit.patch.engine import apply_hunks, invert
from vendaudit.sources import SourceFetcher, open_fetcher
from vendaudit.utils.tasks import gather_or_cancel

logger = logging.getLogger(__name__)


def rebuild(baseline: str, item: ManifestItem) -> str:
    """Return the local content described by *item* on top of *baseline*."""
    return apply_hunks(invert(item.patches), baseline)


def write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(content)


async def _sync_file(
    manifest: Manifest,
    file_name: str,
    fetcher: SourceFetcher,
) -> PatchApplyError | None:
    item = manifest.files[file_name]
    baseline = await fetcher.fetch(item.source, file_name)
    try:
        content = rebuild(baseline, item)
    except PatchApplyError as e:
        logger.debug("Patches for %s do not apply: %s", file_name, e)
        return e.for_file(file_name)

    write_text(manifest.manifest_dir / file_name, content)
    logger.debug("Wrote %s (%d patches applied)", file_name, len(item.patches))
    return None


async def sync_async(
    manifest_file: str | Path,
    fetcher: SourceFetcher | None = None,
    *,
    manifest_dir: str | Path | None = None,
    settings: Settings | None = None,
) -> SyncReport:
    """Rewrite every declared file, present on disk or not.

    Patch failures are collected per file. A fetch failure aborts the run and
    cancels the files still in flight, so nothing more is written.
    """
    manifest = load_manifest(manifest_file, manifest_dir)
    file_names = manifest.declared
    logger.info("Syncing %d files into %s", len(file_names), manifest.manifest_dir)

    async with open_fetcher(fetcher, settings) as source:
        outcomes = await gather_or_cancel(_sync_file(manifest, name, source) for name in file_names)

    report = SyncReport()
    for name, failure in zip(file_names, outcomes):
        if failure is None:
            report.written.append(name)
        else:
            report.failures.append(failure)
    return report


def sync(
    manifest_file: str | Path,
    fetcher: SourceFetcher | None = None,
    *,
    manifest_dir: str | Path | None = None,
    settings: Settings | None = None,
    reporter: Reporter | None = None,
) -> SyncReport:
    """Run a sync to completion and hand the result to *reporter*."""
    report = asyncio.run(
        sync_async(manifest_file, fetcher, manifest_dir=manifest_dir, settings=settings)
    )
    (reporter or NullReporter()).sync_finished(report)
    return report
