"""Audit flow — check a vendored tree against its manifest.

1. Load the manifest and list the files under its directory.
2. Reconcile the files on disk with the declared files.
3. For every file present in both, concurrently fetch the upstream baseline,
   diff the local copy against it and compare the hunks with the recorded
   patches.
4. Collect missing, unexpected and divergent files into an ``AuditReport``.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path

import yaml

from vendaudit.audit.reconcile import reconcile
from vendaudit.audit.report import AuditReport, NullReporter, Reporter
from vendaudit.config import DEFAULT_PATCHES_FILE, Settings
from vendaudit.manifest.loader import load_manifest
from vendaudit.manifest.models import Manifest, ManifestItem
from vendaudit.patch.comparator import Divergence, compare
from vendaudit.patch.engine import diff
from vendaudit.patch.hunk import Hunk
from vendaudit.sources import SourceFetcher, open_fetcher
from vendaudit.utils.file_scanner import scan_files
from vendaudit.utils.tasks import gather_or_cancel

logger = logging.getLogger(__name__)


def read_text(path: Path) -> str:
    """Read *path* as UTF-8 without newline translation."""
    with open(path, encoding="utf-8", errors="replace", newline="") as f:
        return f.read()


async def check_file(
    file_name: str,
    contents: str,
    item: ManifestItem,
    fetcher: SourceFetcher,
) -> Divergence | None:
    """Compare one local file with its upstream baseline and recorded patches."""
    baseline = await fetcher.fetch(item.source, file_name)
    found = diff(contents, baseline)
    logger.debug("%s: %d hunks found, %d recorded", file_name, len(found), len(item.patches))
    return compare(file_name, found, item.patches)


async def _check_matched(
    manifest: Manifest,
    file_names: list[str],
    fetcher: SourceFetcher,
) -> list[Divergence | None]:
    async def check(file_name: str) -> Divergence | None:
        contents = read_text(manifest.manifest_dir / file_name)
        return await check_file(file_name, contents, manifest.files[file_name], fetcher)

    # Results keep input order; the first fetch failure cancels the rest.
    return await gather_or_cancel(check(name) for name in file_names)


def write_patches_file(patches: dict[str, list[Hunk]], path: Path) -> Path:
    """Write found hunks per file in manifest shape (YAML for .yaml/.yml, else JSON)."""
    data = {name: [hunk.to_dict() for hunk in hunks] for name, hunks in patches.items()}
    if path.suffix in (".yaml", ".yml"):
        text = yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    else:
        text = json.dumps(data, indent=2, ensure_ascii=False) + "\n"
    path.write_text(text, encoding="utf-8")
    return path


async def audit_async(
    manifest_file: str | Path,
    fetcher: SourceFetcher | None = None,
    *,
    manifest_dir: str | Path | None = None,
    write_patches: bool = False,
    patches_file: str | Path = DEFAULT_PATCHES_FILE,
    settings: Settings | None = None,
) -> AuditReport:
    """Run an audit and return its report without printing anything."""
    manifest = load_manifest(manifest_file, manifest_dir)
    disk_files = scan_files(manifest.manifest_dir)
    files = reconcile(disk_files, manifest.declared)
    logger.info(
        "Auditing %s: %d matched, %d extra on disk, %d missing",
        manifest.manifest_dir,
        len(files.matched),
        len(files.only_left),
        len(files.only_right),
    )

    async with open_fetcher(fetcher, settings) as source:
        comparisons = await _check_matched(manifest, files.matched, source)

    allowed = set(manifest.allowed_extra)
    report = AuditReport(
        manifest_dir=manifest.manifest_dir,
        strict=manifest.strict,
        matched=files.matched,
        missing=files.only_right,
        extra_on_disk=files.only_left,
        unexpected_extra=[name for name in files.only_left if name not in allowed],
        divergences=[c for c in comparisons if c is not None],
    )

    if report.divergences and write_patches:
        report.patches_path = write_patches_file(report.found_patches, Path(patches_file))
        logger.info("Patches written to %s", report.patches_path)

    return report


def audit(
    manifest_file: str | Path,
    fetcher: SourceFetcher | None = None,
    *,
    manifest_dir: str | Path | None = None,
    write_patches: bool = False,
    patches_file: str | Path = DEFAULT_PATCHES_FILE,
    settings: Settings | None = None,
    reporter: Reporter | None = None,
) -> AuditReport:
    """Run an audit to completion and hand the result to *reporter*."""
    report = asyncio.run(
        audit_async(
            manifest_file,
            fetcher,
            manifest_dir=manifest_dir,
            write_patches=write_patches,
            patches_file=patches_file,
            settings=settings,
        )
    )
    (reporter or NullReporter()).audit_finished(report)
    return report
