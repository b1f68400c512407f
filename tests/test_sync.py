"""Tests for rebuilding vendored files from upstream plus recorded patches."""

import asyncio
import tempfile
from pathlib import Path

import pytest
import yaml

from vendaudit.audit.orchestrator import audit
from vendaudit.errors import FetchError
from vendaudit.manifest.models import GitSource, ManifestItem
from vendaudit.patch.engine import diff
from vendaudit.sync.synchronizer import rebuild, sync, sync_async

GIT = {"git": {"repo": "git@github.com:owner/lib.git", "commit": "abc123"}}
UPSTREAM = "header\nshared\nbody\nfooter\n"
LOCAL = "header\nlocal only\nshared\nbody changed\nfooter"


def _write_manifest(root: Path, files: dict[str, list]) -> Path:
    data = {
        "files": {
            name: {"source": GIT, "patches": [h.to_dict() for h in hunks]}
            for name, hunks in files.items()
        }
    }
    path = root / "vendor.yaml"
    path.write_text(yaml.dump(data))
    return path


def test_rebuild_reverses_recorded_patches():
    item = ManifestItem(source=GitSource(repo="r", commit="c"), patches=tuple(diff(LOCAL, UPSTREAM)))
    assert rebuild(UPSTREAM, item) == LOCAL


def test_sync_restores_tree_from_scratch(make_fetcher):
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        path = _write_manifest(root, {"pkg/mod.py": diff(LOCAL, UPSTREAM), "plain.txt": []})
        fetcher = make_fetcher({"pkg/mod.py": UPSTREAM, "plain.txt": "as upstream\n"})

        report = sync(path, fetcher)

        assert report.passed
        assert report.written == ["pkg/mod.py", "plain.txt"]
        assert (root / "pkg" / "mod.py").read_bytes() == LOCAL.encode()
        assert (root / "plain.txt").read_text() == "as upstream\n"

        # The rebuilt tree passes the audit.
        assert audit(path, fetcher).passed


def test_sync_overwrites_existing_files(make_fetcher):
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        (root / "util.py").write_text("tampered\n")
        path = _write_manifest(root, {"util.py": []})

        report = sync(path, make_fetcher({"util.py": UPSTREAM}))

        assert report.written == ["util.py"]
        assert (root / "util.py").read_text() == UPSTREAM


def test_sync_preserves_crlf(make_fetcher):
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        local = "a\r\nB\r\nc\r\n"
        upstream = "a\r\nb\r\nc\r\n"
        path = _write_manifest(root, {"win.txt": diff(local, upstream)})

        sync(path, make_fetcher({"win.txt": upstream}))

        assert (root / "win.txt").read_bytes() == local.encode()


def test_stale_patch_is_reported_per_file(make_fetcher):
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        path = _write_manifest(root, {"stale.py": diff(LOCAL, UPSTREAM), "fine.py": []})
        fetcher = make_fetcher({"stale.py": "upstream moved on\n", "fine.py": UPSTREAM})

        report = sync(path, fetcher)

        assert not report.passed
        assert report.written == ["fine.py"]
        assert [f.file_name for f in report.failures] == ["stale.py"]
        assert not (root / "stale.py").exists()
        assert (root / "fine.py").read_text() == UPSTREAM


def test_fetch_failure_aborts_sync(make_fetcher):
    with tempfile.TemporaryDirectory() as tmpdir:
        path = _write_manifest(Path(tmpdir), {"a.py": [], "b.py": []})
        with pytest.raises(FetchError):
            sync(path, make_fetcher({"a.py": UPSTREAM}))


def test_fetch_failure_cancels_files_in_flight(make_fetcher):
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        path = _write_manifest(root, {"gone.py": [], "slow.py": []})
        fetcher = make_fetcher({"slow.py": UPSTREAM}, delays={"slow.py": 30})

        async def run():
            with pytest.raises(FetchError):
                await sync_async(path, fetcher)
            # Still inside the loop: the slow fetch must already be cancelled.
            return list(fetcher.cancelled)

        assert asyncio.run(run()) == ["slow.py"]
        assert not (root / "slow.py").exists()
