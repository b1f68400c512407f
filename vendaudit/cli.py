"""vendaudit CLI — audit or sync a vendored tree described by a manifest."""

import sys

import click
from rich.console import Console
from rich.markup import escape

from vendaudit import __version__
from vendaudit.config import DEFAULT_PATCHES_FILE

console = Console()
err_console = Console(stderr=True)


@click.command()
@click.version_option(version=__version__)
@click.argument("manifest_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--patches", "write_patches", is_flag=True, help="Write found hunks of divergent files to a patches file")
@click.option("--patches-file", default=DEFAULT_PATCHES_FILE, show_default=True, help="Where --patches writes (.json, .yaml)")
@click.option("--sync", "run_sync", is_flag=True, help="Rebuild declared files from upstream plus recorded patches")
@click.option("--manifest-dir", "-d", default=None, help="Directory manifest paths are relative to")
@click.option("--log-level", default=None, help="Log level (default: $VENDAUDIT_LOG_LEVEL or WARNING)")
def main(
    manifest_file: str,
    write_patches: bool,
    patches_file: str,
    run_sync: bool,
    manifest_dir: str | None,
    log_level: str | None,
):
    """Audit vendored files against the upstream sources in MANIFEST_FILE.

    Every file under the manifest directory must be declared, and must equal
    its upstream baseline up to the patches recorded for it. With --sync, the
    declared files are instead rewritten from upstream plus their patches.
    """
    from vendaudit.audit.report import ConsoleReporter
    from vendaudit.config import load_settings
    from vendaudit.errors import VendauditError
    from vendaudit.logs import setup_logging

    try:
        settings = load_settings()
    except ValueError as e:
        raise click.ClickException(str(e))
    setup_logging(log_level or settings.log_level)
    reporter = ConsoleReporter(console, err_console)

    try:
        if run_sync:
            from vendaudit.sync.synchronizer import sync

            console.print(f"\n[bold blue]vendaudit[/] — Syncing: {escape(manifest_file)}\n")
            report = sync(manifest_file, manifest_dir=manifest_dir, settings=settings, reporter=reporter)
        else:
            from vendaudit.audit.orchestrator import audit

            report = audit(
                manifest_file,
                manifest_dir=manifest_dir,
                write_patches=write_patches,
                patches_file=patches_file,
                settings=settings,
                reporter=reporter,
            )
    except VendauditError as e:
        err_console.print(f"\n[red]Error[/]: {escape(str(e))}\n")
        sys.exit(1)

    if not report.passed:
        sys.exit(1)


if __name__ == "__main__":
    main()
