"""Audit and sync results, and the reporters that present them.

The orchestrators only build ``AuditReport``/``SyncReport`` values; turning
them into console output is the job of a ``Reporter``. ``ConsoleReporter``
renders with rich, ``NullReporter`` prints nothing.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from rich.console import Console
from rich.markup import escape
from rich.text import Text

from vendaudit.errors import (
    DivergenceError,
    MissingFileError,
    PatchApplyError,
    UnexpectedFileError,
)
from vendaudit.patch.comparator import Divergence
from vendaudit.patch.hunk import ADD, REMOVE, Hunk


@dataclass
class AuditReport:
    """Everything an audit run found, in reconciliation order."""

    manifest_dir: Path
    strict: bool = False
    matched: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)
    extra_on_disk: list[str] = field(default_factory=list)
    unexpected_extra: list[str] = field(default_factory=list)
    divergences: list[Divergence] = field(default_factory=list)
    patches_path: Path | None = None

    @property
    def file_count(self) -> int:
        return len(self.matched) + len(self.extra_on_disk) + len(self.missing)

    @property
    def found_patches(self) -> dict[str, list[Hunk]]:
        """Found hunks per divergent file, ready to paste into a manifest."""
        return {d.file_name: d.found for d in self.divergences}

    @property
    def passed(self) -> bool:
        if self.missing or self.divergences:
            return False
        return not (self.unexpected_extra and self.strict)

    def raise_for_failures(self) -> None:
        """Raise the error for the first failing category, if any."""
        if self.missing:
            raise MissingFileError(self.missing)
        if self.divergences:
            raise DivergenceError([d.file_name for d in self.divergences])
        if self.unexpected_extra and self.strict:
            raise UnexpectedFileError(self.unexpected_extra)


@dataclass
class SyncReport:
    """Files written by a sync run and the files whose patches did not apply."""

    written: list[str] = field(default_factory=list)
    failures: list[PatchApplyError] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.failures


class Reporter(Protocol):
    def audit_finished(self, report: AuditReport) -> None: ...

    def sync_finished(self, report: SyncReport) -> None: ...


class NullReporter:
    def audit_finished(self, report: AuditReport) -> None:
        pass

    def sync_finished(self, report: SyncReport) -> None:
        pass


def count_files(count: int, adjective: str = "") -> str:
    """``count_files(1, "expected")`` -> ``"1 expected file"``."""
    noun = "file" if count == 1 else "files"
    return f"{count} {adjective} {noun}" if adjective else f"{count} {noun}"


def hunk_text(hunk: Hunk) -> Text:
    """Render a hunk as a found-vs-expected unified diff block."""
    text = Text()
    text.append("---found\n+++expected\n")
    text.append(hunk.header, style="cyan")
    for line in hunk.lines:
        style = "green" if line.startswith(ADD) else "red" if line.startswith(REMOVE) else ""
        text.append("\n")
        text.append(line, style=style)
    return text


class ConsoleReporter:
    """Prints categorized findings and a one-line verdict with rich."""

    def __init__(self, console: Console | None = None, err_console: Console | None = None):
        self.console = console or Console()
        self.err_console = err_console or Console(stderr=True)

    def _listing(self, heading: str, message: str, files: list[str]) -> None:
        self.err_console.print(f"\n{heading}: {message}\n")
        for name in files:
            self.err_console.print(f"\t * {escape(name)}")

    def _divergence(self, divergence: Divergence) -> None:
        name = escape(divergence.file_name)
        self.err_console.print("\n[red]Audit Error[/]: File divergence found")
        if divergence.unexpected:
            self.err_console.print(f"Found unexpected diffs in {name}:\n")
            for hunk in divergence.unexpected:
                self.err_console.print(hunk_text(hunk))
                self.err_console.print()
        if divergence.missing:
            self.err_console.print(f"Missing expected diffs in {name}:\n")
            for hunk in divergence.missing:
                self.err_console.print(hunk_text(hunk))
                self.err_console.print()

    def audit_finished(self, report: AuditReport) -> None:
        if report.missing:
            self._listing(
                "[red]Audit Error[/]",
                f"Failed to find {count_files(len(report.missing), 'expected')} in manifest directory",
                report.missing,
            )

        if report.unexpected_extra:
            heading = "[red]Audit Error[/]" if report.strict else "[yellow]Audit Warning[/]"
            self._listing(
                heading,
                f"Found {count_files(len(report.unexpected_extra), 'unexpected')} in manifest directory",
                report.unexpected_extra,
            )

        for divergence in report.divergences:
            self._divergence(divergence)

        if report.patches_path is not None:
            self.console.print(f"\nPatches written to `{escape(str(report.patches_path))}`.")

        total = count_files(report.file_count)
        if report.passed:
            self.console.print(f"\n[green]Successfully audited {total}[/] ✅\n")
        else:
            self.err_console.print(f"\n[red]Audit failed for {total}[/] ❌\n")

    def sync_finished(self, report: SyncReport) -> None:
        for name in report.written:
            self.console.print(f"  [green]v[/] {escape(name)}")
        for failure in report.failures:
            self.err_console.print(f"  [red]x[/] {escape(str(failure))}")

        if report.passed:
            self.console.print(f"\n[green]Successfully synced {count_files(len(report.written))}[/] ✅\n")
        else:
            self.err_console.print(
                f"\n[red]Sync failed for {count_files(len(report.failures))}[/] ❌\n"
            )
