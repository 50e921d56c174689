"""Scan engine: asynchronous tree scans and the menu discovery pipeline."""

import copy
import logging
import os
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor, wait
from pathlib import Path
from typing import Callable

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from xdg_menubar.config import Config
from xdg_menubar.icons import IconFinder
from xdg_menubar.models import DesktopEntry, ScanFailure, ScanReport
from xdg_menubar.parser import DesktopFileParser
from xdg_menubar.scanners.desktop import DirectoryScanner, ScanAccumulator
from xdg_menubar.signals import SignalObject


logger = logging.getLogger(__name__)

CompletionCallback = Callable[[list[DesktopEntry]], None]


class _TreeScan:
    """
    State of one scan_tree() call.

    ``pending`` counts directories submitted but not yet visited. A child is
    counted before its parent's visit is marked done, so the counter only
    reaches zero once the deepest subtree has finished.
    """

    def __init__(
        self,
        coordinator: "ScanCoordinator",
        root: str,
        on_complete: CompletionCallback,
        executor: Executor,
        owns_executor: bool
    ):
        self.coordinator = coordinator
        self.root = root
        self.on_complete = on_complete
        self.executor = executor
        self.owns_executor = owns_executor
        self.accumulator = ScanAccumulator()
        self.future: Future = Future()
        self.pending = 0
        self.lock = threading.Lock()

    def start(self) -> None:
        self.future.set_running_or_notify_cancel()
        self._submit(self.root)

    def _submit(self, directory: str) -> None:
        with self.lock:
            self.pending += 1
        try:
            self.executor.submit(self._visit, directory)
        except RuntimeError:
            # Executor was shut down underneath us
            logger.error("Cannot schedule scan of %s: executor is shut down", directory)
            self._task_done()

    def _visit(self, directory: str) -> None:
        try:
            for subdir in self.coordinator.scanner.scan_directory(directory, self.accumulator):
                self._submit(subdir)
        except Exception:
            logger.exception("Unexpected error while scanning %s", directory)
        finally:
            self._task_done()

    def _task_done(self) -> None:
        with self.lock:
            self.pending -= 1
            finished = self.pending == 0
        if finished:
            self._finish()

    def _finish(self) -> None:
        entries = self.accumulator.entries
        logger.debug("Scan of %s finished with %d entries", self.root, len(entries))
        try:
            self.coordinator.emit_signal("scan::finished", self.root, entries)
        except Exception:
            logger.exception("scan::finished listener for %s failed", self.root)

        try:
            self.on_complete(entries)
        except Exception as e:
            logger.exception("Completion callback for %s failed", self.root)
            self.future.set_exception(e)
        else:
            self.future.set_result(entries)
        finally:
            if self.owns_executor:
                self.executor.shutdown(wait=False)


class ScanCoordinator(SignalObject):
    """
    Runs directory tree scans without blocking the caller.

    Signals:
        entry::found(entry): an entry was parsed
        scan::failure(failure): a directory or file could not be read
        scan::finished(root, entries): a tree scan completed

    Signals are emitted from worker threads.

    Args:
        scanner: Scanner used for every directory. The coordinator works on
            a copy whose hooks publish entries and failures as signals; the
            given scanner is left untouched
        max_workers: Size of the thread pool created for each scan
        executor: Shared executor to use instead of a per-scan pool. It is
            not shut down by the coordinator.
    """

    def __init__(
        self,
        scanner: DirectoryScanner,
        max_workers: int = 8,
        executor: Executor | None = None
    ):
        super().__init__()
        self.add_signal("entry::found")
        self.add_signal("scan::failure")
        self.add_signal("scan::finished")

        self.scanner = copy.copy(scanner)
        self.scanner.on_entry = lambda entry: self.emit_signal("entry::found", entry)
        self.scanner.on_failure = lambda failure: self.emit_signal("scan::failure", failure)
        self.max_workers = max_workers
        self.executor = executor

    def scan_tree(self, root: str | os.PathLike, on_complete: CompletionCallback) -> Future:
        """
        Start scanning the tree rooted at ``root``.

        ``on_complete`` is called exactly once, from a worker thread, with
        every entry found below ``root`` after all subdirectories have been
        visited. An unreadable or missing root yields an empty list.

        Args:
            root: Directory to scan
            on_complete: Receives the aggregated entries

        Returns:
            Future resolving to the same list once ``on_complete`` returned
        """
        if self.executor is not None:
            executor, owns_executor = self.executor, False
        else:
            executor = ThreadPoolExecutor(
                max_workers=self.max_workers,
                thread_name_prefix="xdg-menubar-scan"
            )
            owns_executor = True

        job = _TreeScan(self, os.fspath(root), on_complete, executor, owns_executor)
        job.start()
        return job.future


def desktop_file_id(entry: DesktopEntry, root: str | os.PathLike) -> str:
    """
    Desktop file ID of an entry relative to the directory it was found in.

    Example:
        >>> desktop_file_id(entry, "/usr/share/applications")  # .../kde4/okular.desktop
        'kde4-okular.desktop'
    """
    relative = os.path.relpath(entry.source_path, os.fspath(root))
    return relative.replace(os.sep, "-")


def filter_visible(entries: list[DesktopEntry]) -> list[DesktopEntry]:
    return [e for e in entries if e.show]


def filter_by_category(entries: list[DesktopEntry], category: str) -> list[DesktopEntry]:
    """Keep entries listing ``category`` (case-insensitive)."""
    wanted = category.casefold()
    return [
        e for e in entries
        if e.categories and any(c.casefold() == wanted for c in e.categories)
    ]


def build_coordinator(config: Config) -> ScanCoordinator:
    """Wire parser, scanner and coordinator from a configuration."""
    parser = DesktopFileParser(
        icon_lookup=IconFinder(config.icon_dirs),
        wm_name=config.wm_name,
        terminal=config.terminal
    )
    scanner = DirectoryScanner(parser, batch_size=config.batch_size)
    return ScanCoordinator(scanner, max_workers=config.max_workers)


def run_scan(
    config: Config | None = None,
    roots: list[str] | None = None,
    show_progress: bool = True
) -> ScanReport:
    """
    Scan application directories and build a report.

    Every root is scanned concurrently. When the same desktop file ID occurs
    under several roots, the entry from the earliest root wins.

    Args:
        config: Scanner configuration (defaults if None)
        roots: Directories to scan (defaults to config.application_dirs)
        show_progress: Show a spinner on stderr while scanning

    Returns:
        ScanReport with entries in discovery order and any read failures.
        Hidden entries are dropped unless config.include_hidden is set.

    Example:
        >>> report = run_scan(roots=["/usr/share/applications"], show_progress=False)
        >>> print(f"Found {len(report.entries)} applications")
    """
    config = config or Config()
    roots = [str(Path(r).expanduser()) for r in (roots or config.application_dirs)]

    coordinator = build_coordinator(config)
    failures: list[ScanFailure] = []
    failures_lock = threading.Lock()

    def on_failure(_coordinator: ScanCoordinator, failure: ScanFailure) -> None:
        with failures_lock:
            failures.append(failure)

    with coordinator.connection_scope() as scope:
        scope.connect(coordinator, "scan::failure", on_failure)

        if show_progress:
            console = Console(stderr=True)
            with Progress(
                SpinnerColumn(),
                TextColumn("[bold blue]Discovering applications..."),
                console=console,
                transient=True
            ) as progress:
                progress.add_task("scan", total=None)
                results = _scan_roots(coordinator, roots)
        else:
            results = _scan_roots(coordinator, roots)

    entries: list[DesktopEntry] = []
    seen_ids: set[str] = set()
    for root in roots:
        for entry in results[root]:
            file_id = desktop_file_id(entry, root)
            if file_id in seen_ids:
                logger.debug("%s shadowed by an earlier directory", entry.source_path)
                continue
            seen_ids.add(file_id)
            entries.append(entry)

    if not config.include_hidden:
        entries = filter_visible(entries)

    if show_progress:
        console.print("[green]✓[/green] Found [bold]{} applications[/bold]".format(len(entries)))

    return ScanReport.create(roots=roots, entries=entries, failures=failures)


def _scan_roots(coordinator: ScanCoordinator, roots: list[str]) -> dict[str, list[DesktopEntry]]:
    """Scan all roots at once and wait for every completion callback."""
    results: dict[str, list[DesktopEntry]] = {}

    def collector(root: str) -> CompletionCallback:
        def on_complete(entries: list[DesktopEntry]) -> None:
            results[root] = entries
        return on_complete

    futures = [coordinator.scan_tree(root, collector(root)) for root in roots]
    wait(futures)
    for future in futures:
        future.result()
    return results
