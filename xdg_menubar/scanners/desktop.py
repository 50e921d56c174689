"""Recursive scanner for directories of .desktop files."""

import logging
import os
import threading
from typing import Callable

from xdg_menubar.models import DesktopEntry, ScanFailure
from xdg_menubar.parser import DesktopFileParser
from xdg_menubar.util.fs import DEFAULT_BATCH_SIZE, EntryType, enumerate_children


logger = logging.getLogger(__name__)


class ScanAccumulator:
    """
    Shared result buffer for one scan.

    Appends are serialized so concurrent directory visits can share it. It
    also remembers which directories were already claimed, keyed by device
    and inode, so a directory reached twice through symlinks is only
    visited once.
    """

    def __init__(self) -> None:
        self._entries: list[DesktopEntry] = []
        self._visited: set[tuple[int, int]] = set()
        self._lock = threading.Lock()

    def add(self, entry: DesktopEntry) -> None:
        with self._lock:
            self._entries.append(entry)

    @property
    def entries(self) -> list[DesktopEntry]:
        """Snapshot of the entries in append order."""
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def claim_directory(self, directory: str) -> bool:
        """
        Mark a directory as visited.

        Returns:
            False if the same directory was claimed before. Directories that
            cannot be stat'ed are always claimable; listing them will fail
            and be reported by the caller.
        """
        try:
            st = os.stat(directory)
        except OSError:
            return True

        key = (st.st_dev, st.st_ino)
        with self._lock:
            if key in self._visited:
                return False
            self._visited.add(key)
            return True


class DirectoryScanner:
    """
    Walks directory trees and parses every regular file found.

    Args:
        parser: Parser applied to each regular file
        batch_size: Children fetched per directory listing round-trip
        on_entry: Called with each parsed entry
        on_failure: Called with a ScanFailure for every unreadable
            directory or file
    """

    def __init__(
        self,
        parser: DesktopFileParser,
        batch_size: int = DEFAULT_BATCH_SIZE,
        on_entry: Callable[[DesktopEntry], None] | None = None,
        on_failure: Callable[[ScanFailure], None] | None = None
    ):
        self.parser = parser
        self.batch_size = batch_size
        self.on_entry = on_entry
        self.on_failure = on_failure

    def _report(self, failure: ScanFailure) -> None:
        if self.on_failure is None:
            return
        try:
            self.on_failure(failure)
        except Exception:
            logger.exception("Failure hook raised for %s", failure.path)

    def _parse_file(self, file_path: str, accumulator: ScanAccumulator) -> None:
        try:
            entry = self.parser.parse(file_path)
        except OSError as e:
            logger.warning("Cannot read %s: %s", file_path, e)
            self._report(ScanFailure.from_error(file_path, "file", e))
            return

        if entry is None:
            return

        accumulator.add(entry)
        if self.on_entry is None:
            return
        try:
            self.on_entry(entry)
        except Exception:
            logger.exception("Entry hook raised for %s", file_path)

    def scan_directory(self, directory: str | os.PathLike, accumulator: ScanAccumulator) -> list[str]:
        """
        Visit a single directory level.

        Regular files are parsed in listing order and their entries added to
        ``accumulator``. Other entry types are skipped.

        Args:
            directory: Directory to list
            accumulator: Shared result buffer

        Returns:
            Subdirectories still to be visited, in listing order. Empty when
            the directory was already visited or could not be listed.
        """
        directory = os.fspath(directory)
        if not accumulator.claim_directory(directory):
            logger.debug("Skipping already visited directory %s", directory)
            return []

        subdirs: list[str] = []
        try:
            for batch in enumerate_children(directory, self.batch_size):
                for child in batch:
                    if child.entry_type == EntryType.REGULAR:
                        self._parse_file(child.path, accumulator)
                    elif child.entry_type == EntryType.DIRECTORY:
                        subdirs.append(child.path)
        except OSError as e:
            logger.warning("Cannot list directory %s: %s", directory, e)
            self._report(ScanFailure.from_error(directory, "directory", e))
            return []

        return subdirs

    def scan(self, directory: str | os.PathLike, accumulator: ScanAccumulator) -> None:
        """
        Scan a directory tree depth-first.

        Returns once every directory below ``directory`` has been visited.
        Unreadable directories and files are logged and skipped.
        """
        pending = [os.fspath(directory)]
        while pending:
            current = pending.pop()
            # Reversed so siblings are visited in listing order
            pending.extend(reversed(self.scan_directory(current, accumulator)))
