"""Icon lookup for desktop entries."""

import logging
import os
import re
import threading
from pathlib import Path
from typing import Iterable, Protocol


logger = logging.getLogger(__name__)

ICON_EXTENSIONS = (".png", ".svg", ".xpm")

SCALABLE_RANK = 1_000_000
_SIZE_DIR_RE = re.compile(r"^(\d+)x\d+(?:@\d+)?$")


class IconLookup(Protocol):
    """Anything able to turn an Icon value into a file path."""

    def find_icon_path(self, icon_name: str) -> str | None:
        ...


class IconFinder:
    """
    Resolve icon names against a list of icon directories.

    Directories are searched in order. In each one the icon is first looked
    up directly (``<dir>/<name><ext>``) and then anywhere below it, which
    covers theme layouts such as ``hicolor/48x48/apps``. Each directory tree
    is walked once, on first need, into a file name index; when a name occurs
    several times the largest size (``scalable`` above all) wins. Results,
    including misses, are cached for the lifetime of the finder.
    """

    def __init__(self, icon_dirs: Iterable[str | os.PathLike], extensions: tuple[str, ...] = ICON_EXTENSIONS):
        self.icon_dirs = [Path(d).expanduser() for d in icon_dirs]
        self.extensions = extensions
        self._cache: dict[str, str | None] = {}
        self._indexes: dict[Path, dict[str, str]] = {}
        self._lock = threading.Lock()

    def find_icon_path(self, icon_name: str) -> str | None:
        """
        Find the file for an icon.

        Args:
            icon_name: Value of the Icon key, either a name or an absolute path

        Returns:
            Path of the icon file, or None if it cannot be found
        """
        if not icon_name:
            return None

        # Held for the whole lookup so concurrent workers share one index build
        with self._lock:
            if icon_name not in self._cache:
                self._cache[icon_name] = self._lookup(icon_name)
            return self._cache[icon_name]

    def _candidates(self, icon_name: str) -> list[str]:
        names = []
        if icon_name.endswith(self.extensions):
            names.append(icon_name)
        names.extend(icon_name + ext for ext in self.extensions)
        return names

    def _index(self, icon_dir: Path) -> dict[str, str]:
        if icon_dir not in self._indexes:
            self._indexes[icon_dir] = self._build_index(icon_dir)
        return self._indexes[icon_dir]

    def _build_index(self, icon_dir: Path) -> dict[str, str]:
        """Map every icon file name below ``icon_dir`` to its best path."""
        index: dict[str, str] = {}
        ranks: dict[str, int] = {}

        def on_error(error: OSError) -> None:
            logger.debug("Icon search in %s: %s", icon_dir, error)

        for dirpath, dirnames, filenames in os.walk(icon_dir, onerror=on_error):
            dirnames.sort()
            rank = _size_rank(dirpath)
            for filename in sorted(filenames):
                if not filename.endswith(self.extensions):
                    continue
                if filename not in index or rank > ranks[filename]:
                    index[filename] = os.path.join(dirpath, filename)
                    ranks[filename] = rank

        logger.debug("Indexed %d icons below %s", len(index), icon_dir)
        return index

    def _lookup(self, icon_name: str) -> str | None:
        if os.path.isabs(icon_name):
            return icon_name if os.path.isfile(icon_name) else None

        candidates = self._candidates(icon_name)
        for icon_dir in self.icon_dirs:
            if not icon_dir.is_dir():
                continue

            for candidate in candidates:
                direct = icon_dir / candidate
                if direct.is_file():
                    return str(direct)

            index = self._index(icon_dir)
            for candidate in candidates:
                if candidate in index:
                    return index[candidate]

        logger.debug("No icon found for %r", icon_name)
        return None


def _size_rank(dirpath: str) -> int:
    """
    Rank a theme directory by icon size.

    ``scalable`` beats any fixed size; directories without a size rank 0.
    """
    rank = 0
    for part in Path(dirpath).parts:
        if part == "scalable":
            return SCALABLE_RANK
        match = _SIZE_DIR_RE.match(part)
        if match:
            rank = max(rank, int(match.group(1)))
    return rank
