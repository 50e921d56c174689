"""Parser for freedesktop.org .desktop files.

Written against the Desktop Entry Specification:
http://standards.freedesktop.org/desktop-entry-spec/desktop-entry-spec-1.0.html

Only the ``[Desktop Entry]`` group is read. Field codes in ``Exec`` are
substituted as described in
http://standards.freedesktop.org/desktop-entry-spec/1.1/ar01s06.html
"""

import logging
import os
import re
from pathlib import Path
from typing import Iterable

from xdg_menubar.icons import IconLookup
from xdg_menubar.models import DesktopEntry


logger = logging.getLogger(__name__)

DESKTOP_ENTRY_GROUP = "[Desktop Entry]"

DEFAULT_TERMINAL = "xterm"
DEFAULT_WM_NAME = "awesome"

_COMMENT_RE = re.compile(r"^\s*#")
_KEY_VALUE_RE = re.compile(r"^\s*(\w+)\s*=\s*(\S.*)$")
_FILE_CODE_RE = re.compile(r"%[fuFU]")


def is_group_header(line: str) -> bool:
    return line.startswith("[") and line.endswith("]")


def read_desktop_group(lines: Iterable[str]) -> dict[str, str] | None:
    """
    Collect the key/value pairs of the [Desktop Entry] group.

    Comments are skipped, lines before the group are ignored and reading
    stops at the next group header. A key seen twice keeps its last value.

    Args:
        lines: Lines of a .desktop file, with or without line terminators

    Returns:
        Mapping of keys to values, or None if the group is missing
    """
    fields: dict[str, str] = {}
    in_group = False

    for raw in lines:
        line = raw.rstrip("\r\n")
        if _COMMENT_RE.match(line):
            continue

        if not in_group:
            if line == DESKTOP_ENTRY_GROUP:
                in_group = True
            continue

        if is_group_header(line):
            break

        match = _KEY_VALUE_RE.match(line)
        if match:
            fields[match.group(1)] = match.group(2)

    return fields if in_group else None


def is_shown(fields: dict[str, str], wm_name: str) -> bool:
    """Apply the NoDisplay and OnlyShowIn visibility rules."""
    no_display = fields.get("NoDisplay")
    if no_display is not None and no_display.lower() == "true":
        return False

    only_show_in = fields.get("OnlyShowIn")
    if only_show_in is not None and wm_name not in only_show_in:
        return False

    return True


def split_categories(value: str) -> list[str]:
    """Split a ``;``-separated Categories value, dropping empty items."""
    return [category for category in value.split(";") if category]


def substitute_exec(
    exec_template: str,
    name: str | None,
    source_path: str,
    icon_path: str | None = None,
    terminal: str | None = None
) -> str:
    """
    Expand the field codes of an Exec value.

    Substitutions are applied in this order, each over the whole string:
    ``%c`` becomes the name, ``%f %u %F %U`` are removed, ``%k`` becomes the
    file's own path and ``%i`` becomes ``--icon <icon_path>`` (or nothing
    without an icon). When ``terminal`` is given the result is wrapped as
    ``<terminal> -e <command>``.

    Example:
        >>> substitute_exec("myapp %f --name %c", "Foo", "/x/foo.desktop")
        'myapp  --name Foo'
    """
    if name is None:
        name = "[" + Path(source_path).stem + "]"

    cmdline = exec_template.replace("%c", name)
    cmdline = _FILE_CODE_RE.sub("", cmdline)
    cmdline = cmdline.replace("%k", source_path)
    if icon_path:
        cmdline = cmdline.replace("%i", "--icon " + icon_path)
    else:
        cmdline = cmdline.replace("%i", "")

    if terminal:
        cmdline = terminal + " -e " + cmdline
    return cmdline


class DesktopFileParser:
    """
    Turns .desktop files into DesktopEntry records.

    Args:
        icon_lookup: Resolver for Icon values; without one no icon is resolved
        wm_name: Window manager name matched against OnlyShowIn
        terminal: Terminal used for entries with Terminal=true
    """

    def __init__(
        self,
        icon_lookup: IconLookup | None = None,
        wm_name: str = DEFAULT_WM_NAME,
        terminal: str = DEFAULT_TERMINAL
    ):
        self.icon_lookup = icon_lookup
        self.wm_name = wm_name
        self.terminal = terminal

    def parse(self, file_path: str | os.PathLike) -> DesktopEntry | None:
        """
        Parse a single .desktop file.

        Args:
            file_path: Path to the file

        Returns:
            The parsed entry, or None if the file has no [Desktop Entry]
            group or no Name

        Raises:
            OSError: If the file cannot be opened or read
        """
        source_path = os.fspath(file_path)

        # Undecodable bytes are replaced so binary files just fail to parse
        with open(source_path, "r", encoding="utf-8", errors="replace") as f:
            fields = read_desktop_group(f)

        if fields is None:
            logger.debug("No %s group in %s", DESKTOP_ENTRY_GROUP, source_path)
            return None

        name = fields.get("Name")
        if not name:
            logger.debug("Missing Name in %s", source_path)
            return None

        icon_path = None
        if "Icon" in fields and self.icon_lookup is not None:
            icon_path = self.icon_lookup.find_icon_path(fields["Icon"])

        categories = None
        if "Categories" in fields:
            categories = split_categories(fields["Categories"])

        command_line = None
        if "Exec" in fields:
            command_line = substitute_exec(
                fields["Exec"],
                name,
                source_path,
                icon_path=icon_path,
                terminal=self.terminal if fields.get("Terminal") == "true" else None
            )

        return DesktopEntry(
            source_path=source_path,
            name=name,
            fields=fields,
            show=is_shown(fields, self.wm_name),
            icon_path=icon_path,
            categories=categories,
            command_line=command_line
        )


def parse_desktop_file(
    file_path: str | os.PathLike,
    icon_lookup: IconLookup | None = None,
    wm_name: str = DEFAULT_WM_NAME,
    terminal: str = DEFAULT_TERMINAL
) -> DesktopEntry | None:
    """Parse one .desktop file with a throwaway DesktopFileParser."""
    return DesktopFileParser(icon_lookup, wm_name=wm_name, terminal=terminal).parse(file_path)
