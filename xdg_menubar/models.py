"""Data models for xdg-menubar."""

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field, ConfigDict


RECOGNIZED_KEYS = frozenset({
    "Name",
    "Exec",
    "Icon",
    "Terminal",
    "NoDisplay",
    "OnlyShowIn",
    "Categories",
})


class DesktopEntry(BaseModel):
    """Parsed [Desktop Entry] group of one .desktop file."""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "source_path": "/usr/share/applications/firefox.desktop",
                "name": "Firefox",
                "fields": {
                    "Name": "Firefox",
                    "Exec": "firefox %u",
                    "Icon": "firefox",
                    "Categories": "Network;WebBrowser;"
                },
                "show": True,
                "icon_path": "/usr/share/icons/hicolor/48x48/apps/firefox.png",
                "categories": ["Network", "WebBrowser"],
                "command_line": "firefox "
            }
        }
    )

    source_path: str = Field(description="Absolute path of the originating .desktop file")
    name: str = Field(description="Display name (the Name key)")
    fields: dict[str, str] = Field(
        default_factory=dict,
        description="Raw key/value pairs of the [Desktop Entry] group"
    )
    show: bool = Field(default=True, description="Whether the entry should be presented")
    icon_path: str | None = Field(default=None, description="Resolved icon file")
    categories: list[str] | None = Field(default=None, description="Split Categories key")
    command_line: str | None = Field(default=None, description="Exec after field code substitution")

    @property
    def exec_template(self) -> str | None:
        return self.fields.get("Exec")

    @property
    def icon(self) -> str | None:
        return self.fields.get("Icon")

    @property
    def terminal(self) -> bool:
        """True only for the literal value ``true``."""
        return self.fields.get("Terminal") == "true"

    @property
    def launchable(self) -> bool:
        return self.command_line is not None

    @property
    def extra_fields(self) -> dict[str, str]:
        """Keys that are stored but not interpreted."""
        return {k: v for k, v in self.fields.items() if k not in RECOGNIZED_KEYS}


class ScanFailure(BaseModel):
    """A directory or file that could not be read during a scan."""

    path: str = Field(description="Path that failed")
    kind: Literal["directory", "file"] = Field(description="What was being read")
    error: str = Field(description="Error message reported by the OS")

    @classmethod
    def from_error(cls, path: str, kind: Literal["directory", "file"], error: OSError) -> "ScanFailure":
        message = error.strerror or str(error)
        return cls(path=str(path), kind=kind, error=message)


class ScanReport(BaseModel):
    """Aggregated result of scanning one or more application directories."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "schema_version": "0.1",
                "roots": ["/usr/share/applications"],
                "timestamp": "2026-02-05T10:30:00Z",
                "entries": [],
                "failures": []
            }
        }
    )

    schema_version: str = Field(
        default="0.1",
        description="Schema version for compatibility tracking"
    )
    roots: list[str] = Field(default_factory=list, description="Scanned directories")
    timestamp: str = Field(description="Scan timestamp in ISO-8601 format")
    entries: list[DesktopEntry] = Field(default_factory=list, description="Discovered entries")
    failures: list[ScanFailure] = Field(
        default_factory=list,
        description="Directories and files that could not be read"
    )

    @classmethod
    def create(
        cls,
        roots: list[str],
        entries: list[DesktopEntry] | None = None,
        failures: list[ScanFailure] | None = None
    ) -> "ScanReport":
        """Create a new scan report with current timestamp."""
        return cls(
            roots=roots,
            timestamp=datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
            entries=entries or [],
            failures=failures or []
        )

    def sorted_entries(self) -> list[DesktopEntry]:
        """Return entries sorted case-insensitively by name, then by path."""
        return sorted(self.entries, key=lambda e: (e.name.casefold(), e.source_path))

    def visible_entries(self) -> list[DesktopEntry]:
        return [e for e in self.sorted_entries() if e.show]

    def summary(self) -> dict[str, int]:
        """Get summary counts of the scanned entries."""
        visible = sum(1 for e in self.entries if e.show)
        return {
            "total": len(self.entries),
            "visible": visible,
            "hidden": len(self.entries) - visible,
            "launchable": sum(1 for e in self.entries if e.launchable),
            "failures": len(self.failures),
        }
