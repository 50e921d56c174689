"""Configuration file management for xdg-menubar."""

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml


def _xdg_data_home() -> Path:
    value = os.environ.get("XDG_DATA_HOME")
    return Path(value) if value else Path.home() / ".local" / "share"


def _xdg_data_dirs() -> list[Path]:
    value = os.environ.get("XDG_DATA_DIRS") or "/usr/local/share:/usr/share"
    return [Path(p) for p in value.split(":") if p]


def default_application_dirs() -> list[str]:
    """
    Directories holding .desktop files, most important first.

    Follows the XDG Base Directory order: $XDG_DATA_HOME, then each entry of
    $XDG_DATA_DIRS, each with an ``applications`` subdirectory.
    """
    bases = [_xdg_data_home()] + _xdg_data_dirs()
    return [str(base / "applications") for base in bases]


def default_icon_dirs() -> list[str]:
    """Directories searched for icon files, most important first."""
    dirs = [Path.home() / ".icons", _xdg_data_home() / "icons"]
    dirs += [base / "icons" for base in _xdg_data_dirs()]
    dirs.append(Path("/usr/share/pixmaps"))
    return [str(d) for d in dirs]


@dataclass
class Config:
    """Configuration for the menubar scanner."""

    # Terminal which applications that need a terminal would open in
    terminal: str = "xterm"

    # Name of the window manager matched against OnlyShowIn
    wm_name: str = "awesome"

    # Directory enumeration
    batch_size: int = 100
    max_workers: int = 8

    application_dirs: list[str] = field(default_factory=default_application_dirs)
    icon_dirs: list[str] = field(default_factory=default_icon_dirs)

    # Report NoDisplay/OnlyShowIn entries as well
    include_hidden: bool = False

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        for name in ("terminal", "wm_name"):
            value = getattr(self, name)
            if not isinstance(value, str):
                raise ValueError(f"{name} must be a string, got {type(value).__name__}")
        for name in ("batch_size", "max_workers"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer, got {type(value).__name__}")
        for name in ("application_dirs", "icon_dirs"):
            value = getattr(self, name)
            if not isinstance(value, list) or not all(isinstance(d, str) for d in value):
                raise ValueError(f"{name} must be a list of paths")
        if not isinstance(self.include_hidden, bool):
            raise ValueError("include_hidden must be true or false")

        if not self.terminal.strip():
            raise ValueError("terminal must not be empty")
        if not self.wm_name:
            raise ValueError("wm_name must not be empty")
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {self.batch_size}")
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be positive, got {self.max_workers}")


def load_config(config_path: Path | str | None = None) -> Config:
    """
    Load configuration from file.

    Args:
        config_path: Path to config file. If None, checks default locations:
            1. ~/.xdg-menubar.yaml
            2. ~/.xdg-menubar.yml
            3. ~/.config/xdg-menubar/config.yaml
            4. ~/.config/xdg-menubar/config.yml

    Returns:
        Config object with loaded settings (or defaults if no config found)

    Raises:
        FileNotFoundError: If an explicit config path does not exist
        ValueError: If the file cannot be parsed or holds invalid settings
    """
    if config_path:
        path = Path(config_path).expanduser()
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        config_file = path
    else:
        default_paths = [
            Path.home() / ".xdg-menubar.yaml",
            Path.home() / ".xdg-menubar.yml",
            Path.home() / ".config" / "xdg-menubar" / "config.yaml",
            Path.home() / ".config" / "xdg-menubar" / "config.yml",
        ]

        config_file = None
        for path in default_paths:
            if path.exists():
                config_file = path
                break

        if not config_file:
            return Config()

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError("top level must be a mapping")
        return Config(**data)
    except (OSError, yaml.YAMLError, TypeError, ValueError) as e:
        raise ValueError(f"Failed to load config from {config_file}: {e}") from e


def save_example_config(output_path: Path | str) -> None:
    """
    Save an example configuration file with all options documented.

    Args:
        output_path: Where to save the example config
    """
    example = """# xdg-menubar configuration file
# Place at ~/.xdg-menubar.yaml or ~/.config/xdg-menubar/config.yaml

# Terminal used for entries with Terminal=true (runs "<terminal> -e <command>")
terminal: xterm

# Window manager name matched against OnlyShowIn
wm_name: awesome

# Entries fetched per directory listing round-trip
batch_size: 100

# Directories scanned concurrently
max_workers: 8

# Directories holding .desktop files (first wins on duplicate desktop IDs)
application_dirs:
  - ~/.local/share/applications
  - /usr/local/share/applications
  - /usr/share/applications

# Directories searched for icons
icon_dirs:
  - ~/.icons
  - /usr/share/icons
  - /usr/share/pixmaps

# Also report entries hidden by NoDisplay or OnlyShowIn
include_hidden: false
"""

    path = Path(output_path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(example)
