"""Application menu discovery from XDG desktop entry files."""

__version__ = "0.3.0"
