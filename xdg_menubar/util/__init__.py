"""Utility module for xdg-menubar."""

from .fs import ChildInfo, EntryType, enumerate_children

__all__ = ["ChildInfo", "EntryType", "enumerate_children"]
