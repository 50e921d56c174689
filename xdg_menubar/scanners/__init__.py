"""Scanners module for discovering desktop entries."""

from .desktop import DirectoryScanner, ScanAccumulator

__all__ = ["DirectoryScanner", "ScanAccumulator"]
