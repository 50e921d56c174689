"""Batched directory enumeration."""

import os
from dataclasses import dataclass
from enum import Enum
from typing import Iterator


DEFAULT_BATCH_SIZE = 100


class EntryType(str, Enum):
    """Filesystem classification of a directory child."""
    
    REGULAR = "REGULAR"
    DIRECTORY = "DIRECTORY"
    OTHER = "OTHER"


@dataclass(frozen=True)
class ChildInfo:
    """One child returned by a directory listing."""
    
    name: str
    entry_type: EntryType
    path: str


def classify(entry: os.DirEntry) -> EntryType:
    """
    Classify a directory entry, following symlinks.
    
    Broken links, sockets, fifos and devices are reported as OTHER.
    """
    try:
        if entry.is_file():
            return EntryType.REGULAR
        if entry.is_dir():
            return EntryType.DIRECTORY
    except OSError:
        pass
    return EntryType.OTHER


def enumerate_children(
    directory: str | os.PathLike,
    batch_size: int = DEFAULT_BATCH_SIZE
) -> Iterator[list[ChildInfo]]:
    """
    Enumerate a directory in batches of at most ``batch_size`` children.
    
    Children are yielded in the order the operating system returns them.
    Iteration ends when the listing is exhausted.
    
    Args:
        directory: Directory to list
        batch_size: Maximum number of children per batch
    
    Yields:
        Non-empty lists of ChildInfo
    
    Raises:
        OSError: If the directory cannot be opened or read
    
    Example:
        >>> for batch in enumerate_children("/usr/share/applications"):
        ...     print(len(batch))
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be positive, got {batch_size}")
    
    with os.scandir(directory) as it:
        batch: list[ChildInfo] = []
        for entry in it:
            batch.append(ChildInfo(entry.name, classify(entry), entry.path))
            if len(batch) >= batch_size:
                yield batch
                batch = []
        if batch:
            yield batch
