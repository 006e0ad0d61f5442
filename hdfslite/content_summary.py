"""Summaries of the space and names used by a tree in HDFS."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


def _signed64(value: Any) -> int:
    number = int(value or 0)
    if number >= 1 << 63:
        number -= 1 << 64
    return number


@dataclass(frozen=True)
class ContentSummary:
    """Information about a whole file or directory tree, from the namenode."""

    name: str
    summary: Mapping[str, Any] = field(default_factory=dict)

    def size(self) -> int:
        """Total size of the tree, including subdirectories."""
        return _signed64(self.summary.get("length"))

    def size_after_replication(self) -> int:
        """Total replicated size of the tree: its on-disk footprint."""
        return _signed64(self.summary.get("space_consumed"))

    def file_count(self) -> int:
        """Number of files in the tree; 1 if the path is a file."""
        return _signed64(self.summary.get("file_count"))

    def directory_count(self) -> int:
        """Number of directories in the tree, including the root; 0 for a file."""
        return _signed64(self.summary.get("directory_count"))

    def name_quota(self) -> int:
        """The configured limit on the number of names under the path."""
        return _signed64(self.summary.get("quota"))

    def space_quota(self) -> int:
        """The configured limit on the space used under the path."""
        return _signed64(self.summary.get("space_quota"))