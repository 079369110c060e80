"""Ordered, user-editable list of merge entries."""

from __future__ import annotations

import os
import re
from typing import Iterator, List, Optional, Sequence, Tuple

from .core import (
    DEFAULT_CONFIG,
    EngineConfig,
    Entry,
    MergeResult,
    UnsupportedFormatError,
    merge_files,
)


class NothingToMergeError(Exception):
    """Raised when a merge is requested but no entry is included."""


def natural_key(value: str) -> List[object]:
    """Sort helper that treats digits numerically: file2 < file10 < file100."""

    return [int(text) if text.isdigit() else text.lower() for text in re.split(r"(\d+)", value)]


def discover_inputs(folder: str, extensions: Sequence[str], recursive: bool = False) -> List[str]:
    """Return files within *folder* whose extension is in *extensions*, naturally sorted."""

    folder = os.path.abspath(folder)
    matches: List[str] = []

    if recursive:
        for root, _, files in os.walk(folder):
            for filename in files:
                if os.path.splitext(filename)[1] in extensions:
                    matches.append(os.path.join(root, filename))
    else:
        for filename in os.listdir(folder):
            path = os.path.join(folder, filename)
            if os.path.isfile(path) and os.path.splitext(filename)[1] in extensions:
                matches.append(path)

    return sorted(matches, key=lambda path: natural_key(os.path.relpath(path, folder)))


class EntrySelection:
    """The caller-owned list that entries are added to, reordered in and removed from."""

    def __init__(self, config: Optional[EngineConfig] = None) -> None:
        self.config = config or DEFAULT_CONFIG
        self._entries: List[Entry] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Entry]:
        return iter(self._entries)

    def __getitem__(self, index: int) -> Entry:
        return self._entries[index]

    @property
    def entries(self) -> Tuple[Entry, ...]:
        return tuple(self._entries)

    @property
    def included_count(self) -> int:
        return sum(1 for entry in self._entries if entry.included)

    def add_file(self, path: str) -> Entry:
        if os.path.splitext(path)[1] not in self.config.accepted_extensions:
            raise UnsupportedFormatError(path)
        if not os.path.isfile(path):
            raise FileNotFoundError(path)
        entry = Entry.from_path(path)
        self._entries.append(entry)
        return entry

    def add_folder(self, folder: str, recursive: bool = False) -> int:
        """Add every recognized file in *folder*; return how many were added."""

        if not os.path.isdir(folder):
            raise NotADirectoryError(folder)
        paths = discover_inputs(folder, self.config.accepted_extensions, recursive=recursive)
        self._entries.extend(Entry.from_path(path) for path in paths)
        return len(paths)

    def remove(self, index: int) -> Entry:
        return self._entries.pop(index)

    def _swap(self, first: int, second: int) -> bool:
        if not (0 <= first < len(self._entries) and 0 <= second < len(self._entries)):
            return False
        self._entries[first], self._entries[second] = self._entries[second], self._entries[first]
        return True

    def move_up(self, index: int) -> bool:
        return self._swap(index, index - 1)

    def move_down(self, index: int) -> bool:
        return self._swap(index, index + 1)

    def set_included(self, index: int, included: bool) -> None:
        entry = self._entries[index]
        self._entries[index] = Entry(included=included, display_name=entry.display_name, path=entry.path)

    def merge(self, output_path: str, skip_unreadable: bool = False) -> MergeResult:
        """Merge the current selection, refusing when nothing is included."""

        if self.included_count == 0:
            raise NothingToMergeError("No files are selected for merging.")
        return merge_files(
            self.entries,
            output_path,
            config=self.config,
            skip_unreadable=skip_unreadable,
        )
