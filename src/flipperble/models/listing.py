"""Directory listing results."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .enums import FileType

if TYPE_CHECKING:
    from ..protocol.messages import StorageFile


@dataclass(frozen=True, slots=True)
class FileEntry:
    """One file or directory on the device.

    Attributes:
        name: Entry name (no parent path)
        type: FileType, or the raw int for unknown types
        size: Size in bytes; None for directories
    """

    name: str
    type: FileType | int = FileType.FILE
    size: int | None = None

    @property
    def is_dir(self) -> bool:
        return self.type == FileType.DIR

    @classmethod
    def from_storage_file(cls, file: StorageFile) -> FileEntry:
        is_dir = file.type == FileType.DIR
        return cls(
            name=file.name,
            type=file.type,
            size=None if is_dir else file.size,
        )


@dataclass(frozen=True, slots=True)
class DirectoryListing:
    """Contents of one device directory, directories first.

    Both groups are sorted by name in ascending code point order.
    """

    path: str
    directories: tuple[FileEntry, ...] = ()
    files: tuple[FileEntry, ...] = ()

    @classmethod
    def from_entries(cls, path: str, entries: Iterable[FileEntry]) -> DirectoryListing:
        """Partition entries into directories and files and sort each by name."""
        directories = []
        files = []
        for entry in entries:
            if entry.is_dir:
                directories.append(entry)
            else:
                files.append(entry)

        directories.sort(key=lambda e: e.name)
        files.sort(key=lambda e: e.name)
        return cls(path=path, directories=tuple(directories), files=tuple(files))

    def __iter__(self) -> Iterator[FileEntry]:
        yield from self.directories
        yield from self.files

    def __len__(self) -> int:
        return len(self.directories) + len(self.files)
