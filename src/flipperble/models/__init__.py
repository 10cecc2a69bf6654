"""Data models for Flipper devices."""

from .enums import (
    CommandStatus,
    FileType,
    describe_status,
    file_type_from_value,
    status_from_value,
)
from .listing import DirectoryListing, FileEntry

__all__ = [
    "CommandStatus",
    "DirectoryListing",
    "FileEntry",
    "FileType",
    "describe_status",
    "file_type_from_value",
    "status_from_value",
]
