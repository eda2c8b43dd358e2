from __future__ import annotations

import logging
import os
from pathlib import Path
import stat
from typing import Protocol

from sfbackup.models import (
    FILE_ATTRIBUTE_DIRECTORY,
    FILE_ATTRIBUTE_READONLY,
    FileMetadataSnapshot,
    MetadataState,
)


log = logging.getLogger("sfbackup.metadata")


class MetadataProvider(Protocol):
    def snapshot(self, path: Path) -> FileMetadataSnapshot: ...

    def clear_read_only(self, path: Path) -> None: ...


def _attributes_from_stat(result: os.stat_result) -> int:
    native = getattr(result, "st_file_attributes", None)
    if native is not None:
        return int(native)

    attributes = 0
    if stat.S_ISDIR(result.st_mode):
        attributes |= FILE_ATTRIBUTE_DIRECTORY
    if not result.st_mode & stat.S_IWUSR:
        attributes |= FILE_ATTRIBUTE_READONLY
    return attributes


class OsMetadataProvider:
    """Metadata from ``os.stat``; failures collapse to ABSENT or UNKNOWN snapshots."""

    def snapshot(self, path: Path) -> FileMetadataSnapshot:
        try:
            result = os.stat(path)
        except FileNotFoundError:
            return FileMetadataSnapshot.absent()
        except OSError as exc:
            log.warning("Metadata unknown for %s: %s", path, exc)
            return FileMetadataSnapshot.unknown()

        creation_time = getattr(result, "st_birthtime", result.st_ctime)
        return FileMetadataSnapshot(
            state=MetadataState.PRESENT,
            attributes=_attributes_from_stat(result),
            creation_time=creation_time,
            access_time=result.st_atime,
            last_write_time=result.st_mtime,
            size=result.st_size,
        )

    def clear_read_only(self, path: Path) -> None:
        mode = os.stat(path).st_mode
        os.chmod(path, stat.S_IMODE(mode) | stat.S_IWRITE)
