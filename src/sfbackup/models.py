from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


FILE_ATTRIBUTE_READONLY = 0x00000001
FILE_ATTRIBUTE_DIRECTORY = 0x00000010


class EntryKind(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"
    OTHER = "other"


class MetadataState(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class Candidate:
    path: Path
    source_root: Path
    kind: EntryKind
    order: int

    @property
    def is_dir(self) -> bool:
        return self.kind is EntryKind.DIRECTORY

    @property
    def is_file(self) -> bool:
        return self.kind is EntryKind.FILE


@dataclass(frozen=True, slots=True)
class FileMetadataSnapshot:
    state: MetadataState
    attributes: int = 0
    creation_time: float = 0.0
    access_time: float = 0.0
    last_write_time: float = 0.0
    size: int = 0

    @classmethod
    def absent(cls) -> "FileMetadataSnapshot":
        return cls(state=MetadataState.ABSENT)

    @classmethod
    def unknown(cls) -> "FileMetadataSnapshot":
        return cls(state=MetadataState.UNKNOWN)

    @property
    def exists(self) -> bool:
        return self.state is MetadataState.PRESENT

    @property
    def kind(self) -> EntryKind | None:
        if not self.exists:
            return None
        if self.attributes & FILE_ATTRIBUTE_DIRECTORY:
            return EntryKind.DIRECTORY
        return EntryKind.FILE

    @property
    def read_only(self) -> bool:
        return bool(self.attributes & FILE_ATTRIBUTE_READONLY)

    def in_sync_with(self, other: "FileMetadataSnapshot") -> bool:
        if not (self.exists and other.exists):
            return False
        same_mtime = int(self.last_write_time) == int(other.last_write_time)
        return same_mtime and self.size == other.size


class CopyAction(str, Enum):
    COPY_NEW = "copy_new"
    OVERWRITE = "overwrite"
    SKIP_IN_SYNC = "skip_in_sync"


@dataclass(slots=True)
class VolumeTally:
    counts: dict[str, int] = field(default_factory=dict)

    def register(self, designator: str) -> None:
        self.counts.setdefault(designator, 0)

    def increment(self, designator: str) -> None:
        self.counts[designator] = self.counts.get(designator, 0) + 1

    def items(self) -> list[tuple[str, int]]:
        return sorted(self.counts.items())


@dataclass(slots=True)
class RunStats:
    candidates: int = 0
    excluded: int = 0
    directories_created: int = 0
    directory_failures: int = 0
    copied: int = 0
    bytes_copied: int = 0
    skipped: int = 0
    failed: int = 0
    elapsed_seconds: float = 0.0

    @property
    def partial_failures(self) -> bool:
        return bool(self.failed or self.directory_failures)


@dataclass(slots=True)
class RunContext:
    volume_tally: VolumeTally = field(default_factory=VolumeTally)
    stats: RunStats = field(default_factory=RunStats)
