"""Candidate enumeration under configured source roots.

Each root is walked depth first. The root itself is yielded first, then the
entries of every directory in name order, descending into a subdirectory as
soon as it is yielded. Unreadable entries are logged and skipped.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
import itertools
import logging
import os
from pathlib import Path

from sfbackup.models import Candidate, EntryKind


log = logging.getLogger("sfbackup.collector")


def _entry_kind(entry: os.DirEntry[str]) -> EntryKind:
    if entry.is_dir():
        return EntryKind.DIRECTORY
    if entry.is_file():
        return EntryKind.FILE
    return EntryKind.OTHER


def _root_kind(root: Path) -> EntryKind | None:
    try:
        if root.is_dir():
            return EntryKind.DIRECTORY
        if root.is_file():
            return EntryKind.FILE
    except OSError:
        return None
    return None


def _sorted_entries(directory: Path) -> list[os.DirEntry[str]]:
    with os.scandir(directory) as iterator:
        return sorted(iterator, key=lambda entry: entry.name)


def _walk(
    directory: Path,
    source_root: Path,
    follow_symlinks: bool,
    counter: Iterator[int],
    ancestors: set[str],
) -> Iterator[Candidate]:
    real = os.path.realpath(directory)
    if real in ancestors:
        log.warning("Skipping directory %s, it loops back to an ancestor", directory)
        return

    try:
        entries = _sorted_entries(directory)
    except OSError as exc:
        log.warning("Error obtaining directory entry %s: %s", directory, exc)
        return

    ancestors.add(real)
    try:
        yield from _walk_entries(entries, source_root, follow_symlinks, counter, ancestors)
    finally:
        ancestors.discard(real)


def _walk_entries(
    entries: list[os.DirEntry[str]],
    source_root: Path,
    follow_symlinks: bool,
    counter: Iterator[int],
    ancestors: set[str],
) -> Iterator[Candidate]:
    for entry in entries:
        path = Path(entry.path)
        try:
            kind = _entry_kind(entry)
            descend = kind is EntryKind.DIRECTORY and (follow_symlinks or not entry.is_symlink())
        except OSError as exc:
            log.warning("Error obtaining directory entry %s: %s", path, exc)
            continue

        yield Candidate(path=path, source_root=source_root, kind=kind, order=next(counter))

        if descend:
            yield from _walk(path, source_root, follow_symlinks, counter, ancestors)


def collect_candidates(
    source_root: Path,
    follow_symlinks: bool = False,
    counter: Iterator[int] | None = None,
) -> Iterator[Candidate]:
    """Yield every entry at or below ``source_root`` (the root included)."""
    counter = counter if counter is not None else itertools.count()

    kind = _root_kind(source_root)
    if kind is None:
        log.warning("Error obtaining directory entry %s: not found or unreadable", source_root)
        return

    yield Candidate(path=source_root, source_root=source_root, kind=kind, order=next(counter))
    if kind is EntryKind.DIRECTORY:
        yield from _walk(source_root, source_root, follow_symlinks, counter, set())


def collect_all(source_roots: Iterable[Path], follow_symlinks: bool = False) -> Iterator[Candidate]:
    counter = itertools.count()
    for source_root in source_roots:
        yield from collect_candidates(source_root, follow_symlinks=follow_symlinks, counter=counter)
